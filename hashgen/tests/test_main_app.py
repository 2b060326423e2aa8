"""Tests covering the FastAPI routes of the hashtag service."""

from __future__ import annotations

from typing import Any, Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from hashgen.main import app, create_app, get_engine, get_history, get_rate_limiter
from hashgen.models.errors import NoHashtagsProducible, UnparseableUpstreamPayload, UpstreamUnavailable
from hashgen.services.history import HistoryLog
from hashgen.services.rate_limit import RateLimiter


@pytest.fixture()
def client() -> Iterator[Callable[..., TestClient]]:
    """Provide a helper that returns a ``TestClient`` wired to a stub engine."""

    clients: list[TestClient] = []

    def _factory(
        engine: object,
        *,
        history: HistoryLog | None = None,
        limiter: RateLimiter | None = None,
    ) -> TestClient:
        shared_history = history if history is not None else HistoryLog()
        shared_limiter = limiter or RateLimiter(window_seconds=60, max_requests=1000)
        app.dependency_overrides[get_engine] = lambda: engine
        app.dependency_overrides[get_history] = lambda: shared_history
        app.dependency_overrides[get_rate_limiter] = lambda: shared_limiter
        test_client = TestClient(app)
        clients.append(test_client)
        return test_client

    yield _factory

    for created_client in clients:
        created_client.close()
    app.dependency_overrides.clear()


def test_generate_returns_exact_count(client: Callable[..., TestClient], recording_engine: Callable[[Any], Any]) -> None:
    engine = recording_engine({"hashtags": ["#viagem", "#viagem", "#praia"]})
    test_client = client(engine)

    response = test_client.post(
        "/hashtags",
        json={"text": "  viagem incrível pela praia ", "count": 4, "model": "llama3.2:3b"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "model": "llama3.2:3b",
        "count": 4,
        "hashtags": ["#viagem", "#praia", "#viagemincrível", "#incrívelpela"],
    }
    assert engine.calls == [{"text": "viagem incrível pela praia", "count": 4, "model": "llama3.2:3b"}]


def test_history_lists_previous_results(client: Callable[..., TestClient], recording_engine: Callable[[Any], Any]) -> None:
    history = HistoryLog()
    test_client = client(recording_engine({"response": "#sol #mar #areia"}), history=history)

    assert test_client.get("/hashtags").json() == []

    test_client.post("/hashtags", json={"text": "praia", "count": 2, "model": "m1"})
    test_client.post("/hashtags", json={"text": "praia", "count": 1, "model": "m2"})

    response = test_client.get("/hashtags")

    assert response.status_code == 200
    assert response.json() == [
        {"model": "m1", "count": 2, "hashtags": ["#sol", "#mar"]},
        {"model": "m2", "count": 1, "hashtags": ["#sol"]},
    ]
    assert len(history) == 2


def test_model_defaults_from_environment(
    monkeypatch: pytest.MonkeyPatch,
    client: Callable[..., TestClient],
    recording_engine: Callable[[Any], Any],
) -> None:
    monkeypatch.setenv("HASHGEN_DEFAULT_MODEL", "mistral")
    engine = recording_engine({"hashtags": ["#sol"]})
    test_client = client(engine)

    response = test_client.post("/hashtags", json={"text": "sol"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["model"] == "mistral"
    assert payload["count"] == 10
    assert engine.calls[0]["model"] == "mistral"


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({"text": "sol", "count": 0}, "greater than or equal to 1"),
        ({"text": "sol", "count": 31}, "less than or equal to 30"),
        ({"text": "   ", "count": 3}, "Text must not be empty"),
        ({"text": "sol", "count": 3, "model": " "}, "Model must not be empty"),
    ],
)
def test_invalid_requests_are_rejected(
    client: Callable[..., TestClient],
    recording_engine: Callable[[Any], Any],
    body: dict[str, Any],
    message: str,
) -> None:
    engine = recording_engine({"hashtags": ["#sol"]})
    test_client = client(engine)

    response = test_client.post("/hashtags", json=body)

    assert response.status_code == 422
    assert any(message in item["msg"] for item in response.json()["detail"])
    assert engine.calls == []


def test_upstream_failures_map_to_service_unavailable(
    client: Callable[..., TestClient], failing_engine: Callable[[Exception], Any]
) -> None:
    history = HistoryLog()
    test_client = client(failing_engine(UpstreamUnavailable("connection refused")), history=history)

    response = test_client.post("/hashtags", json={"text": "sol", "count": 2})

    assert response.status_code == 503
    assert response.json() == {
        "detail": {
            "message": "Inference engine unavailable",
            "debug": {"type": "UpstreamUnavailable", "message": "connection refused"},
        }
    }
    assert len(history) == 0


def test_unreadable_engine_body_maps_to_bad_gateway(
    client: Callable[..., TestClient], failing_engine: Callable[[Exception], Any]
) -> None:
    test_client = client(failing_engine(UnparseableUpstreamPayload("not json")))

    response = test_client.post("/hashtags", json={"text": "sol", "count": 2})

    assert response.status_code == 502
    assert response.json()["detail"]["debug"]["type"] == "UnparseableUpstreamPayload"


def test_text_without_keywords_returns_placeholders(
    client: Callable[..., TestClient], recording_engine: Callable[[Any], Any]
) -> None:
    test_client = client(recording_engine({"hashtags": []}))

    response = test_client.post("/hashtags", json={"text": "! ?", "count": 3})

    assert response.status_code == 200
    assert response.json()["hashtags"] == ["#hashtag", "#hashtag2", "#hashtag3"]


def test_no_producible_hashtags_maps_to_server_error(
    client: Callable[..., TestClient], failing_engine: Callable[[Exception], Any]
) -> None:
    test_client = client(failing_engine(NoHashtagsProducible("nothing to work with")))

    response = test_client.post("/hashtags", json={"text": "sol", "count": 5})

    assert response.status_code == 500
    assert response.json()["detail"]["message"] == "No hashtags could be produced"


def test_rate_limit_rejects_excess_requests(
    client: Callable[..., TestClient], recording_engine: Callable[[Any], Any]
) -> None:
    limiter = RateLimiter(window_seconds=60, max_requests=1)
    test_client = client(recording_engine({"hashtags": ["#sol"]}), limiter=limiter)

    assert test_client.post("/hashtags", json={"text": "sol", "count": 1}).status_code == 200
    response = test_client.post("/hashtags", json={"text": "sol", "count": 1})

    assert response.status_code == 429


def test_healthz_and_openapi_document(client: Callable[..., TestClient], recording_engine: Callable[[Any], Any]) -> None:
    test_client = client(recording_engine({}))

    assert test_client.get("/healthz").json() == {"ok": True}
    schema = test_client.get("/openapi.json").json()
    assert schema["info"]["title"] == "Hashtag Generator API"
    assert "/hashtags" in schema["paths"]


def test_create_app_builds_independent_instances_with_routes(recording_engine: Callable[[Any], Any]) -> None:
    first, second = create_app(), create_app()
    for application in (first, second):
        application.dependency_overrides[get_engine] = lambda: recording_engine({"hashtags": ["#sol"]})

    with TestClient(first) as first_client, TestClient(second) as second_client:
        response = first_client.post("/hashtags", json={"text": "sol", "count": 1})

        assert response.status_code == 200
        assert first_client.get("/hashtags").json() == [{"model": "llama3.2:3b", "count": 1, "hashtags": ["#sol"]}]
        assert second_client.get("/hashtags").json() == []
        assert second_client.get("/healthz").json() == {"ok": True}
