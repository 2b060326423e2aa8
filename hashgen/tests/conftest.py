"""Shared fixtures and helpers for the test suite."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from hashgen.models.hashtag import GenerationRequest


class RecordingEngine:
    """Engine stub returning a fixed payload and recording every call it receives."""

    def __init__(self, payload: Any) -> None:
        self.payload = payload
        self.calls: list[dict[str, Any]] = []

    def generate(self, text: str, *, count: int, model: str) -> Any:
        self.calls.append({"text": text, "count": count, "model": model})
        return self.payload


class FailingEngine:
    """Engine stub that raises ``error`` on every call."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    def generate(self, text: str, *, count: int, model: str) -> Any:
        raise self.error


@pytest.fixture()
def recording_engine() -> Callable[[Any], RecordingEngine]:
    """Return a factory building :class:`RecordingEngine` instances."""

    return RecordingEngine


@pytest.fixture()
def failing_engine() -> Callable[[Exception], FailingEngine]:
    """Return a factory building :class:`FailingEngine` instances."""

    return FailingEngine


@pytest.fixture()
def make_request() -> Callable[..., GenerationRequest]:
    """Return a helper creating validated generation requests."""

    def _factory(text: str, count: int, model: str = "llama3.2:3b") -> GenerationRequest:
        return GenerationRequest(source_text=text, requested_count=count, model=model)

    return _factory
