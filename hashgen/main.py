"""FastAPI web application for the Hashtag Generator API"""

from __future__ import annotations

from functools import lru_cache
import logging
import os

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field, field_validator

from hashgen.models.errors import (
    HashtagGenerationError,
    NoHashtagsProducible,
    UnparseableUpstreamPayload,
    UpstreamUnavailable,
)
from hashgen.models.hashtag import DEFAULT_MODEL, MAX_COUNT, MIN_COUNT, GenerationRequest, HashtagResult
from hashgen.services.engine import SupportsHashtagEngine, create_engine
from hashgen.services.history import HistoryLog
from hashgen.services.pipeline import HashtagPipeline
from hashgen.services.rate_limit import RateLimiter


logger = logging.getLogger(__name__)
router = APIRouter()

_DEFAULT_RATE_LIMIT_MAX = 30
_DEFAULT_RATE_LIMIT_WINDOW = 60

_ERROR_STATUS: dict[type[HashtagGenerationError], tuple[int, str]] = {
    UpstreamUnavailable: (503, "Inference engine unavailable"),
    UnparseableUpstreamPayload: (502, "Inference engine returned an unreadable response"),
    NoHashtagsProducible: (500, "No hashtags could be produced"),
}


def _int_from_env(name: str, default: int) -> int:
    raw_value = os.getenv(name)
    if not raw_value:
        return default
    try:
        return int(raw_value)
    except ValueError:
        logger.warning("Invalid %s value %r; using %s", name, raw_value, default, extra={"event": "config.invalid"})
        return default


def _default_model() -> str:
    return (os.getenv("HASHGEN_DEFAULT_MODEL") or DEFAULT_MODEL).strip() or DEFAULT_MODEL


def _build_debug_detail(exc: Exception) -> dict[str, str]:
    """Return a serialisable mapping describing ``exc`` for debugging."""

    message = str(exc).strip()
    return {
        "type": type(exc).__name__,
        "message": message or "No exception message provided.",
    }


@lru_cache(maxsize=1)
def _cached_engine() -> SupportsHashtagEngine:
    """Create a singleton engine client for the configured provider."""

    return create_engine()


def get_engine() -> SupportsHashtagEngine:
    """FastAPI dependency returning the shared engine client."""

    return _cached_engine()


def get_history(request: Request) -> HistoryLog:
    """FastAPI dependency returning the application's history log."""

    return request.app.state.history


def get_pipeline(history: HistoryLog = Depends(get_history)) -> HashtagPipeline:
    """FastAPI dependency returning a pipeline that records into the history log."""

    return HashtagPipeline(history=history)


def get_rate_limiter(request: Request) -> RateLimiter:
    """FastAPI dependency returning the application's rate limiter."""

    return request.app.state.rate_limiter


def enforce_rate_limit(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    """Reject the request with HTTP 429 when the client exceeded its quota."""

    client_key = request.client.host if request.client else "anonymous"
    if not limiter.allow(client_key):
        logger.info("Rate limit exceeded", extra={"event": "hashtags.rate_limited", "client": client_key})
        raise HTTPException(status_code=429, detail="Too many requests; please retry later.")


class GenerateHashtagsRequest(BaseModel):
    """API payload submitted by clients requesting hashtags."""

    text: str = Field(..., description="Free-form text describing the topic.")
    count: int = Field(10, ge=MIN_COUNT, le=MAX_COUNT, description="Number of hashtags to return.")
    model: str = Field(default_factory=_default_model, description="Ollama model identifier.")

    @field_validator("text")
    @classmethod
    def _ensure_text_not_empty(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Text must not be empty.")
        return cleaned

    @field_validator("model")
    @classmethod
    def _ensure_model_not_empty(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Model must not be empty.")
        return cleaned

    def to_generation_request(self) -> GenerationRequest:
        return GenerationRequest(source_text=self.text, requested_count=self.count, model=self.model)


class HashtagResponse(BaseModel):
    """Structured response returned by the hashtag endpoints."""

    model: str = Field(..., description="Model that produced the hashtags.")
    count: int = Field(..., description="Number of hashtags returned.")
    hashtags: list[str] = Field(..., description="Hashtags in order of relevance.")

    @classmethod
    def from_result(cls, result: HashtagResult) -> "HashtagResponse":
        return cls(model=result.model, count=result.count, hashtags=list(result.hashtags))


@router.get("/healthz")
def healthz():
    return {"ok": True}


@router.get("/hashtags", response_model=list[HashtagResponse], tags=["Hashtags"])
def list_hashtags(history: HistoryLog = Depends(get_history)) -> list[HashtagResponse]:
    """Return every hashtag result generated since the service started."""

    return [HashtagResponse.from_result(result) for result in history.entries()]


@router.post(
    "/hashtags",
    response_model=HashtagResponse,
    tags=["Hashtags"],
    dependencies=[Depends(enforce_rate_limit)],
)
def generate_hashtags(
    payload: GenerateHashtagsRequest,
    engine: SupportsHashtagEngine = Depends(get_engine),
    pipeline: HashtagPipeline = Depends(get_pipeline),
) -> HashtagResponse:
    """Ask the engine for hashtags and normalise its answer to exactly ``count`` entries."""

    request = payload.to_generation_request()
    logger.info(
        "Hashtag request received",
        extra={
            "event": "hashtags.request",
            "model": request.model,
            "count": request.requested_count,
            "text_length": len(request.source_text),
        },
    )

    try:
        raw_payload = engine.generate(request.source_text, count=request.requested_count, model=request.model)
        result = pipeline.run(request, raw_payload)
    except HashtagGenerationError as exc:
        status_code, message = _ERROR_STATUS.get(type(exc), (500, "Hashtag generation failed"))
        logger.exception(message, extra={"event": "hashtags.error", "reason": type(exc).__name__})
        raise HTTPException(
            status_code=status_code,
            detail={
                "message": message,
                "debug": _build_debug_detail(exc),
            },
        ) from exc

    return HashtagResponse.from_result(result)


def create_app() -> FastAPI:
    """Build the application, its routes and the process-lifetime state it owns."""

    application = FastAPI(
        title="Hashtag Generator API",
        version="1.0.0",
        description="Generate hashtags for free-form text with a locally hosted Ollama model.",
    )
    application.state.history = HistoryLog()
    application.state.rate_limiter = RateLimiter(
        window_seconds=_int_from_env("HASHGEN_RATE_LIMIT_WINDOW", _DEFAULT_RATE_LIMIT_WINDOW),
        max_requests=_int_from_env("HASHGEN_RATE_LIMIT_MAX", _DEFAULT_RATE_LIMIT_MAX),
    )
    application.include_router(router)
    return application


app = create_app()
