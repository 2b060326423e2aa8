"""Clients for the text-generation engine that proposes hashtags."""
from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import Any, Protocol

import httpx
from jinja2 import Template

from hashgen.models.errors import UnparseableUpstreamPayload, UpstreamUnavailable


logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://127.0.0.1:11434"
DEFAULT_TIMEOUT_SECONDS = 100.0
DEFAULT_LANGUAGE = "Portuguese"

HASHTAG_PROMPT = Template(
    """
Generate exactly {{ count }} hashtags in {{ language }}, without spaces and without duplicates.
Respond with ONLY a JSON object in this exact structure:
{"model": "{{ model }}", "count": {{ count }}, "hashtags": ["#hashtag1", "#hashtag2", ...]}

Topic: {{ text }}
""".strip()
)


class SupportsHashtagEngine(Protocol):
    """Protocol describing the engine interface consumed by the HTTP layer and CLI."""

    def generate(self, text: str, *, count: int, model: str) -> Any:
        """Return the raw, untyped engine payload for ``text``."""


def render_prompt(text: str, *, count: int, model: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Render the hashtag request prompt sent to the engine."""

    return HASHTAG_PROMPT.render(text=text, count=count, model=model, language=language)


class OllamaHashtagEngine:
    """Ollama ``/api/generate`` client returning the decoded JSON body untouched."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        language: str = DEFAULT_LANGUAGE,
    ) -> None:
        self.base_url = (base_url or DEFAULT_OLLAMA_URL).rstrip("/")
        self.timeout = timeout
        self.language = language

    def generate(self, text: str, *, count: int, model: str) -> Any:
        payload = {
            "model": model,
            "prompt": render_prompt(text, count=count, model=model, language=self.language),
            "stream": False,
            "format": "json",
        }
        try:
            response = httpx.post(
                f"{self.base_url}/api/generate",
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "Ollama request failed",
                extra={"event": "engine.error", "model": model, "reason": type(exc).__name__},
            )
            raise UpstreamUnavailable(f"Failed to query the inference engine: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            logger.warning(
                "Ollama returned a body that is not JSON",
                extra={"event": "engine.invalid_json", "model": model},
            )
            raise UnparseableUpstreamPayload(
                "The inference engine response could not be decoded as JSON."
            ) from exc


@dataclass(slots=True)
class LocalHashtagResponder:
    """Deterministic offline engine that echoes the source text as prose."""

    def generate(self, text: str, *, count: int, model: str) -> Any:
        return {"model": model, "response": text, "done": True}


def _float_from_env(name: str, default: float) -> float:
    raw_value = os.getenv(name)
    if not raw_value:
        return default
    try:
        return float(raw_value)
    except ValueError:
        logger.warning("Invalid %s value %r; using %s", name, raw_value, default, extra={"event": "config.invalid"})
        return default


def create_engine(provider: str | None = None) -> SupportsHashtagEngine:
    """Construct the engine client for ``provider`` or ``HASHGEN_LLM_PROVIDER``."""

    provider = (provider or os.getenv("HASHGEN_LLM_PROVIDER") or "ollama").strip().lower()

    if provider == "ollama":
        return OllamaHashtagEngine(
            base_url=os.getenv("HASHGEN_OLLAMA_URL"),
            timeout=_float_from_env("HASHGEN_OLLAMA_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            language=os.getenv("HASHGEN_LANGUAGE") or DEFAULT_LANGUAGE,
        )

    # Fallback for local dev and testing
    return LocalHashtagResponder()


__all__ = [
    "HASHTAG_PROMPT",
    "LocalHashtagResponder",
    "OllamaHashtagEngine",
    "SupportsHashtagEngine",
    "create_engine",
    "render_prompt",
]
