"""Domain models for hashtag generation requests, engine payloads and results."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union


MARKER = "#"
DEFAULT_MODEL = "llama3.2:3b"
MIN_COUNT = 1
MAX_COUNT = 30


def _default_datetime() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class GenerationRequest:
    """A validated request to generate ``requested_count`` hashtags for ``source_text``."""

    source_text: str
    requested_count: int
    model: str = DEFAULT_MODEL

    def __post_init__(self) -> None:
        if not MIN_COUNT <= self.requested_count <= MAX_COUNT:
            raise ValueError(f"Requested count must be between {MIN_COUNT} and {MAX_COUNT}.")


@dataclass(slots=True, frozen=True)
class DirectHashtagArray:
    """Engine payload that already carries a ``hashtags`` array."""

    items: tuple[Any, ...]


@dataclass(slots=True, frozen=True)
class NestedJSONString:
    """A ``hashtags`` array found inside a JSON document embedded in a string."""

    items: tuple[Any, ...]


@dataclass(slots=True, frozen=True)
class ProseText:
    """Free text returned by the engine instead of structured JSON."""

    text: str


@dataclass(slots=True, frozen=True)
class Unparseable:
    """Payload with no recognisable hashtag array or text."""

    raw: Any = None


EnginePayload = Union[DirectHashtagArray, NestedJSONString, ProseText, Unparseable]


@dataclass(slots=True, frozen=True)
class HashtagResult:
    """The normalised hashtags returned to callers and retained in the history log."""

    model: str
    hashtags: tuple[str, ...]
    created_at: datetime = field(default_factory=_default_datetime, compare=False)

    @property
    def count(self) -> int:
        return len(self.hashtags)

    def as_dict(self) -> dict[str, object]:
        """Serialise the result for JSON responses."""

        return {
            "model": self.model,
            "count": self.count,
            "hashtags": list(self.hashtags),
        }


__all__ = [
    "DEFAULT_MODEL",
    "DirectHashtagArray",
    "EnginePayload",
    "GenerationRequest",
    "HashtagResult",
    "MARKER",
    "MAX_COUNT",
    "MIN_COUNT",
    "NestedJSONString",
    "ProseText",
    "Unparseable",
]
