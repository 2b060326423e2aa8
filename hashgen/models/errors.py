"""Error taxonomy surfaced by hashtag generation."""
from __future__ import annotations


class HashtagGenerationError(RuntimeError):
    """Base class for failures the HTTP layer and CLI report to callers."""


class UpstreamUnavailable(HashtagGenerationError):
    """The inference engine could not be reached or returned a non-success status."""


class UnparseableUpstreamPayload(HashtagGenerationError):
    """The inference engine answered with a body that could not be decoded at all."""


class NoHashtagsProducible(HashtagGenerationError):
    """Neither the engine response nor the source text produced a single hashtag."""


__all__ = [
    "HashtagGenerationError",
    "NoHashtagsProducible",
    "UnparseableUpstreamPayload",
    "UpstreamUnavailable",
]
