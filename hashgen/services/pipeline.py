"""Orchestration layer that turns an engine payload into an exact-count hashtag result."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from hashgen.models.errors import NoHashtagsProducible
from hashgen.models.hashtag import GenerationRequest, HashtagResult, Unparseable
from hashgen.services.extractor import classify_payload, extract_candidates
from hashgen.services.formatter import dedupe, format_hashtags
from hashgen.services.synthesizer import synthesize_hashtags
from hashgen.utils.text import extract_keywords


logger = logging.getLogger(__name__)


class SupportsHistory(Protocol):
    """Subset of :class:`HistoryLog` relied on by the pipeline."""

    def append(self, result: HashtagResult) -> None:
        """Retain ``result`` for later listing."""


@dataclass(slots=True)
class HashtagPipeline:
    """Coordinate extraction, formatting and fallback synthesis for one request."""

    history: SupportsHistory | None = None

    def run(self, request: GenerationRequest, payload: Any) -> HashtagResult:
        """Return exactly ``request.requested_count`` hashtags derived from ``payload``.

        Raises :class:`NoHashtagsProducible` when neither the payload nor the
        source text offers any material to build hashtags from.
        """

        target = request.requested_count
        variant = classify_payload(payload)
        if isinstance(variant, Unparseable):
            logger.warning(
                "Engine payload could not be interpreted; relying on source keywords",
                extra={"event": "pipeline.unparseable_payload", "model": request.model},
            )

        hashtags = format_hashtags(extract_candidates(variant, target))
        extracted = len(hashtags)

        if extracted < target:
            keywords = extract_keywords(request.source_text)
            if not hashtags and not request.source_text.strip():
                logger.warning(
                    "No hashtags could be produced",
                    extra={"event": "pipeline.empty", "model": request.model},
                )
                raise NoHashtagsProducible(
                    "No hashtags could be produced: the engine response was empty and so was the source text."
                )

            deficit = target - extracted
            synthesized = synthesize_hashtags(keywords, deficit, used=hashtags)
            hashtags = dedupe([*hashtags, *synthesized])
            logger.info(
                "Engine returned too few hashtags; synthesised the remainder",
                extra={
                    "event": "pipeline.synthesized",
                    "extracted": extracted,
                    "synthesized": len(synthesized),
                    "requested": target,
                },
            )

        result = HashtagResult(model=request.model, hashtags=tuple(hashtags[:target]))
        if self.history is not None:
            self.history.append(result)
        return result


__all__ = ["HashtagPipeline", "SupportsHistory"]
