"""Locate candidate hashtags inside the loosely structured payloads returned by the engine."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Mapping, Sequence

from hashgen.models.hashtag import (
    MARKER,
    DirectHashtagArray,
    EnginePayload,
    NestedJSONString,
    ProseText,
    Unparseable,
)


logger = logging.getLogger(__name__)

_TOKEN_DELIMITER_RE = re.compile(r"[\s,;]+")
_EDGE_PUNCTUATION_RE = re.compile(r"^[^\w]+|[^\w]+$")
_MIN_FREQUENCY_WORD_LENGTH = 3


def classify_payload(payload: Any) -> EnginePayload:
    """Map an untyped engine payload onto one of the known payload shapes."""

    if isinstance(payload, Mapping):
        hashtags = payload.get("hashtags")
        if _is_array(hashtags):
            return DirectHashtagArray(items=tuple(hashtags))
        response = payload.get("response")
        if isinstance(response, str):
            return _classify_text(response)
        return Unparseable(raw=payload)

    if isinstance(payload, str):
        return _classify_text(payload)

    return Unparseable(raw=payload)


def extract_candidates(payload: Any, requested_count: int) -> list[str]:
    """Return candidate hashtag strings found in ``payload``.

    Structured ``hashtags`` arrays win over embedded JSON strings, which win
    over ``#tokens`` scanned from prose. When prose has no marked tokens the
    most frequent words are used instead. Never raises: payloads without any
    usable content yield an empty list.
    """

    variant = payload if _is_variant(payload) else classify_payload(payload)

    if isinstance(variant, (DirectHashtagArray, NestedJSONString)):
        return _coerce_items(variant.items)

    if isinstance(variant, ProseText):
        candidates = scan_marked_tokens(variant.text)
        if candidates:
            return candidates
        logger.info(
            "No marked hashtags in engine prose; using keyword frequency",
            extra={"event": "extractor.frequency_fallback"},
        )
        return frequent_words(variant.text, limit=requested_count)

    logger.warning(
        "Engine payload has no recognisable hashtag content",
        extra={"event": "extractor.unparseable", "payload_type": type(variant.raw).__name__},
    )
    return []


def scan_marked_tokens(text: str) -> list[str]:
    """Return tokens starting with the marker character in order of appearance."""

    return [
        token
        for token in _TOKEN_DELIMITER_RE.split(text)
        if token.startswith(MARKER) and len(token) > len(MARKER)
    ]


def frequent_words(text: str, *, limit: int) -> list[str]:
    """Return the ``limit`` most frequent words of ``text`` as marker-prefixed candidates.

    Words are grouped case-insensitively; ties keep first-seen order.
    """

    if limit <= 0:
        return []

    counts: dict[str, int] = {}
    for raw_word in text.split():
        word = _EDGE_PUNCTUATION_RE.sub("", raw_word)
        if len(word) < _MIN_FREQUENCY_WORD_LENGTH:
            continue
        key = word.lower()
        counts[key] = counts.get(key, 0) + 1

    # sorted() is stable, so equal counts keep dict insertion (first-seen) order.
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [f"{MARKER}{word}" for word, _ in ranked[:limit]]


def _classify_text(text: str) -> EnginePayload:
    document = _parse_embedded_json(text)
    if isinstance(document, Mapping):
        hashtags = document.get("hashtags")
        if _is_array(hashtags):
            return NestedJSONString(items=tuple(hashtags))
    return ProseText(text=text)


def _parse_embedded_json(text: str) -> Any:
    stripped = text.strip()
    if not stripped:
        return None

    candidates: list[str] = []
    fenced = _strip_code_fence(stripped)
    if fenced:
        candidates.append(fenced)
    candidates.append(stripped)

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue

    return _scan_for_object(stripped)


def _strip_code_fence(text: str) -> str | None:
    if not text.startswith("```"):
        return None

    closing_index = text.rfind("```")
    if closing_index <= 0:
        return None

    first_linebreak = text.find("\n")
    if first_linebreak == -1 or first_linebreak > closing_index:
        content = text[3:closing_index]
    else:
        content = text[first_linebreak + 1 : closing_index]

    cleaned = content.strip()
    return cleaned or None


def _scan_for_object(text: str) -> dict[str, Any] | None:
    decoder = json.JSONDecoder()
    for index, char in enumerate(text):
        if char != "{":
            continue
        try:
            payload, _ = decoder.raw_decode(text, index)
        except json.JSONDecodeError:
            continue
        if isinstance(payload, dict):
            return payload
    return None


def _coerce_items(items: Sequence[Any]) -> list[str]:
    candidates: list[str] = []
    for item in items:
        if isinstance(item, str):
            candidates.append(item)
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            candidates.append(str(item))
    return candidates


def _is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _is_variant(value: Any) -> bool:
    return isinstance(value, (DirectHashtagArray, NestedJSONString, ProseText, Unparseable))


__all__ = [
    "classify_payload",
    "extract_candidates",
    "frequent_words",
    "scan_marked_tokens",
]
