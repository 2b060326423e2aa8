"""Deterministic generation of extra hashtags from source-text keywords."""
from __future__ import annotations

import logging
from itertools import count
from typing import Iterable, Iterator, Sequence

from hashgen.models.hashtag import MARKER
from hashgen.services.formatter import canonical_key
from hashgen.utils.text import to_alphanumeric


logger = logging.getLogger(__name__)

PLACEHOLDER_WORD = "hashtag"
PAIRS_PER_SUFFIX = 5


def synthesize_hashtags(
    keywords: Sequence[str],
    deficit: int,
    used: Iterable[str] = (),
) -> list[str]:
    """Return ``deficit`` new hashtags that collide with neither ``used`` nor each other.

    Keywords with no alphanumeric characters are ignored. With no keywords
    left the placeholder ``#hashtag``, ``#hashtag2``, ... is used.
    A single keyword gains an increasing numeric suffix. Two or more keywords
    are joined in rotating adjacent pairs and, after every five pairs, the
    suffix appended to later pairs grows by one so the supply of candidates
    never runs out.
    """

    if deficit <= 0:
        return []

    usable = [keyword for keyword in keywords if to_alphanumeric(keyword)]
    taken = {canonical_key(hashtag) for hashtag in used}
    produced: list[str] = []
    for raw in _raw_candidates(usable):
        hashtag = f"{MARKER}{to_alphanumeric(raw) or PLACEHOLDER_WORD}"
        key = canonical_key(hashtag)
        if key in taken:
            continue
        taken.add(key)
        produced.append(hashtag)
        if len(produced) == deficit:
            break

    logger.debug(
        "Synthesised fallback hashtags",
        extra={"event": "synthesizer.generated", "deficit": deficit, "keywords": len(usable)},
    )
    return produced


def _raw_candidates(keywords: Sequence[str]) -> Iterator[str]:
    if not keywords:
        return _suffixed(PLACEHOLDER_WORD)
    if len(keywords) == 1:
        return _suffixed(keywords[0])
    return _rotating_pairs(keywords)


def _suffixed(word: str) -> Iterator[str]:
    yield word
    for suffix in count(2):
        yield f"{word}{suffix}"


def _rotating_pairs(keywords: Sequence[str]) -> Iterator[str]:
    total = len(keywords)
    suffix = 1
    for index in count():
        pair = keywords[index % total] + keywords[(index + 1) % total]
        yield pair if suffix == 1 else f"{pair}{suffix}"
        if (index + 1) % PAIRS_PER_SUFFIX == 0:
            suffix += 1


__all__ = ["PLACEHOLDER_WORD", "synthesize_hashtags"]
