"""Normalise candidate strings into canonical, case-insensitively unique hashtags."""
from __future__ import annotations

from typing import Iterable

from hashgen.models.hashtag import MARKER


def canonical_key(hashtag: str) -> str:
    """Return the key used to compare hashtags for uniqueness."""

    return hashtag.casefold()


def format_hashtag(candidate: str) -> str | None:
    """Return ``candidate`` in canonical form, or ``None`` when nothing usable remains."""

    trimmed = candidate.strip()
    if not trimmed:
        return None

    compact = "".join(trimmed.split())
    if not compact.startswith(MARKER):
        compact = f"{MARKER}{compact}"
    if compact == MARKER:
        return None
    return compact


def format_hashtags(candidates: Iterable[str]) -> list[str]:
    """Format ``candidates`` in order, dropping blanks and case-insensitive duplicates."""

    return dedupe(
        hashtag
        for hashtag in (format_hashtag(candidate) for candidate in candidates if isinstance(candidate, str))
        if hashtag is not None
    )


def dedupe(hashtags: Iterable[str]) -> list[str]:
    """Drop case-insensitive duplicates while keeping the first occurrence of each hashtag."""

    seen: set[str] = set()
    unique: list[str] = []
    for hashtag in hashtags:
        key = canonical_key(hashtag)
        if key in seen:
            continue
        seen.add(key)
        unique.append(hashtag)
    return unique


__all__ = ["canonical_key", "dedupe", "format_hashtag", "format_hashtags"]
