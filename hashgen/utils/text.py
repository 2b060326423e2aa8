"""Utilities for turning free-form source text into hashtag keywords."""
from __future__ import annotations

import re
from typing import Any


_STRIPPED_PUNCTUATION = ".,:;!?\"'()[]"
_PUNCTUATION_TABLE = str.maketrans("", "", _STRIPPED_PUNCTUATION)
_SEPARATOR_RE = re.compile(r"[ \t\n\r\-_]+")


def extract_keywords(value: Any) -> list[str]:
    """Tokenise ``value`` into an ordered list of unique, lowercase keywords.

    A fixed set of punctuation characters is removed before splitting on
    spaces, tabs, line breaks, hyphens and underscores. Tokens of a single
    character are discarded and the first occurrence of each keyword wins.
    Non-string inputs return an empty list.
    """

    if not isinstance(value, str):
        return []

    text = value.translate(_PUNCTUATION_TABLE)
    keywords: list[str] = []
    seen: set[str] = set()
    for token in _SEPARATOR_RE.split(text):
        keyword = token.lower()
        if len(keyword) <= 1 or keyword in seen:
            continue
        seen.add(keyword)
        keywords.append(keyword)
    return keywords


def to_alphanumeric(value: str) -> str:
    """Return ``value`` lowercased with every non-alphanumeric character removed."""

    return "".join(char for char in value if char.isalnum()).lower()


__all__ = ["extract_keywords", "to_alphanumeric"]
