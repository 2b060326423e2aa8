"""Process-lifetime log of generated hashtag results."""
from __future__ import annotations

import threading

from hashgen.models.hashtag import HashtagResult


class HistoryLog:
    """Append-only, thread-safe record of results produced since the process started."""

    def __init__(self) -> None:
        self._entries: list[HashtagResult] = []
        self._lock = threading.Lock()

    def append(self, result: HashtagResult) -> None:
        with self._lock:
            self._entries.append(result)

    def entries(self) -> tuple[HashtagResult, ...]:
        """Return a snapshot of the log in insertion order."""

        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["HistoryLog"]
