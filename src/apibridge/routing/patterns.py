# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
URL pattern matching shared by transport resolution and mock lookup.

Pattern syntax: ``*`` is the only metacharacter and matches any run of
characters (including ``/`` and the empty string). Everything else is
literal and case-sensitive, and a pattern must match the whole URL.

Resolution against several patterns is order dependent: an exact string
match always wins, otherwise the first *registered* wildcard that matches
wins. There is no "most specific wildcard" rule, so callers that want a
narrower pattern to override a broader one must register it first.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Iterable, Iterator
from functools import lru_cache
from typing import Generic, TypeVar

V = TypeVar("V")

WILDCARD = "*"


@lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(".*".join(re.escape(part) for part in pattern.split(WILDCARD)), re.DOTALL)


def is_wildcard(pattern: str) -> bool:
    return WILDCARD in pattern


def matches(url: str, pattern: str) -> bool:
    """Return True when ``pattern`` matches ``url`` (exact, or full-string ``*`` glob)."""
    if url is None or pattern is None:
        return False
    if pattern == url:
        return True
    if not is_wildcard(pattern):
        return False
    return _compile(pattern).fullmatch(url) is not None


def resolve(url: str, patterns: Iterable[str]) -> str | None:
    """
    Pick the winning pattern for ``url`` from ``patterns`` (in registration order).

    An exact match short-circuits regardless of position; otherwise the first
    matching wildcard wins. Returns None when nothing matches.
    """
    first_wildcard: str | None = None
    for pattern in patterns:
        if pattern == url:
            return pattern
        if first_wildcard is None and is_wildcard(pattern) and matches(url, pattern):
            first_wildcard = pattern
    return first_wildcard


class PatternTable(Generic[V]):
    """
    Thread-safe, registration-ordered ``pattern -> value`` map.

    Re-registering a pattern replaces its value but keeps its original
    position in the resolution order.
    """

    def __init__(self) -> None:
        self._entries: dict[str, V] = {}
        self._lock = threading.RLock()

    def put(self, pattern: str, value: V) -> V | None:
        if not pattern:
            raise ValueError("URL pattern must be a non-empty string")
        with self._lock:
            previous = self._entries.get(pattern)
            self._entries[pattern] = value
            return previous

    def get(self, pattern: str) -> V | None:
        with self._lock:
            return self._entries.get(pattern)

    def pop(self, pattern: str) -> V | None:
        with self._lock:
            return self._entries.pop(pattern, None)

    def clear(self) -> list[V]:
        with self._lock:
            values = list(self._entries.values())
            self._entries.clear()
            return values

    def lookup(self, url: str) -> tuple[str, V] | None:
        """Resolve ``url`` to its winning ``(pattern, value)`` pair."""
        with self._lock:
            pattern = resolve(url, list(self._entries))
            if pattern is None:
                return None
            return pattern, self._entries[pattern]

    def patterns(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def snapshot(self) -> dict[str, V]:
        with self._lock:
            return dict(self._entries)

    def __contains__(self, pattern: object) -> bool:
        with self._lock:
            return pattern in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.patterns())


__all__ = ["PatternTable", "WILDCARD", "is_wildcard", "matches", "resolve"]
