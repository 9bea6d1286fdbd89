"""Hostmask to access-level lookup."""

from __future__ import annotations

import re
import threading

from ..errors.internal import AccessPatternError
from ..irc.models import AccessEntry


class AccessStore:
    """Regex-keyed authorization levels.

    Patterns are matched against the complete ``nick!user@host`` string. The
    effective level of a hostmask is the highest level of all matching
    entries, or 0. Removal is by exact pattern string, not by matching.
    All methods are safe to call from concurrently running plugin code.
    """

    def __init__(self, entries: list[AccessEntry] | None = None) -> None:
        self._lock = threading.Lock()
        self._entries: list[tuple[AccessEntry, re.Pattern[str]]] = []
        for entry in entries or []:
            self.grant(entry.pattern, entry.level)

    def level_for(self, hostmask: str) -> int:
        with self._lock:
            return max(
                (e.level for e, rx in self._entries if rx.fullmatch(hostmask)),
                default=0,
            )

    def grant(self, pattern: str, level: int) -> None:
        if level < 0:
            raise ValueError(f"access level must be non-negative, got {level}")
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise AccessPatternError(pattern, str(e)) from e
        entry = AccessEntry(pattern=pattern, level=level)
        with self._lock:
            for i, (existing, _) in enumerate(self._entries):
                if existing.pattern == pattern:
                    self._entries[i] = (entry, compiled)
                    return
            self._entries.append((entry, compiled))

    def revoke(self, pattern: str) -> None:
        with self._lock:
            self._entries = [(e, rx) for e, rx in self._entries if e.pattern != pattern]

    def entries(self) -> list[AccessEntry]:
        with self._lock:
            return [e for e, _ in self._entries]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
