"""
Shooting history store for Marksman.

HistoryStore keeps every analyzed target in memory, most recent first,
and writes through to a HistoryBackend for durability. It is the single
source of truth for aggregation.

All access goes through one lock: an append is visible to any query or
delete issued after it returns, and appends from several threads never
corrupt the list. The backend is written before the in-memory list, so a
failed write leaves the store unchanged.
"""

import logging
import threading
from collections import Counter
from datetime import datetime
from typing import Iterable, Optional, Protocol

from marksman.models.session import DateFilter, SessionType
from marksman.models.shot import StoredTargetPattern

logger = logging.getLogger(__name__)


class DuplicatePatternError(ValueError):
    """Raised when appending a pattern whose id is already stored."""


class HistoryBackend(Protocol):
    """Durable storage behind a HistoryStore."""

    def load(self) -> list[StoredTargetPattern]: ...

    def insert(self, pattern: StoredTargetPattern) -> None: ...

    def remove(self, pattern_id: str) -> None: ...

    def clear(self) -> None: ...


class InMemoryBackend:
    """Backend that keeps nothing beyond the process lifetime."""

    def load(self) -> list[StoredTargetPattern]:
        return []

    def insert(self, pattern: StoredTargetPattern) -> None:
        pass

    def remove(self, pattern_id: str) -> None:
        pass

    def clear(self) -> None:
        pass


class HistoryStore:
    """Append-only, filterable collection of analyzed targets.

    Attributes:
        backend: Where patterns are persisted.
    """

    def __init__(self, backend: Optional[HistoryBackend] = None):
        self.backend = backend or InMemoryBackend()
        self._lock = threading.Lock()
        self._patterns: list[StoredTargetPattern] = []
        self._ids: set[str] = set()

        for pattern in self.backend.load():
            if pattern.id in self._ids:
                logger.warning(f"Skipping duplicate stored pattern {pattern.id}")
                continue
            self._patterns.append(pattern)
            self._ids.add(pattern.id)
        self._sort()
        logger.info(f"History loaded: {len(self._patterns)} targets")

    def __len__(self) -> int:
        with self._lock:
            return len(self._patterns)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    # =========================================================================
    # Writes
    # =========================================================================

    def append(self, pattern: StoredTargetPattern):
        """Insert a pattern. Existing entries are never overwritten.

        Raises:
            DuplicatePatternError: If a pattern with the same id is stored.
        """
        with self._lock:
            if pattern.id in self._ids:
                raise DuplicatePatternError(f"Pattern {pattern.id} already stored")
            # Stable: among equal timestamps the new pattern goes first
            ordered = sorted([pattern, *self._patterns],
                             key=lambda p: p.timestamp, reverse=True)
            self.backend.insert(pattern)
            self._patterns = ordered
            self._ids.add(pattern.id)
        logger.debug(f"Pattern stored: id={pattern.id} shots={pattern.shot_count}")

    def delete(self, pattern_id: str):
        """Remove one pattern; does nothing if the id is unknown."""
        with self._lock:
            if pattern_id not in self._ids:
                return
            self.backend.remove(pattern_id)
            self._patterns = [p for p in self._patterns if p.id != pattern_id]
            self._ids.discard(pattern_id)
        logger.debug(f"Pattern deleted: id={pattern_id}")

    def clear(self):
        """Remove every pattern."""
        with self._lock:
            self.backend.clear()
            self._patterns = []
            self._ids = set()
        logger.info("History cleared")

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, pattern_id: str) -> Optional[StoredTargetPattern]:
        with self._lock:
            for pattern in self._patterns:
                if pattern.id == pattern_id:
                    return pattern
        return None

    def all(self) -> list[StoredTargetPattern]:
        """Every stored pattern, most recent first."""
        with self._lock:
            return list(self._patterns)

    def query(
        self,
        date_filter: DateFilter = DateFilter.ALL_TIME,
        session_types: Optional[Iterable[SessionType]] = None,
        now: Optional[datetime] = None,
    ) -> list[StoredTargetPattern]:
        """Patterns inside the date window and session-type set.

        Args:
            date_filter: Time window. LAST_TARGET returns at most the single
                         most recent pattern that passes the type filter.
            session_types: Allowed types; None or empty means all types.
            now: Reference time for the window (defaults to now).

        Returns:
            Matching patterns, most recent first. Never raises on an
            empty store.
        """
        types = set(session_types or ()) or None
        start = date_filter.window_start(now)

        with self._lock:
            matches = [p for p in self._patterns
                       if types is None or p.session_type in types]

        if date_filter is DateFilter.LAST_TARGET:
            return matches[:1]
        if start is not None:
            matches = [p for p in matches if p.timestamp >= start]
        return matches

    def session_type_distribution(
        self,
        date_filter: DateFilter = DateFilter.ALL_TIME,
        session_types: Optional[Iterable[SessionType]] = None,
        now: Optional[datetime] = None,
    ) -> dict[SessionType, int]:
        """Number of targets per session type among the query's matches."""
        matches = self.query(date_filter, session_types, now)
        return dict(Counter(p.session_type for p in matches))

    def _sort(self):
        self._patterns.sort(key=lambda p: p.timestamp, reverse=True)
