"""In-memory recommendation cache scoped to one engine instance."""

from __future__ import annotations

import threading

from k8s_resources_advisor.recommender.types import Recommendation


class RecommendationCache:
    """Map of cache key to recommendation, with a lock per key.

    Entries live for the lifetime of the cache; there is no eviction or
    expiry. ``lookup``/``store`` are plain dictionary operations. Callers
    running lookups from several threads hold ``lock_for(key)`` around the
    lookup-compute-store sequence so a key is computed at most once.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Recommendation] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def lookup(self, key: str) -> Recommendation | None:
        """Return the cached recommendation for ``key``, or None."""
        return self._entries.get(key)

    def store(self, key: str, recommendation: Recommendation) -> None:
        """Store a recommendation, replacing any existing entry."""
        self._entries[key] = recommendation

    def lock_for(self, key: str) -> threading.Lock:
        """Return the lock serializing computation of ``key``."""
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
