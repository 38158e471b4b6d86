"""Keyed mutual exclusion for check-then-write reservation updates."""

from __future__ import annotations

from contextlib import contextmanager
from threading import Lock, RLock
from typing import Iterator, Optional


class ResourceLockRegistry:
    """Hands out one re-entrant lock per room id and per requester id.

    Callers that need both always take the requester lock first, so the
    acquisition order is fixed and two writers cannot deadlock.
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._room_locks: dict[str, RLock] = {}
        self._requester_locks: dict[str, RLock] = {}

    def _lock_for(self, table: dict[str, RLock], key: str) -> RLock:
        with self._guard:
            lock = table.get(key)
            if lock is None:
                lock = RLock()
                table[key] = lock
            return lock

    @property
    def tracked_room_ids(self) -> frozenset[str]:
        with self._guard:
            return frozenset(self._room_locks)

    @contextmanager
    def hold(self, room_id: str, requester_id: Optional[str] = None) -> Iterator[None]:
        if requester_id is None:
            with self._lock_for(self._room_locks, room_id):
                yield
            return
        with self._lock_for(self._requester_locks, requester_id):
            with self._lock_for(self._room_locks, room_id):
                yield
