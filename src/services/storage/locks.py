"""Per-owner critical sections and insertion timestamps, owned by the storage."""

import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional
from uuid import UUID

from src.models.finance import utc_now


class OwnerLocks:
    """
    One re-entrant lock per owner.

    A store mutation and its ledger update run while holding the owner's
    lock, so no other mutation for that owner can interleave.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[UUID, threading.RLock] = {}

    def for_owner(self, owner_id: UUID) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(owner_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[owner_id] = lock
            return lock

    @contextmanager
    def hold(self, owner_id: UUID) -> Iterator[None]:
        with self.for_owner(owner_id):
            yield


class MonotonicClock:
    """
    Hands out strictly increasing UTC timestamps.

    Two inserts in the same microsecond still get distinct, ordered
    `created_at` values.
    """

    def __init__(self, now: Callable[[], datetime] = utc_now):
        self._now = now
        self._last: Optional[datetime] = None
        self._lock = threading.Lock()

    def observe(self, timestamp: datetime) -> None:
        """Make sure later timestamps come after `timestamp`."""
        with self._lock:
            if self._last is None or timestamp > self._last:
                self._last = timestamp

    def now(self) -> datetime:
        with self._lock:
            current = self._now()
            if self._last is not None and current <= self._last:
                current = self._last + timedelta(microseconds=1)
            self._last = current
            return current
