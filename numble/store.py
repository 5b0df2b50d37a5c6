"""
Key-value storage with expiry and versioned writes.

The session manager only talks to this interface, so tests use the in-memory
store and the deployed app uses the SQLAlchemy one (repository.py).

Rules every store follows:
- an entry past expires_at is gone (get -> None), same as one never written
- create() starts an entry at version 1
- replace() only succeeds if the caller read the current version, and bumps it;
  otherwise VersionConflict
- every call is bounded by a timeout; StoreUnavailable if it can't finish
- create() also drops every expired entry, so unread sessions don't pile up
"""

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Callable, Dict, Iterator, Optional

from .errors import StoreUnavailable, VersionConflict

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Entry:
    key: str
    value: Dict[str, Any]
    version: int
    expires_at: datetime


class KeyValueStore:
    """Interface. See module docstring for the rules."""

    def get(self, key: str) -> Optional[Entry]:
        raise NotImplementedError

    def create(self, key: str, value: Dict[str, Any], expires_at: datetime) -> Entry:
        raise NotImplementedError

    def replace(self, key: str, value: Dict[str, Any], expected_version: int) -> Optional[Entry]:
        """Returns None if the key is missing or expired."""
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, timeout_seconds: float = 2.0, clock: Clock = utc_now) -> None:
        self._entries: Dict[str, Entry] = {}
        self._lock = RLock()
        self._timeout = timeout_seconds
        self._clock = clock

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._timeout):
            logger.warning("In-memory store lock not acquired within %.1fs", self._timeout)
            raise StoreUnavailable()
        try:
            yield
        finally:
            self._lock.release()

    def _live(self, key: str) -> Optional[Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            # lazy expiry
            del self._entries[key]
            return None
        return entry

    def _sweep(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def get(self, key: str) -> Optional[Entry]:
        with self._locked():
            entry = self._live(key)
            return copy.deepcopy(entry) if entry else None

    def create(self, key: str, value: Dict[str, Any], expires_at: datetime) -> Entry:
        with self._locked():
            # entries nobody reads again would otherwise stay forever
            self._sweep()
            if self._live(key) is not None:
                raise VersionConflict(f"Key {key} already exists")
            entry = Entry(key=key, value=copy.deepcopy(value), version=1, expires_at=expires_at)
            self._entries[key] = entry
            return copy.deepcopy(entry)

    def replace(self, key: str, value: Dict[str, Any], expected_version: int) -> Optional[Entry]:
        with self._locked():
            entry = self._live(key)
            if entry is None:
                return None
            if entry.version != expected_version:
                raise VersionConflict()
            entry.value = copy.deepcopy(value)
            entry.version += 1
            return copy.deepcopy(entry)

    def purge_expired(self) -> int:
        with self._locked():
            return self._sweep()

    def __len__(self) -> int:
        with self._locked():
            return len(self._entries)
