"""
DB-backed key-value store; same API as InMemoryKeyValueStore.

Public methods:
- get(key) -> Entry | None
- create(key, value, expires_at) -> Entry
- replace(key, value, expected_version) -> Entry | None
- purge_expired() -> int

create() sweeps every expired row first, so the table only holds today's sessions.
Compare-and-set is one UPDATE ... WHERE key = ? AND version = ?; if no row
changed we look again to tell "gone" from "someone else wrote first".

Why: lets the session manager switch from memory to MySQL/SQLite without changes.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeout
from sqlalchemy.orm import Session

from .errors import StoreUnavailable, VersionConflict
from .models import KVEntry
from .store import Clock, Entry, KeyValueStore, utc_now

logger = logging.getLogger(__name__)


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def _to_entry(row: KVEntry) -> Entry:
    return Entry(
        key=row.key,
        value=dict(row.value),
        version=row.version,
        expires_at=row.expires_at.replace(tzinfo=timezone.utc),
    )


class DBKeyValueStore(KeyValueStore):
    """Drop-in replacement for the in-memory store, backed by the kv_entries table."""

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self._clock = clock

    def _now(self) -> datetime:
        return _naive_utc(self._clock())

    @contextmanager
    def _guard(self) -> Iterator[None]:
        try:
            yield
        except (OperationalError, PoolTimeout) as exc:
            self.db.rollback()
            logger.warning("Key-value storage failed: %s", exc)
            raise StoreUnavailable() from exc

    def _load(self, key: str) -> Optional[KVEntry]:
        # populate_existing: always see the committed row, not a cached copy
        row = (
            self.db.execute(select(KVEntry).where(KVEntry.key == key).execution_options(populate_existing=True))
            .scalars()
            .first()
        )
        if row is None or row.expires_at <= self._now():
            return None
        return row

    # --- Public API ---

    def get(self, key: str) -> Optional[Entry]:
        with self._guard():
            row = self._load(key)
            return _to_entry(row) if row else None

    def create(self, key: str, value: Dict[str, Any], expires_at: datetime) -> Entry:
        now = self._now()
        with self._guard():
            if self._load(key) is not None:
                raise VersionConflict(f"Key {key} already exists")
            # expired rows (including a leftover with this key) go before the insert
            swept = self.db.execute(delete(KVEntry).where(KVEntry.expires_at <= now)).rowcount or 0
            if swept:
                logger.info("Swept %d expired entries", swept)
            row = KVEntry(
                key=key,
                value=value,
                version=1,
                expires_at=_naive_utc(expires_at),
                created_at=now,
                updated_at=now,
            )
            self.db.add(row)
            try:
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                raise VersionConflict(f"Key {key} already exists") from exc
            self.db.refresh(row)
            return _to_entry(row)

    def replace(self, key: str, value: Dict[str, Any], expected_version: int) -> Optional[Entry]:
        now = self._now()
        with self._guard():
            result = self.db.execute(
                update(KVEntry)
                .where(
                    KVEntry.key == key,
                    KVEntry.version == expected_version,
                    KVEntry.expires_at > now,
                )
                .values(value=value, version=expected_version + 1, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                self.db.commit()
                row = self._load(key)
                return _to_entry(row) if row else None

            self.db.rollback()
            if self._load(key) is None:
                return None
            raise VersionConflict()

    def purge_expired(self) -> int:
        """Storage-side TTL sweep; safe to run from a cron or at startup."""
        with self._guard():
            result = self.db.execute(delete(KVEntry).where(KVEntry.expires_at <= self._now()))
            self.db.commit()
            return result.rowcount or 0
