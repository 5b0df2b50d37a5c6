"""
SQLAlchemy ORM model for the key-value store.

Tables:
- kv_entries: one row per key (e.g. "session:<id>"), the record itself as JSON,
  a version counter for compare-and-set, and the expiry instant.

Why JSON?
- A session is a small flat record; the service always reads/writes it whole.

Datetimes are stored as naive UTC (SQLite has no timezone support).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class KVEntry(Base):
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)

    value: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)

    # Bumped on every successful write
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Rows past this instant are treated as missing
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
