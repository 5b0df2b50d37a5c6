"""
Testing the DB-backed key-value store against SQLite.
"""

from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from numble.errors import StoreUnavailable, VersionConflict
from numble.models import KVEntry
from numble.repository import DBKeyValueStore
from numble.sessions import SessionManager


def test_repository_flow(db_session, clock):
    repo = DBKeyValueStore(db_session, clock=clock)

    # Create
    entry = repo.create("session:1", {"turn": "creator"}, clock() + timedelta(hours=1))
    assert entry.version == 1
    assert entry.expires_at.tzinfo is not None

    # Read
    assert repo.get("session:1").value == {"turn": "creator"}
    assert repo.get("session:missing") is None

    # Write with the version we read
    entry = repo.replace("session:1", {"turn": "opponent"}, expected_version=1)
    assert entry.version == 2
    assert repo.get("session:1").value == {"turn": "opponent"}

    # Stale write
    with pytest.raises(VersionConflict):
        repo.replace("session:1", {"turn": "creator"}, expected_version=1)


def test_expiry_and_purge(db_session, clock):
    repo = DBKeyValueStore(db_session, clock=clock)
    repo.create("session:old", {"n": 1}, clock() + timedelta(minutes=1))
    repo.create("session:new", {"n": 2}, clock() + timedelta(days=1))

    clock.advance(minutes=2)
    assert repo.get("session:old") is None
    assert repo.replace("session:old", {"n": 3}, expected_version=1) is None

    # the key can be reused once expired
    reused = repo.create("session:old", {"n": 4}, clock() + timedelta(hours=1))
    assert reused.version == 1

    clock.advance(hours=2)
    assert repo.purge_expired() == 1
    assert repo.get("session:new").value == {"n": 2}


def test_duplicate_live_key_conflicts(db_session, clock):
    repo = DBKeyValueStore(db_session, clock=clock)
    repo.create("session:1", {}, clock() + timedelta(hours=1))
    with pytest.raises(VersionConflict):
        repo.create("session:1", {}, clock() + timedelta(hours=1))


def test_session_manager_on_db_store(db_session, clock):
    manager = SessionManager(DBKeyValueStore(db_session, clock=clock), clock=clock)

    session = manager.create("alice")
    manager.join(session.id, "bob")
    session = manager.submit_guess(session.id, "alice", "1 + 1 = 2")

    assert session.version == 3
    assert session.current_turn == "opponent"
    assert [g.guess for g in session.guesses] == ["1 + 1 = 2"]
    assert manager.fetch(session.id).opponent_id == "bob"


def _row_count(db_session):
    return db_session.execute(select(func.count()).select_from(KVEntry)).scalar_one()


def test_create_sweeps_expired_rows(db_session, clock):
    repo = DBKeyValueStore(db_session, clock=clock)
    for n in range(3):
        repo.create(f"session:{n}", {}, clock() + timedelta(hours=12))
    assert _row_count(db_session) == 3

    clock.advance(days=2)
    repo.create("session:today", {}, clock() + timedelta(hours=12))
    assert _row_count(db_session) == 1


def test_database_errors_become_store_unavailable(db_session, clock, monkeypatch):
    repo = DBKeyValueStore(db_session, clock=clock)

    def locked(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "execute", locked)
    with pytest.raises(StoreUnavailable):
        repo.get("session:1")
    with pytest.raises(StoreUnavailable):
        repo.replace("session:1", {}, expected_version=1)
