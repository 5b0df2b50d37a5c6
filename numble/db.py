"""
Single place to:
- Create a SQLAlchemy Engine from settings.database_url
- Create a Session factory (SessionLocal) for per-request DB sessions
- Provide get_db() dependency for FastAPI routes

Storage calls must not hang: the pool wait and the driver connect/lock wait are
both capped at NUMBLE_STORE_TIMEOUT_SECONDS.
"""

from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .config import settings


def _connect_args(url: str, timeout: float) -> Dict[str, Any]:
    backend = make_url(url).get_backend_name()
    if backend == "sqlite":
        # sqlite's "timeout" is how long to wait on a locked database
        return {"check_same_thread": False, "timeout": timeout}
    if backend == "mysql":
        return {"connect_timeout": max(1, int(timeout)), "read_timeout": max(1, int(timeout))}
    return {}


def make_engine(url: str, timeout: float):
    engine_kwargs: Dict[str, Any] = {
        "pool_pre_ping": True,
        "echo": False,
        "future": True,
        "connect_args": _connect_args(url, timeout),
    }
    if make_url(url).get_backend_name() != "sqlite":
        engine_kwargs["pool_timeout"] = timeout
    return create_engine(url, **engine_kwargs)


engine = make_engine(settings.database_url, settings.store_timeout_seconds)

# autocommit=False, autoflush=False are the usual FastAPI/SQLAlchemy defaults.
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


class Base(DeclarativeBase):
    pass


# FastAPI dependency: one DB session per request, always closed
def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
