"""
Dev convenience: create the kv_entries table if it doesn't exist.
Call this at startup in local/dev only
"""

from .db import engine, Base
from . import models  # noqa: F401  (registers the tables on Base)


def create_all(bind=None):
    Base.metadata.create_all(bind=bind or engine)
