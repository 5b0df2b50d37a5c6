"""
Settings pulled from the environment (or a local .env in dev).

DATABASE_URL                  SQLAlchemy URL (default: sqlite file next to the app)
APP_ENV                       "local" creates tables on startup
NUMBLE_STORE_BACKEND          "db" (default) or "memory"
NUMBLE_STORE_TIMEOUT_SECONDS  upper bound on any single storage call
LOG_LEVEL                     INFO by default
"""

import logging
import os

from dotenv import load_dotenv

# dev convenience; in prod the platform injects env vars
load_dotenv()


class Settings:
    def __init__(self) -> None:
        self.database_url = os.getenv("DATABASE_URL", "sqlite+pysqlite:///./numble.db")
        self.app_env = os.getenv("APP_ENV", "local")
        self.store_backend = os.getenv("NUMBLE_STORE_BACKEND", "db").lower()
        self.store_timeout_seconds = float(os.getenv("NUMBLE_STORE_TIMEOUT_SECONDS", "2.0"))
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()


def configure_logging(level: str = "INFO") -> None:
    """One console handler for the whole package; safe to call twice."""
    logger = logging.getLogger("numble")
    logger.setLevel(level)
    if logger.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(handler)
