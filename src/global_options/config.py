"""Configuration objects and helpers for the global options store."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

CACHE_BACKENDS = ("memory", "redis", "none")


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    DB_FILENAME = "global_options.db"
    DEFAULT_CACHE_PREFIX = "global-options"

    def __init__(self) -> None:
        self.DEV_MODE = _env_bool("GLOBAL_OPTIONS_DEV_MODE", default=True)
        self.LOG_LEVEL = os.getenv("GLOBAL_OPTIONS_LOG_LEVEL", "INFO").upper()
        self.DATA_DIR = self._resolve_data_dir()
        self.DATABASE_URL = os.getenv("GLOBAL_OPTIONS_DATABASE_URL", self._build_sqlite_url())
        self.CACHE_BACKEND = os.getenv("GLOBAL_OPTIONS_CACHE_BACKEND", "memory").strip().lower()
        self.REDIS_URL = os.getenv("GLOBAL_OPTIONS_REDIS_URL")
        self.CACHE_PREFIX = os.getenv("GLOBAL_OPTIONS_CACHE_PREFIX", self.DEFAULT_CACHE_PREFIX)
        if self.CACHE_BACKEND not in CACHE_BACKENDS:
            raise ValueError(
                f"GLOBAL_OPTIONS_CACHE_BACKEND must be one of {', '.join(CACHE_BACKENDS)}, "
                f"got {self.CACHE_BACKEND!r}."
            )
        if self.CACHE_BACKEND == "redis" and not self.REDIS_URL:
            raise ValueError("GLOBAL_OPTIONS_CACHE_BACKEND=redis requires GLOBAL_OPTIONS_REDIS_URL.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("GLOBAL_OPTIONS_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {"pool_pre_ping": True}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration for tests: in-memory database, per-process cache."""

    __test__ = False

    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DATABASE_URL = "sqlite://"
        self.CACHE_BACKEND = "memory"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        from sqlalchemy.pool import StaticPool

        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
