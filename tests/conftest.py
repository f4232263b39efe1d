"""Pytest configuration and shared fixtures for global options tests.

Every test gets its own SQLite file, a fresh per-process cache and a clock it
can move forward, so no state leaks between tests.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from global_options.config import TestConfig
from global_options.context import create_options_context
from global_options.infra.cache import MemoryObjectCache
from global_options.infra.database import create_session_factory


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ExternalMemoryCache(MemoryObjectCache):
    """Memory cache that reports itself as an external (shared) cache."""

    is_external = True


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep data dirs and environment overrides inside the test's tmp dir."""
    monkeypatch.setenv("GLOBAL_OPTIONS_DATA_DIR", str(tmp_path / "instance"))
    for name in (
        "GLOBAL_OPTIONS_DATABASE_URL",
        "GLOBAL_OPTIONS_CACHE_BACKEND",
        "GLOBAL_OPTIONS_REDIS_URL",
        "GLOBAL_OPTIONS_CACHE_PREFIX",
        "GLOBAL_OPTIONS_DEV_MODE",
        "GLOBAL_OPTIONS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config():
    return TestConfig()


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with the options table created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def cache(clock):
    return MemoryObjectCache(clock=clock)


@pytest.fixture
def context(config, db_engine, cache, clock):
    """Installed options context backed by the per-test database and cache."""
    return create_options_context(config, engine=db_engine, cache=cache, clock=clock)


@pytest.fixture
def repository(context):
    return context.repository


@pytest.fixture
def options(context):
    return context.options


@pytest.fixture
def transients(context):
    return context.transients


@pytest.fixture
def hooks(context):
    return context.hooks


@pytest.fixture
def settings(context):
    return context.settings


@pytest.fixture
def external_context(config, db_engine, clock):
    """Context whose cache is shared across processes (transients skip the table)."""
    return create_options_context(config, engine=db_engine, cache=ExternalMemoryCache(clock=clock), clock=clock)
