"""
Test configuration and fixtures for the Team Connections test suite.

Environment variables are seeded before the package is imported so that
module-level configuration and logging setup see test values.
"""

import os
from collections.abc import Generator

import pytest

os.environ.setdefault("LOGGING_ENVIRONMENT", "unit_test")
os.environ.setdefault("LOGGING_LEVEL", "DEBUG")
os.environ.setdefault("LOGGING_FORMAT", "human")
os.environ.setdefault("SERVER_HOST", "127.0.0.1")
os.environ.setdefault("SERVER_STATIC_DIR", "tests-no-static-assets")

# Imports must come after environment variables to prevent config loading surprises
from team_connections.app.lifespan import build_realtime_services  # noqa: E402
from team_connections.config import reset_config  # noqa: E402
from team_connections.config.models import SessionConfig  # noqa: E402
from team_connections.realtime.context import RealtimeServices  # noqa: E402
from team_connections.services.connection_service import ConnectionService  # noqa: E402
from team_connections.services.session_service import SessionService  # noqa: E402
from team_connections.services.session_store import SessionStore  # noqa: E402


class FakeClock:
    """Manually advanced time source for the session store."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_config_singleton() -> Generator[None, None, None]:
    """Reset the config singleton before and after each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(retention_seconds=3600.0, sweep_interval_seconds=900.0)


@pytest.fixture
def store(session_config: SessionConfig, clock: FakeClock) -> SessionStore:
    return SessionStore(session_config, clock=clock)


@pytest.fixture
def session_service(store: SessionStore) -> SessionService:
    return SessionService(store)


@pytest.fixture
def connection_service(store: SessionStore) -> ConnectionService:
    return ConnectionService(store)


@pytest.fixture
def services(store: SessionStore) -> RealtimeServices:
    """Full services bundle over the fake-clock store."""
    return build_realtime_services(store)
