"""Fixtures for tests that drive the full FastAPI application."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from team_connections.app.factory import create_app


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """TestClient with the lifespan running, so app.state.realtime exists."""
    with TestClient(create_app()) as test_client:
        yield test_client

