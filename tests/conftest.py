"""Pytest configuration and fixtures."""

import os

# Set DEBUG=true for all tests BEFORE any app imports
# This must be done before subway.core.config loads settings
os.environ["DEBUG"] = "true"
os.environ["OTEL_ENABLED"] = "false"

from collections.abc import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from subway.core.store import Store, get_store, reset_store
from subway.main import app
from subway.models import Station


@pytest.fixture(autouse=True)
def fresh_store() -> Generator[Store]:
    """
    Give every test an empty store.

    Yields:
        The store the app will use for this test
    """
    reset_store()
    yield get_store()
    reset_store()


@pytest.fixture
def store(fresh_store: Store) -> Store:
    """Application store for the current test."""
    return fresh_store


@pytest.fixture
def client() -> Generator[TestClient]:
    """
    FastAPI synchronous test client for making HTTP requests.

    Yields:
        Synchronous test client with app context
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient]:
    """
    FastAPI asynchronous HTTP client for async endpoint testing.

    Yields:
        Async HTTP client with ASGI transport
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def gangnam(store: Store) -> Station:
    """Create Gangnam station."""
    return store.add_station("Gangnam")


@pytest.fixture
def yangjae(store: Store) -> Station:
    """Create Yangjae station."""
    return store.add_station("Yangjae")
