"""
Pytest configuration and shared fixtures.
"""

import os

import pytest
from fastapi.testclient import TestClient

from selection_pipeline.core.dependencies import get_store
from selection_pipeline.main import app
from tests.memory_store import MemoryDataStore


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")
    config.addinivalue_line("markers", "server: requires running HTTP server")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"
    run_server = os.environ.get("RUN_SERVER_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")
    skip_server = pytest.mark.skip(reason="server tests skipped by default; set RUN_SERVER_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)
        if "server" in item.keywords and not run_server:
            item.add_marker(skip_server)


@pytest.fixture
def store():
    """Fresh in-memory data store per test."""
    return MemoryDataStore()


@pytest.fixture
def client(store):
    """TestClient wired to the in-memory store."""

    async def override_store():
        yield store

    app.dependency_overrides[get_store] = override_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
