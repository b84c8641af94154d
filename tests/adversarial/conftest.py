"""
Shared fixtures for adversarial tests.

Provides an API client over the real application with a file-backed
store, plus helpers to stage accounts directly through the services.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.adapters.repository.store import SqliteStore
from src.api.main import app
from src.config.settings import Settings, get_settings
from tests.fakes import TEST_BCRYPT_COST, RecordingEmailSender


@pytest.fixture
def client(
    store: SqliteStore, email_sender: RecordingEmailSender
) -> Generator[TestClient, None, None]:
    """Client for the real app; lifespan not entered, state swapped in."""
    app.state.store = store
    app.state.email_sender = email_sender
    app.dependency_overrides[get_settings] = lambda: Settings(
        _env_file=None, bcrypt_cost=TEST_BCRYPT_COST
    )
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
