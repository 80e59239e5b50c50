"""Pytest configuration and fixtures for schoolsync.

Mirrors run against InMemoryStore, which broadcasts change events in the
same tick as each write. No network is needed.
"""

import pytest

from schoolsync.core.config import Settings, get_settings
from schoolsync.infrastructure.messaging.error_channel import (
    ErrorChannel,
    PermissionErrorEvent,
)
from schoolsync.infrastructure.store.client import StoreConnection
from schoolsync.infrastructure.store.memory import InMemoryStore


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch: pytest.MonkeyPatch):
    """Keep env-derived settings from leaking between tests."""
    for name in ("STORE_BACKEND", "STORE_URL", "STORE_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def memory_settings() -> Settings:
    """Settings for the process-local backend (no .env lookup)."""
    return Settings(_env_file=None, store_backend="memory")


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def connection(store: InMemoryStore) -> StoreConnection:
    return StoreConnection.for_store(store)


@pytest.fixture
def error_channel() -> ErrorChannel:
    return ErrorChannel()


@pytest.fixture
def published(error_channel: ErrorChannel) -> list[PermissionErrorEvent]:
    """Every event published on error_channel during the test."""
    events: list[PermissionErrorEvent] = []
    error_channel.subscribe(events.append)
    return events
