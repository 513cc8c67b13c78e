"""Shared fixtures.

Backend fixtures use a real SQLite database under tmp_path; every test
gets fresh instances.
"""

from collections.abc import AsyncGenerator

import pytest

from notewise.config import FallbackConfig
from notewise.core.backend.sqlite_backend import SQLiteBackend
from notewise.core.local_state.memory_store import InMemoryKeyValueStore
from notewise.models import Identity
from notewise.services.mode_selector import ModeSelector
from notewise.services.notifications import NotificationCenter


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
async def backend(tmp_path) -> AsyncGenerator[SQLiteBackend, None]:
    """Initialized SQLite backend in a temporary directory."""
    backend = SQLiteBackend(db_path=str(tmp_path / "notewise_test.db"))
    await backend.initialize()
    yield backend
    await backend.close()


@pytest.fixture
def identity() -> Identity:
    return Identity(id="user-1", email="user@example.com", name="Test User")


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def selector(kv_store, backend) -> ModeSelector:
    """Mode selector with a backend, nobody signed in."""
    return ModeSelector(kv_store, backend, FallbackConfig(seed_demo_data=True))


@pytest.fixture
def signed_in(selector, identity) -> ModeSelector:
    selector.sign_in(identity)
    return selector


@pytest.fixture
def fallback_selector(kv_store) -> ModeSelector:
    """Mode selector in fallback mode with the demo dataset seeded."""
    selector = ModeSelector(kv_store, None, FallbackConfig(seed_demo_data=True))
    selector.enter_fallback()
    return selector
