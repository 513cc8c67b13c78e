"""
Persisted local state (fallback dataset, flags, preferences).

Implementations:
- JsonFileStore (single JSON file)
- InMemoryKeyValueStore (tests, ephemeral sessions)
"""
from notewise.core.local_state.base import (
    FALLBACK_FLAG_KEY,
    FALLBACK_FOLDERS_KEY,
    FALLBACK_KEYS,
    FALLBACK_NOTES_KEY,
    FALLBACK_RESET_KEY,
    FALLBACK_STARTED_AT_KEY,
    FALLBACK_USER_KEY,
    PREFERENCES_KEY,
    KeyValueStore,
)
from notewise.core.local_state.json_store import JsonFileStore
from notewise.core.local_state.memory_store import InMemoryKeyValueStore

__all__ = [
    "KeyValueStore",
    "JsonFileStore",
    "InMemoryKeyValueStore",
    "FALLBACK_FLAG_KEY",
    "FALLBACK_NOTES_KEY",
    "FALLBACK_FOLDERS_KEY",
    "FALLBACK_USER_KEY",
    "FALLBACK_STARTED_AT_KEY",
    "FALLBACK_RESET_KEY",
    "FALLBACK_KEYS",
    "PREFERENCES_KEY",
]
