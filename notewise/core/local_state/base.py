"""
Base interface for persisted local state.

A small string-keyed store of JSON values that survives restarts (the
browser-storage equivalent). Fallback mode keeps its whole dataset here,
alongside the user preferences.
"""

from abc import ABC, abstractmethod
from typing import Any

# Keys shared by the mode selector, the fallback source and preferences
FALLBACK_FLAG_KEY = "demo-mode"
FALLBACK_NOTES_KEY = "demo-notes"
FALLBACK_FOLDERS_KEY = "demo-folders"
FALLBACK_USER_KEY = "demo-user"
FALLBACK_STARTED_AT_KEY = "demo-started-at"
FALLBACK_RESET_KEY = "demo-reset"
PREFERENCES_KEY = "app-preferences"

FALLBACK_KEYS = (
    FALLBACK_FLAG_KEY,
    FALLBACK_NOTES_KEY,
    FALLBACK_FOLDERS_KEY,
    FALLBACK_USER_KEY,
    FALLBACK_STARTED_AT_KEY,
    FALLBACK_RESET_KEY,
)


class KeyValueStore(ABC):
    """Abstract base class for local key/value persistence."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Read a value.

        Args:
            key: Storage key
            default: Returned when the key is absent

        Returns:
            Decoded JSON value
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Write a JSON-serializable value, replacing any previous one.

        Raises:
            LocalStateError: If the value cannot be persisted
        """
        pass

    @abstractmethod
    def remove(self, *keys: str) -> None:
        """Delete keys. Absent keys are ignored."""
        pass

    @abstractmethod
    def contains(self, key: str) -> bool:
        pass
