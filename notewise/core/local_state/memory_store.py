"""
In-memory key/value store. Nothing survives the process.
"""

import copy
import json
from typing import Any

from notewise.core.local_state.base import KeyValueStore
from notewise.utils.exceptions import LocalStateError


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store; values are deep-copied in and out like a real serializer would."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        try:
            json.dumps(value)
        except (TypeError, ValueError) as e:
            raise LocalStateError(f"Value for {key!r} is not JSON-serializable: {e}") from e
        self._data[key] = copy.deepcopy(value)

    def remove(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    def contains(self, key: str) -> bool:
        return key in self._data
