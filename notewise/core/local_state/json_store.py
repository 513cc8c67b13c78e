"""
JSON file key/value store.

The whole state lives in one file that is rewritten on every change
(write to a temporary sibling, then atomic replace).
"""

import json
import os
from pathlib import Path
from typing import Any

from notewise.core.local_state.base import KeyValueStore
from notewise.utils.exceptions import LocalStateError
from notewise.utils.logger import get_logger

logger = get_logger(__name__)


class JsonFileStore(KeyValueStore):
    """File-backed key/value store."""

    def __init__(self, path: str | Path = "data/local_state.json"):
        """
        Initialize the store.

        Args:
            path: JSON file holding every key
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data = self._read()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            # A corrupt file is treated as empty state rather than blocking startup
            logger.warning(
                f"Ignoring unreadable local state at {self.path}",
                extra={"error": str(e), "path": str(self.path)},
            )
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed local state at {self.path}")
            return {}
        return data

    def _flush(self) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise LocalStateError(
                f"Failed to persist local state: {e}", context={"path": str(self.path)}
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        # Hand out a fresh copy so callers cannot mutate stored state in place
        return json.loads(json.dumps(self._data[key]))

    def set(self, key: str, value: Any) -> None:
        previous = self._data.get(key)
        had_key = key in self._data
        self._data[key] = value
        try:
            self._flush()
        except LocalStateError:
            if had_key:
                self._data[key] = previous
            else:
                self._data.pop(key, None)
            raise

    def remove(self, *keys: str) -> None:
        present = [key for key in keys if key in self._data]
        if not present:
            return
        for key in present:
            del self._data[key]
        self._flush()

    def contains(self, key: str) -> bool:
        return key in self._data
