"""
Change feed models.

The backend pushes one ChangeEvent per committed row change, keyed by table.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class TableKind(str, Enum):
    """Backend tables."""

    NOTES = "notes"
    FOLDERS = "folders"
    TAGS = "tags"
    NOTE_TAGS = "note_tags"
    FLASHCARDS = "flashcards"
    NOTE_HISTORY = "note_history"


class ChangeType(str, Enum):
    """Row change kinds delivered by the feed."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class ChangeEvent(BaseModel):
    """
    A single row change pushed by the backend.

    `new` carries the row after insert/update, `old` the row before
    update/delete (at least its primary key).
    """

    event_type: ChangeType
    table: TableKind
    new: dict[str, Any] | None = None
    old: dict[str, Any] | None = None
    committed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def record_id(self) -> str | None:
        """Primary key of the affected row, if the table has one."""
        row = self.new if self.new is not None else self.old
        if not row:
            return None
        return row.get("id")
