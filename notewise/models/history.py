"""
History version model.

A history version is an immutable record of a note's previously saved
state. Version numbers are strictly increasing per note, starting at 1.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from notewise.models.note import NoteDraft, utc_now


class HistoryVersion(BaseModel):
    """Append-only snapshot of a note."""

    model_config = {"frozen": True}

    id: str = Field(..., description="Unique history entry ID")
    note_id: str = Field(..., description="Parent note ID")
    user_id: str | None = None

    title: str
    content: str = ""
    tag_ids: list[str] = Field(default_factory=list)
    folder_id: str | None = None

    version_number: int = Field(..., ge=1, description="Per-note version, starts at 1")
    created_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "HistoryVersion":
        return cls.model_validate(row)

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump()
        row["created_at"] = self.created_at.isoformat()
        return row

    def snapshot(self) -> NoteDraft:
        """Draft fields captured by this version."""
        return NoteDraft(
            title=self.title,
            content=self.content,
            tag_ids=frozenset(self.tag_ids),
            folder_id=self.folder_id,
        )
