"""
Folder model.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

# Swatches offered when creating a folder
FOLDER_COLORS: list[tuple[str, str]] = [
    ("Blue", "#6366f1"),
    ("Green", "#10b981"),
    ("Red", "#ef4444"),
    ("Yellow", "#f59e0b"),
    ("Purple", "#8b5cf6"),
    ("Pink", "#ec4899"),
    ("Gray", "#6b7280"),
]

DEFAULT_FOLDER_COLOR = FOLDER_COLORS[0][1]


class Folder(BaseModel):
    """A folder notes can be filed under. Referenced, never owned, by notes."""

    id: str = Field(..., description="Unique folder ID")
    user_id: str | None = Field(default=None, description="Owner user ID")
    name: str = Field(..., description="Folder name")
    color: str = Field(default=DEFAULT_FOLDER_COLOR, description="Swatch token")
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Folder":
        return cls.model_validate(row)

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump(exclude_none=True)
        if self.created_at:
            row["created_at"] = self.created_at.isoformat()
        return row
