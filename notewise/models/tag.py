"""
Tag models and the adapter for the legacy string-array tag shape.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_TAG_COLOR = "#6b7280"


class Tag(BaseModel):
    """A user-defined tag. Names are unique per owner."""

    id: str = Field(..., description="Unique tag ID")
    user_id: str | None = Field(default=None, description="Owner user ID")
    name: str = Field(..., description="Tag name, unique per owner")
    color: str = Field(default=DEFAULT_TAG_COLOR, description="Swatch token")
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Tag":
        return cls.model_validate(row)

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump(exclude_none=True)
        if self.created_at:
            row["created_at"] = self.created_at.isoformat()
        return row


class NoteTag(BaseModel):
    """One (note, tag) pair of the many-to-many association."""

    note_id: str
    tag_id: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "NoteTag":
        return cls(note_id=row["note_id"], tag_id=row["tag_id"])

    def to_row(self) -> dict[str, Any]:
        return {"note_id": self.note_id, "tag_id": self.tag_id}


def normalize_legacy_tags(note_id: str, names: list[str] | None) -> tuple[list[Tag], list[NoteTag]]:
    """
    Convert the legacy denormalized tag array of one note into the
    normalized shape.

    Each legacy tag is identified by its own (trimmed) name; blanks and
    duplicates are dropped, first occurrence wins.

    Args:
        note_id: Note that carried the array
        names: Legacy tag names

    Returns:
        (tags, note_tag pairs)
    """
    tags: list[Tag] = []
    pairs: list[NoteTag] = []
    seen: set[str] = set()

    for raw in names or []:
        name = raw.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        tags.append(Tag(id=name, name=name))
        pairs.append(NoteTag(note_id=note_id, tag_id=name))

    return tags, pairs
