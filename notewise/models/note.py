"""
Note model and the editable draft of a note.

Notes carry rich-text markup in `content`. Tags are referenced by id
(`tag_ids`); views get the resolved Tag objects in `tags`.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from notewise.models.tag import Tag

UNTITLED = "Untitled"


def utc_now() -> datetime:
    """Timezone-aware current time used for every timestamp we write."""
    return datetime.now(timezone.utc)


def normalize_title(title: str | None) -> str:
    """Trim a title; empty or whitespace-only titles become "Untitled"."""
    if title is None:
        return UNTITLED
    stripped = title.strip()
    return stripped or UNTITLED


class NoteDraft(BaseModel):
    """
    The user-editable fields of a note.

    Immutable value object: the draft controller compares drafts
    structurally to decide whether a document is dirty.
    """

    model_config = {"frozen": True}

    title: str = ""
    content: str = ""
    tag_ids: frozenset[str] = Field(default_factory=frozenset)
    folder_id: str | None = None

    def is_empty(self) -> bool:
        """True when nothing was ever entered (guards autosave of new notes)."""
        return (
            not self.title.strip()
            and not self.content.strip()
            and not self.tag_ids
            and self.folder_id is None
        )

    def committed(self) -> "NoteDraft":
        """The values as they are persisted (title coerced)."""
        return self.model_copy(update={"title": normalize_title(self.title)})


class Note(BaseModel):
    """
    A persisted note.

    Storage:
    - notes table: id, user_id, title, content, is_starred, folder_id, timestamps
    - note_tags table: (note_id, tag_id) pairs behind `tag_ids`
    """

    id: str = Field(..., description="Unique note ID")
    user_id: str | None = Field(default=None, description="Owner user ID")

    title: str = Field(default=UNTITLED, description="Note title")
    content: str = Field(default="", description="Rich-text markup")
    starred: bool = Field(default=False, description="Starred flag")
    folder_id: str | None = Field(default=None, description="Folder reference")

    tag_ids: list[str] = Field(default_factory=list, description="Referenced tag IDs")
    tags: list[Tag] = Field(default_factory=list, description="Resolved tags (views only)")

    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update timestamp")

    @classmethod
    def from_row(cls, row: dict[str, Any], tag_ids: list[str] | None = None) -> "Note":
        """Build a note from a backend row (`is_starred` column)."""
        return cls(
            id=row["id"],
            user_id=row.get("user_id"),
            title=row.get("title") or UNTITLED,
            content=row.get("content") or "",
            starred=bool(row.get("is_starred", False)),
            folder_id=row.get("folder_id"),
            tag_ids=list(tag_ids or []),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_row(self) -> dict[str, Any]:
        """Backend row for the notes table (tags live in note_tags)."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "content": self.content,
            "is_starred": self.starred,
            "folder_id": self.folder_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def draft(self) -> NoteDraft:
        """Editable fields of this note."""
        return NoteDraft(
            title=self.title,
            content=self.content,
            tag_ids=frozenset(self.tag_ids),
            folder_id=self.folder_id,
        )

    def resolve_folder(self, folder_ids: set[str]) -> str | None:
        """Folder reference, or None ("unfiled") when the folder no longer exists."""
        if self.folder_id is not None and self.folder_id in folder_ids:
            return self.folder_id
        return None
