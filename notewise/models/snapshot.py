"""
Snapshot model: the notes, folders and tags one view holds in memory.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from notewise.models.folder import Folder
from notewise.models.note import Note
from notewise.models.tag import Tag


class Snapshot(BaseModel):
    """In-memory collections of a view at a point in time."""

    notes: list[Note] = Field(default_factory=list)
    folders: list[Folder] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    loaded_at: datetime | None = None

    def get_note(self, note_id: str) -> Note | None:
        return next((n for n in self.notes if n.id == note_id), None)

    def get_folder(self, folder_id: str) -> Folder | None:
        return next((f for f in self.folders if f.id == folder_id), None)

    def get_tag(self, tag_id: str) -> Tag | None:
        return next((t for t in self.tags if t.id == tag_id), None)

    def starred_notes(self) -> list[Note]:
        return [n for n in self.notes if n.starred]

    def notes_in_folder(self, folder_id: str | None) -> list[Note]:
        """Notes filed under a folder; None selects unfiled notes (incl. dangling refs)."""
        folder_ids = {f.id for f in self.folders}
        return [n for n in self.notes if n.resolve_folder(folder_ids) == folder_id]
