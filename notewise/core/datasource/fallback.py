"""
Fallback (demo) data source.

Notes and folders live in persisted local state as whole collections.
Each write reads the collection, changes it and saves it back, so two
writers racing on the same collection resolve last-writer-wins.

Tags are kept in the legacy denormalized shape (a `tags` array of names on
each note row). They are not exposed as Tag objects here; updates never
touch the stored array.
"""

from datetime import datetime
from typing import Any

from notewise.core.datasource.base import NOTE_FIELDS, DataSource
from notewise.core.datasource.demo_data import DEMO_USER, demo_folders, demo_notes
from notewise.core.local_state.base import (
    FALLBACK_FLAG_KEY,
    FALLBACK_FOLDERS_KEY,
    FALLBACK_KEYS,
    FALLBACK_NOTES_KEY,
    FALLBACK_STARTED_AT_KEY,
    FALLBACK_USER_KEY,
    KeyValueStore,
)
from notewise.models import Folder, Identity, Note, NoteDraft
from notewise.models.note import normalize_title, utc_now
from notewise.utils.exceptions import NotFoundError, ValidationError
from notewise.utils.id_generator import generate_folder_id, generate_note_id
from notewise.utils.logger import get_logger

logger = get_logger(__name__)


def _sort_key(row: dict[str, Any]) -> datetime:
    return datetime.fromisoformat(row["updated_at"].replace("Z", "+00:00"))


class FallbackDataset:
    """Persisted fallback collections and flags."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def is_active(self) -> bool:
        flag = self.store.get(FALLBACK_FLAG_KEY)
        return flag is True or flag == "true"

    def initialize(self, seed: bool = True) -> None:
        """
        Turn fallback mode on. Seeds the demo notes and folders when their
        keys are absent; existing collections are kept.
        """
        self.store.set(FALLBACK_FLAG_KEY, True)
        if seed and not self.store.contains(FALLBACK_NOTES_KEY):
            self.store.set(FALLBACK_NOTES_KEY, demo_notes())
        if seed and not self.store.contains(FALLBACK_FOLDERS_KEY):
            self.store.set(FALLBACK_FOLDERS_KEY, demo_folders())
        self.store.set(FALLBACK_USER_KEY, dict(DEMO_USER))
        if not self.store.contains(FALLBACK_STARTED_AT_KEY):
            self.store.set(FALLBACK_STARTED_AT_KEY, utc_now().isoformat())
        logger.info("Fallback mode initialized", extra={"seeded": seed})

    def clear(self) -> None:
        """Remove the flag, the collections and the demo user."""
        self.store.remove(*FALLBACK_KEYS)
        logger.info("Fallback dataset cleared")

    def user(self) -> Identity | None:
        data = self.store.get(FALLBACK_USER_KEY)
        return Identity.model_validate(data) if data else None

    def started_at(self) -> datetime | None:
        value = self.store.get(FALLBACK_STARTED_AT_KEY)
        return datetime.fromisoformat(value) if value else None

    def load_notes(self) -> list[dict[str, Any]]:
        return self.store.get(FALLBACK_NOTES_KEY, [])

    def save_notes(self, notes: list[dict[str, Any]]) -> None:
        self.store.set(FALLBACK_NOTES_KEY, notes)

    def load_folders(self) -> list[dict[str, Any]]:
        return self.store.get(FALLBACK_FOLDERS_KEY, [])

    def save_folders(self, folders: list[dict[str, Any]]) -> None:
        self.store.set(FALLBACK_FOLDERS_KEY, folders)


class FallbackSource(DataSource):
    """Data source over the persisted fallback dataset (notes and folders only)."""

    def __init__(self, dataset: FallbackDataset):
        self.dataset = dataset
        self.identity = dataset.user() or Identity.model_validate(DEMO_USER)

    @staticmethod
    def _to_note(row: dict[str, Any]) -> Note:
        # Legacy tag names are not tag ids; the note is exposed untagged
        return Note.from_row(row)

    # ═══════════════════════════════════════════════════════════
    # NOTES
    # ═══════════════════════════════════════════════════════════

    async def list_notes(self, starred_only: bool = False) -> list[Note]:
        rows = sorted(self.dataset.load_notes(), key=_sort_key, reverse=True)
        if starred_only:
            rows = [row for row in rows if row.get("is_starred")]
        return [self._to_note(row) for row in rows]

    async def get_note(self, note_id: str) -> Note | None:
        row = next((r for r in self.dataset.load_notes() if r["id"] == note_id), None)
        return self._to_note(row) if row else None

    async def insert_note(self, draft: NoteDraft | None = None, starred: bool = False) -> Note:
        draft = draft or NoteDraft()
        now = utc_now().isoformat()
        row = {
            "id": generate_note_id(),
            "user_id": self.identity.id,
            "title": normalize_title(draft.title),
            "content": draft.content,
            "is_starred": starred,
            "folder_id": draft.folder_id,
            "tags": [],
            "created_at": now,
            "updated_at": now,
        }
        notes = self.dataset.load_notes()
        notes.insert(0, row)
        self.dataset.save_notes(notes)
        return self._to_note(row)

    async def update_note(self, note_id: str, values: dict[str, Any]) -> Note:
        unknown = set(values) - NOTE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown note fields: {sorted(unknown)}", context={"note_id": note_id}
            )

        notes = self.dataset.load_notes()
        row = next((r for r in notes if r["id"] == note_id), None)
        if row is None:
            raise NotFoundError(f"Note {note_id} not found", context={"note_id": note_id})

        if "title" in values:
            row["title"] = normalize_title(values["title"])
        if "content" in values:
            row["content"] = values["content"]
        if "starred" in values:
            row["is_starred"] = bool(values["starred"])
        if "folder_id" in values:
            row["folder_id"] = values["folder_id"]
        row["updated_at"] = max(utc_now(), _sort_key(row)).isoformat()

        self.dataset.save_notes(notes)
        return self._to_note(row)

    async def delete_note(self, note_id: str) -> None:
        notes = self.dataset.load_notes()
        remaining = [r for r in notes if r["id"] != note_id]
        if len(remaining) == len(notes):
            raise NotFoundError(f"Note {note_id} not found", context={"note_id": note_id})
        self.dataset.save_notes(remaining)

    async def search_notes(self, query: str) -> list[Note]:
        needle = query.lower()
        return [
            note
            for note in await self.list_notes()
            if needle in note.title.lower() or needle in note.content.lower()
        ]

    # ═══════════════════════════════════════════════════════════
    # FOLDERS
    # ═══════════════════════════════════════════════════════════

    async def list_folders(self) -> list[Folder]:
        return [Folder.from_row(row) for row in self.dataset.load_folders()]

    async def insert_folder(self, name: str, color: str) -> Folder:
        row = {
            "id": generate_folder_id(),
            "user_id": self.identity.id,
            "name": name,
            "color": color,
            "created_at": utc_now().isoformat(),
        }
        folders = self.dataset.load_folders()
        folders.append(row)
        self.dataset.save_folders(folders)
        return Folder.from_row(row)
