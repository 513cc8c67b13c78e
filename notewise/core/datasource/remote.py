"""
Remote data source: every read and write goes to the backend data service
on behalf of the signed-in identity.
"""

from typing import Any

from notewise.core.backend.base import BackendClient
from notewise.core.datasource.base import NOTE_FIELDS, DataSource
from notewise.models import (
    Difficulty,
    Flashcard,
    Folder,
    GeneratedFlashcard,
    HistoryVersion,
    Identity,
    Note,
    NoteDraft,
    NoteTag,
    TableKind,
    Tag,
)
from notewise.models.note import normalize_title
from notewise.utils.exceptions import DuplicateError, NotFoundError, ValidationError
from notewise.utils.logger import get_logger

logger = get_logger(__name__)


class RemoteSource(DataSource):
    """Backend-backed data source scoped to one owner."""

    supports_tags = True
    supports_history = True
    supports_flashcards = True
    supports_change_feed = True

    def __init__(self, backend: BackendClient, identity: Identity, history_retries: int = 3):
        """
        Initialize remote source.

        Args:
            backend: Backend data service client
            identity: Signed-in owner of every row read or written
            history_retries: Attempts when a concurrent writer takes the next version number
        """
        self.backend = backend
        self.identity = identity
        self.history_retries = history_retries

    @property
    def owner(self) -> dict[str, str]:
        return {"user_id": self.identity.id}

    # ═══════════════════════════════════════════════════════════
    # NOTES
    # ═══════════════════════════════════════════════════════════

    async def list_notes(self, starred_only: bool = False) -> list[Note]:
        filters = dict(self.owner)
        if starred_only:
            filters["is_starred"] = True
        rows = await self.backend.select(
            TableKind.NOTES, filters, order_by="updated_at", ascending=False
        )
        return [Note.from_row(row) for row in rows]

    async def get_note(self, note_id: str) -> Note | None:
        rows = await self.backend.select(TableKind.NOTES, {**self.owner, "id": note_id})
        if not rows:
            return None
        pairs = await self.backend.select(TableKind.NOTE_TAGS, {"note_id": note_id})
        return Note.from_row(rows[0], [pair["tag_id"] for pair in pairs])

    async def insert_note(self, draft: NoteDraft | None = None, starred: bool = False) -> Note:
        draft = draft or NoteDraft()
        rows = await self.backend.insert(
            TableKind.NOTES,
            [
                {
                    **self.owner,
                    "title": normalize_title(draft.title),
                    "content": draft.content,
                    "is_starred": starred,
                    "folder_id": draft.folder_id,
                }
            ],
        )
        note = Note.from_row(rows[0])
        if draft.tag_ids:
            await self._replace_note_tags(note.id, set(), set(draft.tag_ids))
            note = note.model_copy(update={"tag_ids": sorted(draft.tag_ids)})

        logger.info(f"Created note {note.id}", extra={"note_id": note.id})
        return note

    async def update_note(self, note_id: str, values: dict[str, Any]) -> Note:
        unknown = set(values) - NOTE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown note fields: {sorted(unknown)}", context={"note_id": note_id}
            )

        row_values = {k: v for k, v in values.items() if k != "tag_ids"}
        if "starred" in row_values:
            row_values["is_starred"] = row_values.pop("starred")
        if "title" in row_values:
            row_values["title"] = normalize_title(row_values["title"])

        # Always touch the row so updated_at advances even for tag-only edits
        rows = await self.backend.update(
            TableKind.NOTES, row_values or {"id": note_id}, {**self.owner, "id": note_id}
        )
        if not rows:
            raise NotFoundError(f"Note {note_id} not found", context={"note_id": note_id})

        current = await self.backend.select(TableKind.NOTE_TAGS, {"note_id": note_id})
        tag_ids = {pair["tag_id"] for pair in current}
        if "tag_ids" in values:
            wanted = set(values["tag_ids"])
            await self._replace_note_tags(note_id, tag_ids, wanted)
            tag_ids = wanted

        return Note.from_row(rows[0], sorted(tag_ids))

    async def _replace_note_tags(self, note_id: str, current: set[str], wanted: set[str]) -> None:
        removed = current - wanted
        added = wanted - current
        if removed:
            await self.backend.delete(
                TableKind.NOTE_TAGS, {"note_id": note_id, "tag_id": sorted(removed)}
            )
        if added:
            await self.backend.insert(
                TableKind.NOTE_TAGS,
                [{"note_id": note_id, "tag_id": tag_id} for tag_id in sorted(added)],
            )

    async def delete_note(self, note_id: str) -> None:
        deleted = await self.backend.delete(TableKind.NOTES, {**self.owner, "id": note_id})
        if not deleted:
            raise NotFoundError(f"Note {note_id} not found", context={"note_id": note_id})
        logger.info(f"Deleted note {note_id}", extra={"note_id": note_id})

    async def search_notes(self, query: str) -> list[Note]:
        rows = await self.backend.select(
            TableKind.NOTES,
            self.owner,
            search={"title": query, "content": query},
            order_by="updated_at",
            ascending=False,
        )
        return [Note.from_row(row) for row in rows]

    # ═══════════════════════════════════════════════════════════
    # FOLDERS & TAGS
    # ═══════════════════════════════════════════════════════════

    async def list_folders(self) -> list[Folder]:
        rows = await self.backend.select(TableKind.FOLDERS, self.owner)
        return [Folder.from_row(row) for row in rows]

    async def insert_folder(self, name: str, color: str) -> Folder:
        rows = await self.backend.insert(
            TableKind.FOLDERS, [{**self.owner, "name": name, "color": color}]
        )
        return Folder.from_row(rows[0])

    async def list_tags(self) -> list[Tag]:
        rows = await self.backend.select(TableKind.TAGS, self.owner)
        return [Tag.from_row(row) for row in rows]

    async def list_note_tags(self) -> list[NoteTag]:
        notes = await self.backend.select(TableKind.NOTES, self.owner)
        note_ids = [row["id"] for row in notes]
        if not note_ids:
            return []
        rows = await self.backend.select(TableKind.NOTE_TAGS, {"note_id": note_ids})
        return [NoteTag.from_row(row) for row in rows]

    async def insert_tag(self, name: str, color: str) -> Tag:
        rows = await self.backend.insert(
            TableKind.TAGS, [{**self.owner, "name": name, "color": color}]
        )
        return Tag.from_row(rows[0])

    # ═══════════════════════════════════════════════════════════
    # HISTORY
    # ═══════════════════════════════════════════════════════════

    async def list_history(self, note_id: str) -> list[HistoryVersion]:
        rows = await self.backend.select(
            TableKind.NOTE_HISTORY,
            {"note_id": note_id},
            order_by="version_number",
            ascending=False,
        )
        return [HistoryVersion.from_row(row) for row in rows]

    async def insert_history(self, note_id: str, snapshot: NoteDraft) -> HistoryVersion:
        """
        Append a history version numbered max + 1.

        A concurrent writer may take the same number first; the unique
        (note_id, version_number) constraint rejects ours and we renumber.
        """
        last_error: DuplicateError | None = None

        for attempt in range(self.history_retries):
            latest = await self.backend.select(
                TableKind.NOTE_HISTORY,
                {"note_id": note_id},
                order_by="version_number",
                ascending=False,
                limit=1,
            )
            next_version = latest[0]["version_number"] + 1 if latest else 1

            try:
                rows = await self.backend.insert(
                    TableKind.NOTE_HISTORY,
                    [
                        {
                            **self.owner,
                            "note_id": note_id,
                            "title": normalize_title(snapshot.title),
                            "content": snapshot.content,
                            "tag_ids": sorted(snapshot.tag_ids),
                            "folder_id": snapshot.folder_id,
                            "version_number": next_version,
                        }
                    ],
                )
            except DuplicateError as e:
                last_error = e
                logger.warning(
                    f"History version {next_version} of {note_id} taken, retrying "
                    f"(attempt {attempt + 1}/{self.history_retries})",
                    extra={"note_id": note_id, "version_number": next_version},
                )
                continue

            return HistoryVersion.from_row(rows[0])

        raise last_error

    # ═══════════════════════════════════════════════════════════
    # FLASHCARDS
    # ═══════════════════════════════════════════════════════════

    async def list_flashcards(self, note_id: str | None = None) -> list[Flashcard]:
        filters = dict(self.owner)
        if note_id is not None:
            filters["note_id"] = note_id
        rows = await self.backend.select(
            TableKind.FLASHCARDS, filters, order_by="created_at", ascending=True
        )
        return [Flashcard.from_row(row) for row in rows]

    async def insert_flashcards(
        self, note_id: str, cards: list[GeneratedFlashcard], difficulty: Difficulty
    ) -> list[Flashcard]:
        if not cards:
            return []
        rows = await self.backend.insert(
            TableKind.FLASHCARDS,
            [
                {
                    **self.owner,
                    "note_id": note_id,
                    "question": card.question,
                    "answer": card.answer,
                    "difficulty": difficulty.value,
                }
                for card in cards
            ],
        )
        logger.info(
            f"Saved {len(rows)} flashcards for note {note_id}",
            extra={"note_id": note_id, "difficulty": difficulty.value},
        )
        return [Flashcard.from_row(row) for row in rows]

    async def delete_flashcard(self, flashcard_id: str) -> None:
        deleted = await self.backend.delete(
            TableKind.FLASHCARDS, {**self.owner, "id": flashcard_id}
        )
        if not deleted:
            raise NotFoundError(
                f"Flashcard {flashcard_id} not found", context={"flashcard_id": flashcard_id}
            )

    async def delete_flashcards(self, note_id: str | None = None) -> int:
        filters = dict(self.owner)
        if note_id is not None:
            filters["note_id"] = note_id
        deleted = await self.backend.delete(TableKind.FLASHCARDS, filters)
        return len(deleted)
