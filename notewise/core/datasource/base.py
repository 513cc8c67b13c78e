"""
Base interface for data sources.

A data source is where the reads and writes of the current session mode
go: the remote backend for a signed-in identity, the persisted local
dataset in fallback mode. Callers never branch on the mode themselves;
they ask the mode selector for the source and check its capabilities.
"""

from abc import ABC, abstractmethod
from typing import Any

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
    Tag,
)
from notewise.utils.exceptions import ModeError

# Columns a caller may change through update_note()
NOTE_FIELDS = frozenset({"title", "content", "starred", "folder_id", "tag_ids"})


class DataSource(ABC):
    """
    Abstract base class for mode-specific data access.

    Capability flags tell callers which optional features are available:
    tags, history versions and flashcards exist only on the remote backend.
    """

    supports_tags: bool = False
    supports_history: bool = False
    supports_flashcards: bool = False
    supports_change_feed: bool = False

    identity: Identity | None = None

    # ═══════════════════════════════════════════════════════════
    # NOTES
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def list_notes(self, starred_only: bool = False) -> list[Note]:
        """
        List notes, newest first.

        Tag references are not populated; use list_note_tags().
        """
        pass

    @abstractmethod
    async def get_note(self, note_id: str) -> Note | None:
        """Get one note with its tag references, or None."""
        pass

    @abstractmethod
    async def insert_note(self, draft: NoteDraft | None = None, starred: bool = False) -> Note:
        """
        Create a note.

        Args:
            draft: Initial field values (empty note when omitted)
            starred: Initial starred flag

        Returns:
            The stored note with its assigned id and timestamps
        """
        pass

    @abstractmethod
    async def update_note(self, note_id: str, values: dict[str, Any]) -> Note:
        """
        Update fields of a note. `updated_at` is refreshed.

        Args:
            note_id: Note to update
            values: Subset of title, content, starred, folder_id, tag_ids

        Returns:
            The stored note after the update

        Raises:
            NotFoundError: If the note does not exist
        """
        pass

    @abstractmethod
    async def delete_note(self, note_id: str) -> None:
        """Hard-delete a note (history, tags and flashcards cascade)."""
        pass

    @abstractmethod
    async def search_notes(self, query: str) -> list[Note]:
        """Case-insensitive substring match on title or content, newest first."""
        pass

    # ═══════════════════════════════════════════════════════════
    # FOLDERS & TAGS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def list_folders(self) -> list[Folder]:
        pass

    @abstractmethod
    async def insert_folder(self, name: str, color: str) -> Folder:
        pass

    async def list_tags(self) -> list[Tag]:
        """Tags of the owner. Empty where tags are unsupported."""
        return []

    async def list_note_tags(self) -> list[NoteTag]:
        """All (note, tag) pairs of the owner. Empty where tags are unsupported."""
        return []

    async def insert_tag(self, name: str, color: str) -> Tag:
        """
        Create a tag.

        Raises:
            DuplicateError: If the owner already has a tag with this name
        """
        raise self._unsupported("Tags")

    # ═══════════════════════════════════════════════════════════
    # HISTORY
    # ═══════════════════════════════════════════════════════════

    async def list_history(self, note_id: str) -> list[HistoryVersion]:
        """History versions of a note, newest first."""
        raise self._unsupported("Note history")

    async def insert_history(self, note_id: str, snapshot: NoteDraft) -> HistoryVersion:
        """Append a history version numbered max + 1."""
        raise self._unsupported("Note history")

    # ═══════════════════════════════════════════════════════════
    # FLASHCARDS
    # ═══════════════════════════════════════════════════════════

    async def list_flashcards(self, note_id: str | None = None) -> list[Flashcard]:
        raise self._unsupported("Flashcards")

    async def insert_flashcards(
        self, note_id: str, cards: list[GeneratedFlashcard], difficulty: Difficulty
    ) -> list[Flashcard]:
        raise self._unsupported("Flashcards")

    async def delete_flashcard(self, flashcard_id: str) -> None:
        raise self._unsupported("Flashcards")

    async def delete_flashcards(self, note_id: str | None = None) -> int:
        """Delete every flashcard (of one note, when given). Returns the count."""
        raise self._unsupported("Flashcards")

    def _unsupported(self, feature: str) -> ModeError:
        return ModeError(
            f"{feature} not available in {type(self).__name__}",
            context={"source": type(self).__name__},
        )
