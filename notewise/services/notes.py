"""
One-shot note actions: create, star, delete, search, folders, tags, and
importing a fallback dataset into a signed-in account.

Star and delete are optimistic: the snapshot changes first and is rolled
back if the write fails.
"""

from notewise.models import (
    DEFAULT_FOLDER_COLOR,
    DEFAULT_TAG_COLOR,
    ChangeType,
    Folder,
    Note,
    NoteDraft,
    TableKind,
    Tag,
    normalize_legacy_tags,
)
from notewise.services.mode_selector import ModeSelector
from notewise.services.notifications import NotificationCenter
from notewise.services.snapshot_store import SnapshotStore
from notewise.utils.exceptions import (
    DuplicateError,
    ModeError,
    NotewiseError,
    ValidationError,
)
from notewise.utils.html import strip_html
from notewise.utils.logger import get_logger

logger = get_logger(__name__)


def filter_notes(notes: list[Note], query: str) -> list[Note]:
    """
    Local dashboard filter: case-insensitive match on title, plain-text
    content or tag names. An empty query keeps every note.
    """
    needle = query.strip().lower()
    if not needle:
        return list(notes)
    return [
        note
        for note in notes
        if needle in note.title.lower()
        or needle in strip_html(note.content).lower()
        or any(needle in tag.name.lower() for tag in note.tags)
    ]


class NoteService:
    """Note actions against the data source of the current mode."""

    def __init__(
        self,
        selector: ModeSelector,
        notifications: NotificationCenter | None = None,
    ):
        self.selector = selector
        self.notifications = notifications or NotificationCenter()

    # ═══════════════════════════════════════════════════════════
    # NOTES
    # ═══════════════════════════════════════════════════════════

    async def create_note(self, store: SnapshotStore | None = None) -> Note | None:
        """Persist an empty note immediately and return it."""
        try:
            note = await self.selector.source().insert_note()
        except NotewiseError as e:
            self.notifications.error("Failed to create note", error=e)
            return None

        if store is not None:
            store.apply_local_mutation(TableKind.NOTES, ChangeType.INSERT, note)
        return note

    async def toggle_star(self, store: SnapshotStore, note: Note) -> bool:
        """
        Flip the starred flag optimistically.

        Returns:
            True if the backend accepted the change
        """
        # The caller's copy may predate an autosave; flip the one the store holds
        current = store.snapshot.get_note(note.id) or note
        optimistic = current.model_copy(update={"starred": not current.starred})
        store.upsert_note(optimistic)

        try:
            saved = await self.selector.source().update_note(
                note.id, {"starred": optimistic.starred}
            )
        except NotewiseError as e:
            held = store.snapshot.get_note(note.id) or current
            store.upsert_note(held.model_copy(update={"starred": current.starred}))
            logger.warning(
                f"Star toggle of {note.id} rolled back", extra={"error": str(e), "note_id": note.id}
            )
            self.notifications.error("Failed to update note", error=e)
            return False

        store.upsert_note(saved.model_copy(update={"tag_ids": current.tag_ids}))
        self.notifications.success(
            "Note starred" if saved.starred else "Note unstarred", saved.title
        )
        return True

    async def delete_note(self, store: SnapshotStore, note_id: str) -> bool:
        """
        Remove a note optimistically.

        Returns:
            True if the backend deleted it
        """
        original = store.snapshot.get_note(note_id)
        store.remove_note(note_id)

        try:
            await self.selector.source().delete_note(note_id)
        except NotewiseError as e:
            if original is not None:
                store.apply_local_mutation(TableKind.NOTES, ChangeType.INSERT, original)
            logger.warning(
                f"Delete of {note_id} rolled back", extra={"error": str(e), "note_id": note_id}
            )
            self.notifications.error("Failed to delete note", error=e)
            return False

        self.notifications.success("Note deleted")
        return True

    async def starred_notes(self) -> list[Note]:
        try:
            return await self.selector.source().list_notes(starred_only=True)
        except NotewiseError as e:
            self.notifications.error("Failed to load starred notes", error=e)
            return []

    async def search(self, query: str) -> list[Note]:
        """Backend search, newest first. Blank queries return nothing."""
        if not query or not query.strip():
            return []
        try:
            return await self.selector.source().search_notes(query.strip())
        except NotewiseError as e:
            self.notifications.error("Search failed", error=e)
            return []

    # ═══════════════════════════════════════════════════════════
    # FOLDERS & TAGS
    # ═══════════════════════════════════════════════════════════

    async def create_folder(
        self, name: str, color: str = DEFAULT_FOLDER_COLOR, store: SnapshotStore | None = None
    ) -> Folder | None:
        name = (name or "").strip()
        if not name:
            self.notifications.error("Folder name is required", error=ValidationError("Empty name"))
            return None

        try:
            folder = await self.selector.source().insert_folder(name, color)
        except NotewiseError as e:
            self.notifications.error("Failed to create folder", error=e)
            return None

        if store is not None:
            store.apply_local_mutation(TableKind.FOLDERS, ChangeType.INSERT, folder)
        self.notifications.success("Folder created", name)
        return folder

    async def create_tag(
        self, name: str, color: str = DEFAULT_TAG_COLOR, store: SnapshotStore | None = None
    ) -> Tag | None:
        """Create a tag. A duplicate name is reported, not raised."""
        name = (name or "").strip()
        if not name:
            self.notifications.error("Tag name is required", error=ValidationError("Empty name"))
            return None

        try:
            source = self.selector.source()
        except NotewiseError as e:
            self.notifications.error("Failed to create tag", error=e)
            return None
        if not source.supports_tags:
            self.notifications.error(
                "Tags are not available in demo mode", error=ModeError("Tags unsupported")
            )
            return None

        try:
            tag = await source.insert_tag(name, color)
        except DuplicateError as e:
            self.notifications.error(
                "Tag already exists", f'A tag named "{name}" already exists', error=e
            )
            return None
        except NotewiseError as e:
            self.notifications.error("Failed to create tag", error=e)
            return None

        if store is not None:
            store.apply_local_mutation(TableKind.TAGS, ChangeType.INSERT, tag)
        return tag

    # ═══════════════════════════════════════════════════════════
    # LEGACY IMPORT
    # ═══════════════════════════════════════════════════════════

    async def import_fallback_notes(self, clear: bool = True) -> list[Note]:
        """
        Copy the fallback dataset into the signed-in account.

        Folders are recreated, legacy tag arrays become tags and note_tags
        rows (existing tags of the same name are reused).

        Args:
            clear: Leave fallback mode afterwards

        Returns:
            The imported notes

        Raises:
            ModeError: If not signed in
        """
        state = self.selector.current_mode()
        if not state.is_authenticated:
            raise ModeError("Importing requires a signed-in account")

        source = self.selector.source()
        dataset = self.selector.dataset
        rows = dataset.load_notes()
        folder_rows = dataset.load_folders()

        folder_ids: dict[str, str] = {}
        for row in folder_rows:
            folder = await source.insert_folder(row["name"], row.get("color", DEFAULT_FOLDER_COLOR))
            folder_ids[row["id"]] = folder.id

        tag_ids = {tag.name: tag.id for tag in await source.list_tags()}
        imported: list[Note] = []

        for row in rows:
            tags, _ = normalize_legacy_tags(row["id"], row.get("tags"))
            for tag in tags:
                if tag.name not in tag_ids:
                    created = await source.insert_tag(tag.name, tag.color)
                    tag_ids[tag.name] = created.id

            draft = NoteDraft(
                title=row.get("title") or "",
                content=row.get("content") or "",
                tag_ids=frozenset(tag_ids[tag.name] for tag in tags),
                folder_id=folder_ids.get(row.get("folder_id")),
            )
            imported.append(await source.insert_note(draft, starred=bool(row.get("is_starred"))))

        logger.info(
            f"Imported {len(imported)} fallback notes into account {state.identity.id}",
            extra={"notes": len(imported), "folders": len(folder_ids), "tags": len(tag_ids)},
        )

        if clear:
            self.selector.exit_fallback()
        self.notifications.success("Notes imported", f"{len(imported)} notes added to your account")
        return imported
