"""
Local snapshot store.

Holds the notes, folders and tags one view works with. Reads come from
the data source of the current mode; optimistic local writes and change
feed events are applied through apply_local_mutation(), which is
idempotent so echoes of our own writes are harmless.
"""

import asyncio
import locale
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from notewise.models import ChangeType, Folder, Note, NoteTag, Snapshot, TableKind, Tag
from notewise.models.note import utc_now
from notewise.services.mode_selector import ModeSelector
from notewise.services.notifications import NotificationCenter
from notewise.utils.exceptions import NotewiseError, ValidationError
from notewise.utils.logger import get_logger

logger = get_logger(__name__)

SNAPSHOT_TABLES = (TableKind.NOTES, TableKind.FOLDERS, TableKind.TAGS)

Entity = Note | Folder | Tag | dict[str, Any]


def name_key(name: str) -> str:
    """Case-insensitive, locale-aware sort key for folder and tag names."""
    return locale.strxfrm(name.casefold())


def sort_notes(notes: list[Note]) -> list[Note]:
    return sorted(notes, key=lambda n: n.updated_at, reverse=True)


def sort_by_name(items: list) -> list:
    return sorted(items, key=lambda item: name_key(item.name))


class SnapshotStore:
    """
    In-memory notes/folders/tags of one view.

    Attributes:
        snapshot: Current collections
        last_error: Error of the most recent failed load, cleared by a successful one
    """

    def __init__(self, selector: ModeSelector, notifications: NotificationCenter | None = None):
        self.selector = selector
        self.notifications = notifications
        self.snapshot = Snapshot()
        self.last_error: Exception | None = None
        self.loading = False

        self._listeners: list[Callable[[Snapshot], None]] = []
        self._generation = 0
        self._reloads: set[asyncio.Task] = set()

    @property
    def notes(self) -> list[Note]:
        return self.snapshot.notes

    @property
    def folders(self) -> list[Folder]:
        return self.snapshot.folders

    @property
    def tags(self) -> list[Tag]:
        return self.snapshot.tags

    # ═══════════════════════════════════════════════════════════
    # LOADING
    # ═══════════════════════════════════════════════════════════

    async def load(self) -> Snapshot:
        """
        Replace the snapshot with fresh data from the current source.

        Notes, folders, tags and note-tag pairs are read in parallel. Where
        the source has no tags, tags degrade to an empty set. On failure the
        previous snapshot stays and the error is reported. When loads
        overlap, the one started last wins.
        """
        self._generation += 1
        generation = self._generation
        self.loading = True

        try:
            source = self.selector.source()
            if source.supports_tags:
                notes, folders, tags, pairs = await asyncio.gather(
                    source.list_notes(),
                    source.list_folders(),
                    source.list_tags(),
                    source.list_note_tags(),
                )
            else:
                notes, folders = await asyncio.gather(source.list_notes(), source.list_folders())
                tags, pairs = [], []
        except NotewiseError as e:
            if generation == self._generation:
                self.loading = False
                self.last_error = e
                logger.warning(
                    "Snapshot load failed",
                    extra={"error": str(e), "error_type": type(e).__name__},
                )
                if self.notifications:
                    self.notifications.error("Failed to load notes", error=e)
                self._notify()
            return self.snapshot

        if generation != self._generation:
            logger.debug("Discarding superseded snapshot load")
            return self.snapshot

        tags = sort_by_name(tags)
        self.snapshot = Snapshot(
            notes=sort_notes(self._enrich(notes, tags, pairs)),
            folders=sort_by_name(folders),
            tags=tags,
            loaded_at=utc_now(),
        )
        self.loading = False
        self.last_error = None
        logger.debug(
            f"Snapshot loaded: {len(self.snapshot.notes)} notes, "
            f"{len(self.snapshot.folders)} folders, {len(self.snapshot.tags)} tags"
        )
        self._notify()
        return self.snapshot

    def schedule_reload(self) -> asyncio.Task:
        """Start a background load() (used when tag associations change)."""
        task = asyncio.get_running_loop().create_task(self.load())
        self._reloads.add(task)
        task.add_done_callback(self._reloads.discard)
        return task

    async def wait_reloads(self) -> None:
        """Wait for scheduled reloads to finish."""
        while self._reloads:
            await asyncio.gather(*list(self._reloads))

    def cancel_reloads(self) -> None:
        for task in list(self._reloads):
            task.cancel()

    @staticmethod
    def _enrich(notes: list[Note], tags: list[Tag], pairs: list[NoteTag]) -> list[Note]:
        tag_ids_by_note: dict[str, list[str]] = {}
        for pair in pairs:
            tag_ids_by_note.setdefault(pair.note_id, []).append(pair.tag_id)
        tags_by_id = {tag.id: tag for tag in tags}

        enriched = []
        for note in notes:
            tag_ids = tag_ids_by_note.get(note.id, note.tag_ids)
            enriched.append(
                note.model_copy(
                    update={
                        "tag_ids": list(tag_ids),
                        "tags": [tags_by_id[t] for t in tag_ids if t in tags_by_id],
                    }
                )
            )
        return enriched

    # ═══════════════════════════════════════════════════════════
    # MUTATIONS
    # ═══════════════════════════════════════════════════════════

    def apply_local_mutation(self, kind: TableKind, op: ChangeType, entity: Entity) -> bool:
        """
        Apply an insert/update/delete to the snapshot synchronously.

        - insert of an id already present: no-op
        - update of an absent id: treated as insert
        - update older than the held note (by updated_at): no-op
        - delete of an absent id: no-op

        Args:
            kind: notes, folders or tags
            op: Change type
            entity: Model instance or backend row (delete needs only the id)

        Returns:
            True if the snapshot changed
        """
        if kind not in SNAPSHOT_TABLES:
            raise ValidationError(
                f"Snapshot does not hold {kind.value}", context={"table": kind.value}
            )

        entity_id = entity.get("id") if isinstance(entity, dict) else entity.id
        if entity_id is None:
            raise ValidationError("Entity without id", context={"table": kind.value})

        items = self._collection(kind)
        index = next((i for i, item in enumerate(items) if item.id == entity_id), None)

        if op == ChangeType.DELETE:
            if index is None:
                return False
            items = items[:index] + items[index + 1 :]
        else:
            if op == ChangeType.INSERT and index is not None:
                return False
            existing = items[index] if index is not None else None
            model = self._to_model(kind, entity, existing)
            if (
                kind == TableKind.NOTES
                and existing is not None
                and model.updated_at < existing.updated_at
            ):
                logger.debug(f"Ignoring stale update of note {entity_id}")
                return False
            if existing is not None and model == existing:
                return False
            items = [item for item in items if item.id != entity_id] + [model]

        self._replace_collection(kind, items)
        self._notify()
        return True

    def upsert_note(self, note: Note) -> bool:
        return self.apply_local_mutation(TableKind.NOTES, ChangeType.UPDATE, note)

    def remove_note(self, note_id: str) -> bool:
        return self.apply_local_mutation(TableKind.NOTES, ChangeType.DELETE, {"id": note_id})

    def reset(self) -> None:
        """Drop every collection (mode change, teardown)."""
        self._generation += 1
        self.snapshot = Snapshot()
        self.last_error = None
        self.loading = False
        self._notify()

    def _collection(self, kind: TableKind) -> list:
        if kind == TableKind.NOTES:
            return self.snapshot.notes
        if kind == TableKind.FOLDERS:
            return self.snapshot.folders
        return self.snapshot.tags

    def _replace_collection(self, kind: TableKind, items: list) -> None:
        if kind == TableKind.NOTES:
            update = {"notes": sort_notes(items)}
        elif kind == TableKind.FOLDERS:
            update = {"folders": sort_by_name(items)}
        else:
            tags = sort_by_name(items)
            tags_by_id = {tag.id: tag for tag in tags}
            update = {
                "tags": tags,
                "notes": [
                    n.model_copy(
                        update={"tags": [tags_by_id[t] for t in n.tag_ids if t in tags_by_id]}
                    )
                    for n in self.snapshot.notes
                ],
            }
        self.snapshot = self.snapshot.model_copy(update=update)

    def _to_model(self, kind: TableKind, entity: Entity, existing: BaseModel | None) -> BaseModel:
        if kind == TableKind.NOTES:
            if isinstance(entity, Note):
                note = entity
            else:
                # Feed rows carry no tag references; keep the ones we hold
                tag_ids = entity.get("tag_ids")
                if tag_ids is None:
                    tag_ids = existing.tag_ids if existing is not None else []
                note = Note.from_row(entity, tag_ids)
            tags_by_id = {tag.id: tag for tag in self.snapshot.tags}
            return note.model_copy(
                update={"tags": [tags_by_id[t] for t in note.tag_ids if t in tags_by_id]}
            )
        if kind == TableKind.FOLDERS:
            return entity if isinstance(entity, Folder) else Folder.from_row(entity)
        return entity if isinstance(entity, Tag) else Tag.from_row(entity)

    # ═══════════════════════════════════════════════════════════
    # LISTENERS
    # ═══════════════════════════════════════════════════════════

    def subscribe(self, listener: Callable[[Snapshot], None]) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.snapshot)
            except Exception as e:
                logger.error(f"Snapshot listener failed: {e}")
