"""
Draft/autosave controller.

One controller per open document. It owns the editable draft, compares it
with the last committed baseline, debounces commits through a single
timer and writes a history version for every committed change of an
existing note.

States:
    LOADING -> CLEAN -> DIRTY -> SAVING -> CLEAN
    NEW: no backend id yet and nothing entered
"""

import asyncio
from collections.abc import Callable
from datetime import datetime
from enum import Enum

from notewise.models import HistoryVersion, Note, NoteDraft, UserPreferences
from notewise.services.mode_selector import ModeSelector
from notewise.services.notifications import NotificationCenter
from notewise.services.preferences import PreferencesService
from notewise.services.snapshot_store import SnapshotStore
from notewise.utils.exceptions import NotewiseError, NotFoundError, ValidationError
from notewise.utils.logger import get_logger

logger = get_logger(__name__)

EMPTY_DRAFT = NoteDraft()


class DraftState(str, Enum):
    LOADING = "loading"
    NEW = "new"
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"


class DraftController:
    """
    Single-document draft state machine with debounced commits.

    At most one commit is in flight. A timer that fires while a commit is
    running re-arms instead of overlapping; an explicit save waits for the
    running commit and then commits whatever is still unsaved.

    Attributes:
        note_id: Backend id, None until a new document is first committed
        draft: Current editable values
        baseline: Last committed values (None for a new document)
        state: Current DraftState
        last_error: Error of the most recent failed commit
    """

    def __init__(
        self,
        selector: ModeSelector,
        note_id: str | None = None,
        *,
        store: SnapshotStore | None = None,
        preferences: PreferencesService | None = None,
        notifications: NotificationCenter | None = None,
        on_id_assigned: Callable[[str], None] | None = None,
        autosave_enabled: bool = True,
        autosave_interval: float = 1.0,
    ):
        """
        Initialize the controller.

        Args:
            selector: Mode selector providing the data source
            note_id: Existing note to edit, None for a new document
            store: Snapshot store updated after each commit
            preferences: Preferences service; its broadcasts reconfigure autosave
            notifications: Channel for save errors
            on_id_assigned: Called once with the backend id of a new document
            autosave_enabled: Autosave switch when no preferences service is given
            autosave_interval: Debounce interval in seconds when no preferences service is given
        """
        self.selector = selector
        self.store = store
        self.notifications = notifications
        self.on_id_assigned = on_id_assigned

        self.note_id = note_id
        self.note: Note | None = None
        self.draft = EMPTY_DRAFT
        self.baseline: NoteDraft | None = None
        self.updated_at: datetime | None = None
        self.state = DraftState.LOADING if note_id else DraftState.NEW
        self.last_error: Exception | None = None

        self.autosave_enabled = autosave_enabled
        self.autosave_interval = autosave_interval

        self._timer: asyncio.TimerHandle | None = None
        self._commit_task: asyncio.Task | None = None
        self._announced_id: str | None = None
        self._hold_autosave = False
        self._listeners: list[Callable[["DraftController"], None]] = []
        self._closed = False

        self._unsubscribe_prefs: Callable[[], None] | None = None
        if preferences is not None:
            self.apply_preferences(preferences.load())
            self._unsubscribe_prefs = preferences.subscribe(self.apply_preferences)

    # ═══════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════

    async def open(self) -> Note | None:
        """
        Load the document.

        Returns:
            The note, or None for a new document

        Raises:
            NotFoundError: If the note does not exist
        """
        if self.note_id is None:
            self._set_state(DraftState.NEW)
            return None

        self._set_state(DraftState.LOADING)
        note = await self.selector.source().get_note(self.note_id)
        if note is None:
            raise NotFoundError(f"Note {self.note_id} not found", context={"note_id": self.note_id})

        self.note = note
        self.baseline = note.draft()
        self.draft = self.baseline
        self.updated_at = note.updated_at
        self._set_state(DraftState.CLEAN)
        return note

    def close(self) -> None:
        """
        Tear down: cancel the timer and stop listening to preferences.
        A commit already in flight completes without being observed.
        """
        if self._closed:
            return
        self._closed = True
        self._cancel_timer()
        if self._unsubscribe_prefs is not None:
            self._unsubscribe_prefs()
            self._unsubscribe_prefs = None
        self._listeners.clear()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def saving(self) -> bool:
        return self._commit_task is not None and not self._commit_task.done()

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    def is_dirty(self) -> bool:
        """Draft differs structurally from the last committed values."""
        return self.draft != (self.baseline or EMPTY_DRAFT)

    # ═══════════════════════════════════════════════════════════
    # EDITING
    # ═══════════════════════════════════════════════════════════

    def edit(self, **changes) -> NoteDraft:
        """
        Change draft fields (title, content, tag_ids, folder_id).

        A differing edit marks the document dirty and restarts the autosave
        timer. An edit that returns the draft to the baseline makes it clean.
        """
        if self.state == DraftState.LOADING:
            raise ValidationError("Document is still loading")

        if "tag_ids" in changes:
            changes["tag_ids"] = frozenset(changes["tag_ids"])
        unknown = set(changes) - set(NoteDraft.model_fields)
        if unknown:
            raise ValidationError(f"Unknown draft fields: {sorted(unknown)}")

        draft = self.draft.model_copy(update=changes)
        if draft == self.draft:
            return self.draft
        self.draft = draft
        self._hold_autosave = False

        if self.saving:
            # Commit in flight: it settles the state; keep the timer running
            self._arm_timer()
            self._notify()
            return self.draft

        if self.is_dirty():
            self._set_state(DraftState.DIRTY)
            self._arm_timer()
        else:
            self._cancel_timer()
            self._set_state(self._resting_state())
        return self.draft

    def set_title(self, title: str) -> NoteDraft:
        return self.edit(title=title)

    def set_content(self, content: str) -> NoteDraft:
        return self.edit(content=content)

    def set_folder(self, folder_id: str | None) -> NoteDraft:
        return self.edit(folder_id=folder_id)

    def add_tag(self, tag_id: str) -> NoteDraft:
        return self.edit(tag_ids=self.draft.tag_ids | {tag_id})

    def remove_tag(self, tag_id: str) -> NoteDraft:
        return self.edit(tag_ids=self.draft.tag_ids - {tag_id})

    def restore(self, version: HistoryVersion) -> NoteDraft:
        """
        Replace the draft with a history snapshot. Goes dirty without arming
        the timer; an explicit save commits it as a new version on top.
        """
        if version.note_id != self.note_id:
            raise ValidationError(
                "History version belongs to another note",
                context={"note_id": self.note_id, "version_note_id": version.note_id},
            )
        self._cancel_timer()
        self.draft = version.snapshot()
        self._hold_autosave = True
        logger.info(
            f"Restored note {self.note_id} to version {version.version_number}",
            extra={"note_id": self.note_id, "version_number": version.version_number},
        )
        if not self.saving:
            self._set_state(DraftState.DIRTY if self.is_dirty() else self._resting_state())
        return self.draft

    # ═══════════════════════════════════════════════════════════
    # COMMITTING
    # ═══════════════════════════════════════════════════════════

    async def save(self) -> bool:
        """
        Explicit save.

        Waits for a commit in flight, then commits if anything is still
        unsaved.

        Returns:
            True if everything is saved afterwards
        """
        self._cancel_timer()
        self._hold_autosave = False
        if self._commit_task is not None and not self._commit_task.done():
            await asyncio.shield(self._commit_task)
        if not self.is_dirty():
            return True
        return await self._start_commit()

    async def wait_idle(self) -> None:
        """Wait until no commit is running."""
        while self._commit_task is not None and not self._commit_task.done():
            await asyncio.shield(self._commit_task)

    def _start_commit(self) -> asyncio.Task:
        self._commit_task = asyncio.get_running_loop().create_task(self._commit())
        return self._commit_task

    def _on_timer(self) -> None:
        self._timer = None
        if self._closed or not self.is_dirty():
            return
        if self.saving:
            self._arm_timer()
            return
        self._start_commit()

    async def _commit(self) -> bool:
        if self.note_id is None and self.draft.is_empty():
            # Never create a note nobody typed anything into
            logger.debug("Skipping commit of empty new document")
            return False

        submitted = self.draft
        committed = submitted.committed()
        previous = self.baseline
        note_id = self.note_id
        self._set_state(DraftState.SAVING)

        try:
            source = self.selector.source()
            if note_id is None:
                note = await source.insert_note(committed)
            else:
                values = {
                    "title": committed.title,
                    "content": committed.content,
                    "folder_id": committed.folder_id,
                }
                if source.supports_tags:
                    values["tag_ids"] = sorted(committed.tag_ids)
                note = await source.update_note(note_id, values)
        except NotewiseError as e:
            self.last_error = e
            logger.warning(
                f"Commit of note {note_id or '(new)'} failed",
                extra={"error": str(e), "note_id": note_id, "error_type": type(e).__name__},
            )
            if self._closed:
                return False
            if self.notifications:
                self.notifications.error("Failed to save note", error=e)
            self._set_state(DraftState.DIRTY)
            self._arm_timer()
            return False

        self.note_id = note.id
        self.note = note
        self.baseline = committed
        self.updated_at = note.updated_at
        self.last_error = None
        if self.draft == submitted:
            self.draft = committed

        if note_id is not None and previous is not None and source.supports_history:
            await self._write_history(source, note.id, previous)

        logger.info(
            f"Committed note {note.id}",
            extra={"note_id": note.id, "created": note_id is None},
        )

        if self._closed:
            return True

        if self.store is not None:
            self.store.upsert_note(note)

        if note_id is None and self._announced_id != note.id:
            self._announced_id = note.id
            if self.on_id_assigned is not None:
                self.on_id_assigned(note.id)

        if self.is_dirty():
            self._set_state(DraftState.DIRTY)
            if self._timer is None:
                self._arm_timer()
        else:
            self._set_state(DraftState.CLEAN)
        return True

    async def _write_history(self, source, note_id: str, snapshot: NoteDraft) -> None:
        try:
            version = await source.insert_history(note_id, snapshot)
        except NotewiseError as e:
            # The note itself is saved; a missing version is not worth failing the commit
            logger.warning(
                f"History write for note {note_id} failed",
                extra={"error": str(e), "note_id": note_id, "error_type": type(e).__name__},
            )
            return
        logger.debug(
            f"History version {version.version_number} written for note {note_id}",
            extra={"note_id": note_id, "version_number": version.version_number},
        )

    # ═══════════════════════════════════════════════════════════
    # AUTOSAVE SETTINGS
    # ═══════════════════════════════════════════════════════════

    def apply_preferences(self, prefs: UserPreferences) -> None:
        """Adopt broadcast autosave settings."""
        self.autosave_enabled = prefs.autosave_enabled
        self.autosave_interval = prefs.autosave_interval
        if not self.autosave_enabled:
            self._cancel_timer()
        elif self.state == DraftState.DIRTY and self._timer is None and not self._closed:
            self._arm_timer()

    def _arm_timer(self) -> None:
        self._cancel_timer()
        if not self.autosave_enabled or self._closed or self._hold_autosave:
            return
        self._timer = asyncio.get_running_loop().call_later(self.autosave_interval, self._on_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # ═══════════════════════════════════════════════════════════
    # LISTENERS
    # ═══════════════════════════════════════════════════════════

    def subscribe(self, listener: Callable[["DraftController"], None]) -> Callable[[], None]:
        """Register a state listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _resting_state(self) -> DraftState:
        return DraftState.CLEAN if self.note_id is not None else DraftState.NEW

    def _set_state(self, state: DraftState) -> None:
        if state != self.state:
            logger.debug(
                f"Draft {self.note_id or '(new)'}: {self.state.value} -> {state.value}",
                extra={"note_id": self.note_id},
            )
            self.state = state
        self._notify()

    def _notify(self) -> None:
        if self._closed:
            return
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Draft listener failed: {e}")
