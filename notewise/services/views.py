"""
View controllers: what a screen mounts and tears down.

A notes view owns one snapshot store fed by the change feed. The editor
view owns one draft controller. Both answer with a redirect when the
session cannot show them.
"""

from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel

from notewise.models import Folder, Note, SessionState, Tag
from notewise.services.draft_controller import DraftController
from notewise.services.mode_selector import ModeSelector
from notewise.services.notes import filter_notes
from notewise.services.notifications import NotificationCenter
from notewise.services.preferences import PreferencesService
from notewise.services.reconciler import ChangeFeedReconciler, FeedAttachment
from notewise.services.snapshot_store import SnapshotStore
from notewise.utils.exceptions import NotewiseError
from notewise.utils.logger import get_logger

logger = get_logger(__name__)

AUTH_PATH = "/auth"
DASHBOARD_PATH = "/dashboard"


def editor_path(note_id: str | None = None) -> str:
    return f"/editor/{note_id}" if note_id else "/editor"


class Redirect(BaseModel):
    """Navigation the caller should perform instead of showing the view."""

    model_config = {"frozen": True}

    path: str
    replace: bool = True


class ViewKind(str, Enum):
    DASHBOARD = "dashboard"
    STARRED = "starred"
    SEARCH = "search"
    SIDEBAR = "sidebar"


class NotesView:
    """
    A note-list screen (dashboard, starred, search results, sidebar).

    Mount loads the snapshot and subscribes it to the change feed; unmount
    releases every subscription. Mode changes while mounted reload the
    snapshot, or redirect to sign-in when data access is lost.
    """

    def __init__(
        self,
        selector: ModeSelector,
        reconciler: ChangeFeedReconciler,
        kind: ViewKind = ViewKind.DASHBOARD,
        notifications: NotificationCenter | None = None,
    ):
        self.selector = selector
        self.reconciler = reconciler
        self.kind = kind
        self.notifications = notifications or NotificationCenter()

        self.store = SnapshotStore(selector, self.notifications)
        self.attachment: FeedAttachment | None = None
        self.redirect: Redirect | None = None
        self.mounted = False
        self.search_results: list[Note] = []

        self._unsubscribe_mode: Callable[[], None] | None = None

    async def mount(self) -> Redirect | None:
        state = self.selector.current_mode()
        if not state.has_data_access:
            self.redirect = Redirect(path=AUTH_PATH)
            return self.redirect

        self.mounted = True
        self.redirect = None
        self._unsubscribe_mode = self.selector.subscribe(self._on_mode_change)
        self.attachment = self.reconciler.attach(self.store)
        await self.store.load()
        logger.debug(
            f"{self.kind.value} view mounted in {state.mode.value} mode",
            extra={"feed_live": self.live},
        )
        return None

    def unmount(self) -> None:
        if not self.mounted:
            return
        self.mounted = False
        self._detach()
        if self._unsubscribe_mode is not None:
            self._unsubscribe_mode()
            self._unsubscribe_mode = None

    @property
    def live(self) -> bool:
        """True while the change feed subscriptions are connected."""
        return self.attachment is not None and self.attachment.live

    def _detach(self) -> None:
        if self.attachment is not None:
            self.attachment.unsubscribe()
            self.attachment = None
        self.store.cancel_reloads()

    def _on_mode_change(self, state: SessionState) -> None:
        self._detach()
        self.store.reset()
        if not state.has_data_access:
            self.redirect = Redirect(path=AUTH_PATH)
            return
        self.attachment = self.reconciler.attach(self.store)
        self.store.schedule_reload()

    # ═══════════════════════════════════════════════════════════
    # CONTENT
    # ═══════════════════════════════════════════════════════════

    def visible_notes(self, query: str = "") -> list[Note]:
        """Notes this view shows, with the local filter applied."""
        if self.kind == ViewKind.STARRED:
            notes = self.store.snapshot.starred_notes()
        elif self.kind == ViewKind.SEARCH:
            return list(self.search_results)
        else:
            notes = self.store.notes
        return filter_notes(notes, query)

    def notes_in_folder(self, folder_id: str | None) -> list[Note]:
        return self.store.snapshot.notes_in_folder(folder_id)

    @property
    def folders(self) -> list[Folder]:
        return self.store.folders

    @property
    def tags(self) -> list[Tag]:
        return self.store.tags

    async def run_search(self, query: str) -> list[Note]:
        """Backend search for the search view. Blank queries clear the results."""
        if not query or not query.strip():
            self.search_results = []
            return []
        try:
            self.search_results = await self.selector.source().search_notes(query.strip())
        except NotewiseError as e:
            self.notifications.error("Search failed", error=e)
            self.search_results = []
        return self.search_results


class EditorView:
    """The editor screen around one draft controller."""

    def __init__(
        self,
        selector: ModeSelector,
        notifications: NotificationCenter | None = None,
        preferences: PreferencesService | None = None,
        store: SnapshotStore | None = None,
    ):
        self.selector = selector
        self.notifications = notifications or NotificationCenter()
        self.preferences = preferences
        self.store = store

        self.controller: DraftController | None = None
        self.path: str | None = None

    async def mount(self, note_id: str | None = None) -> Redirect | None:
        """
        Open a note (or a new document).

        Returns:
            Redirect to sign-in when unauthenticated, to the dashboard when
            the note does not exist; None when the editor is ready
        """
        if not self.selector.current_mode().has_data_access:
            return Redirect(path=AUTH_PATH)

        self.controller = DraftController(
            self.selector,
            note_id,
            store=self.store,
            preferences=self.preferences,
            notifications=self.notifications,
            on_id_assigned=self._on_id_assigned,
        )
        self.path = editor_path(note_id)

        try:
            await self.controller.open()
        except NotewiseError as e:
            # Not-found and load failures both fall back to the dashboard
            self.notifications.error("Error loading note", error=e)
            self.unmount()
            return Redirect(path=DASHBOARD_PATH)
        return None

    def unmount(self) -> None:
        if self.controller is not None:
            self.controller.close()

    def _on_id_assigned(self, note_id: str) -> None:
        # New document got its backend id: the editor now addresses it
        self.path = editor_path(note_id)
