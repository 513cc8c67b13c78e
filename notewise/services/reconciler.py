"""
Change feed reconciler.

Turns backend change feed events into snapshot store mutations. Several
views may each subscribe with their own store; deduplication lives in the
shared apply function, not in any one subscriber.
"""

from collections.abc import Callable, Iterable

from notewise.core.backend.change_feed import FeedSubscription
from notewise.models import ChangeEvent, ChangeType, TableKind
from notewise.services.mode_selector import ModeSelector
from notewise.services.snapshot_store import SNAPSHOT_TABLES, SnapshotStore
from notewise.utils.logger import get_logger

logger = get_logger(__name__)

# Association changes cannot be patched in place; the store reloads
RELOAD_TABLES = (TableKind.TAGS, TableKind.NOTE_TAGS)

DEFAULT_TABLES = (TableKind.NOTES, TableKind.FOLDERS, TableKind.TAGS, TableKind.NOTE_TAGS)


def apply_event(store: SnapshotStore, event: ChangeEvent) -> bool:
    """
    Apply one feed event to a snapshot store.

    insert: discarded if the id is present (our own optimistic write echoed)
    update: replaced in place, inserted if absent
    delete: removed, no-op if absent
    tags / note_tags: full reload of the store (note_tags only for held notes)

    Returns:
        True if the snapshot changed synchronously
    """
    if event.table == TableKind.NOTE_TAGS:
        # note_tags rows carry no owner; only associations of held notes matter
        row = event.new or event.old or {}
        if store.snapshot.get_note(row.get("note_id")) is None:
            return False

    if event.table in RELOAD_TABLES:
        store.schedule_reload()
        return False

    if event.table not in SNAPSHOT_TABLES:
        return False

    if event.event_type == ChangeType.DELETE:
        row = event.old
    else:
        row = event.new

    if not row or row.get("id") is None:
        logger.warning(
            f"Ignoring {event.event_type.value} event on {event.table.value} without a row id"
        )
        return False

    return store.apply_local_mutation(event.table, event.event_type, row)


def is_owned_by(event: ChangeEvent, user_id: str) -> bool:
    """False when either row of the event belongs to another account."""
    for row in (event.new, event.old):
        if row and row.get("user_id") not in (None, user_id):
            return False
    return True


class FeedHandle:
    """Subscription handle returned to views."""

    def __init__(self, table: TableKind, subscription: FeedSubscription | None):
        self.table = table
        self._subscription = subscription

    @property
    def live(self) -> bool:
        """False once unsubscribed, dropped by the transport, or never connected."""
        return self._subscription is not None and self._subscription.live

    @property
    def error(self) -> Exception | None:
        return self._subscription.error if self._subscription is not None else None

    def unsubscribe(self) -> None:
        if self._subscription is not None:
            self._subscription.close()


class FeedAttachment:
    """The subscriptions feeding one snapshot store."""

    def __init__(self, store: SnapshotStore, handles: list[FeedHandle]):
        self.store = store
        self.handles = handles

    @property
    def live(self) -> bool:
        return bool(self.handles) and all(handle.live for handle in self.handles)

    def unsubscribe(self) -> None:
        for handle in self.handles:
            handle.unsubscribe()
        self.store.cancel_reloads()


class ChangeFeedReconciler:
    """
    Subscribes snapshot stores to the backend change feed.

    Active only in authenticated mode: elsewhere subscribe() returns an
    inert handle that reports not live. The backend publishes every
    committed row, so events owned by other accounts are dropped here.
    Dropped subscriptions are not retried; their handles report not live.
    """

    def __init__(self, selector: ModeSelector):
        self.selector = selector

    def subscribe(
        self, table: TableKind, on_event: Callable[[ChangeEvent], None]
    ) -> FeedHandle:
        state = self.selector.current_mode()
        backend = self.selector.backend
        if not state.is_authenticated or backend is None:
            logger.debug(
                f"Change feed inactive in {state.mode.value} mode",
                extra={"table": table.value},
            )
            return FeedHandle(table, None)

        owner = state.identity.id

        def deliver(event: ChangeEvent) -> None:
            if not is_owned_by(event, owner):
                return
            on_event(event)

        return FeedHandle(table, backend.subscribe(table, deliver))

    def attach(
        self, store: SnapshotStore, tables: Iterable[TableKind] = DEFAULT_TABLES
    ) -> FeedAttachment:
        """Feed every event of the given tables into a store."""
        handles = [
            self.subscribe(table, lambda event, s=store: apply_event(s, event))
            for table in tables
        ]
        return FeedAttachment(store, [h for h in handles if h.live])
