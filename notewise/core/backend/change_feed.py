"""
In-process change feed.

Fans committed row changes out to per-table subscribers. Delivery is
deferred to the next event loop iteration, so a writer always sees its own
response before the echo of its write arrives, the same ordering a remote
push feed produces.
"""

import asyncio
from collections import defaultdict
from collections.abc import Callable

from notewise.models.events import ChangeEvent, TableKind
from notewise.utils.logger import get_logger

logger = get_logger(__name__)


class FeedSubscription:
    """
    Handle for one feed consumer.

    A subscription is live from creation until it is closed by its owner or
    failed by the transport. Failed subscriptions are not reconnected.
    """

    def __init__(
        self,
        hub: "ChangeFeedHub",
        table: TableKind,
        callback: Callable[[ChangeEvent], None],
    ):
        self.hub = hub
        self.table = table
        self.callback = callback
        self.error: Exception | None = None
        self._closed = False

    @property
    def live(self) -> bool:
        """True while events are being delivered."""
        return not self._closed and self.error is None

    def close(self) -> None:
        """Unsubscribe. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.hub._remove(self)

    def fail(self, error: Exception) -> None:
        """Mark the subscription as dropped by the transport."""
        if not self.live:
            return
        self.error = error
        self.hub._remove(self)
        logger.warning(
            f"Feed subscription on {self.table.value} dropped",
            extra={
                "error": str(error),
                "table": self.table.value,
                "error_type": type(error).__name__,
            },
        )

    def _deliver(self, event: ChangeEvent) -> None:
        if not self.live:
            return
        try:
            self.callback(event)
        except Exception as e:
            # One broken consumer must not starve the others
            logger.error(
                f"Feed callback failed for {self.table.value}",
                extra={
                    "error": str(e),
                    "table": self.table.value,
                    "event_type": event.event_type.value,
                },
            )


class ChangeFeedHub:
    """Per-table registry of feed subscriptions."""

    def __init__(self):
        self._subscriptions: dict[TableKind, list[FeedSubscription]] = defaultdict(list)

    def subscribe(
        self, table: TableKind, callback: Callable[[ChangeEvent], None]
    ) -> FeedSubscription:
        subscription = FeedSubscription(self, table, callback)
        self._subscriptions[table].append(subscription)
        logger.debug(f"Feed subscriber added for {table.value}", extra={"table": table.value})
        return subscription

    def publish(self, event: ChangeEvent) -> None:
        """Schedule delivery of an event to every live subscriber of its table."""
        subscribers = list(self._subscriptions.get(event.table, []))
        if not subscribers:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for subscription in subscribers:
            if loop is not None:
                loop.call_soon(subscription._deliver, event)
            else:
                subscription._deliver(event)

    def subscriber_count(self, table: TableKind) -> int:
        return len(self._subscriptions.get(table, []))

    def disconnect_all(self, error: Exception) -> None:
        """Fail every subscription (transport went away)."""
        for subscriptions in list(self._subscriptions.values()):
            for subscription in list(subscriptions):
                subscription.fail(error)

    def close(self) -> None:
        for subscriptions in list(self._subscriptions.values()):
            for subscription in list(subscriptions):
                subscription.close()

    def _remove(self, subscription: FeedSubscription) -> None:
        subscriptions = self._subscriptions.get(subscription.table, [])
        if subscription in subscriptions:
            subscriptions.remove(subscription)
