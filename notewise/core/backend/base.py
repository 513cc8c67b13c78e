"""
Base interface for the backend data service.

Per-table CRUD with simple filter predicates plus a per-table change feed,
the shape a managed database-as-a-service exposes to its clients.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from notewise.core.backend.change_feed import FeedSubscription
from notewise.models.events import ChangeEvent, TableKind


class BackendClient(ABC):
    """Abstract base class for backend data service implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the backend (create tables/schema)."""
        pass

    # ═══════════════════════════════════════════════════════════
    # ROW OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def select(
        self,
        table: TableKind,
        filters: dict[str, Any] | None = None,
        *,
        order_by: str | None = None,
        ascending: bool = True,
        search: dict[str, str] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Select rows.

        Args:
            table: Table to read
            filters: Equality predicates (a list value means "IN")
            order_by: Column to sort by
            ascending: Sort direction
            search: Case-insensitive substring predicates, OR'ed together
            limit: Maximum rows

        Returns:
            Matching rows as dicts
        """
        pass

    @abstractmethod
    async def insert(self, table: TableKind, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Insert rows. Server-side defaults (id, timestamps) are filled in.

        Returns:
            The inserted rows as stored

        Raises:
            DuplicateError: On unique constraint violations
            BackendError: On any other failure
        """
        pass

    @abstractmethod
    async def update(
        self, table: TableKind, values: dict[str, Any], filters: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """
        Update rows matching filters.

        Returns:
            The updated rows as stored (empty if nothing matched)
        """
        pass

    @abstractmethod
    async def delete(self, table: TableKind, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Delete rows matching filters.

        Returns:
            The deleted rows
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # CHANGE FEED
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    def subscribe(
        self, table: TableKind, callback: Callable[[ChangeEvent], None]
    ) -> FeedSubscription:
        """
        Subscribe to row changes of one table.

        Args:
            table: Table to watch
            callback: Called once per committed change

        Returns:
            Subscription handle (close() to unsubscribe)
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connections and drop feed subscriptions."""
        pass
