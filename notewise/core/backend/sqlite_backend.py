"""
SQLite backend data service.

Stands in for the managed database: the six application tables, generic
per-table CRUD with filter predicates, server-side defaults and an
in-process change feed fed by every committed write.
"""

import asyncio
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite

from notewise.core.backend.base import BackendClient
from notewise.core.backend.change_feed import ChangeFeedHub, FeedSubscription
from notewise.models.events import ChangeEvent, ChangeType, TableKind
from notewise.utils.exceptions import BackendError, DuplicateError, ValidationError
from notewise.utils.id_generator import generate_uuid
from notewise.utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS notes (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        title TEXT NOT NULL DEFAULT 'Untitled',
        content TEXT NOT NULL DEFAULT '',
        is_starred INTEGER NOT NULL DEFAULT 0,
        folder_id TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS folders (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        name TEXT NOT NULL,
        color TEXT NOT NULL DEFAULT '#6366f1',
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tags (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        name TEXT NOT NULL,
        color TEXT NOT NULL DEFAULT '#6b7280',
        created_at TEXT NOT NULL,
        UNIQUE (user_id, name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS note_tags (
        note_id TEXT NOT NULL,
        tag_id TEXT NOT NULL,
        PRIMARY KEY (note_id, tag_id),
        FOREIGN KEY (note_id) REFERENCES notes(id) ON DELETE CASCADE,
        FOREIGN KEY (tag_id) REFERENCES tags(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS flashcards (
        id TEXT PRIMARY KEY,
        note_id TEXT NOT NULL,
        user_id TEXT,
        question TEXT NOT NULL,
        answer TEXT NOT NULL,
        difficulty TEXT NOT NULL CHECK (difficulty IN ('easy', 'medium', 'hard')),
        created_at TEXT NOT NULL,
        FOREIGN KEY (note_id) REFERENCES notes(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS note_history (
        id TEXT PRIMARY KEY,
        note_id TEXT NOT NULL,
        user_id TEXT,
        title TEXT NOT NULL,
        content TEXT NOT NULL DEFAULT '',
        tag_ids TEXT NOT NULL DEFAULT '[]',
        folder_id TEXT,
        version_number INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        UNIQUE (note_id, version_number),
        FOREIGN KEY (note_id) REFERENCES notes(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_notes_updated ON notes(updated_at)",
    "CREATE INDEX IF NOT EXISTS idx_notes_user ON notes(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_note_tags_tag ON note_tags(tag_id)",
    "CREATE INDEX IF NOT EXISTS idx_flashcards_note ON flashcards(note_id)",
    "CREATE INDEX IF NOT EXISTS idx_history_note ON note_history(note_id, version_number)",
]

COLUMNS: dict[TableKind, tuple[str, ...]] = {
    TableKind.NOTES: (
        "id",
        "user_id",
        "title",
        "content",
        "is_starred",
        "folder_id",
        "created_at",
        "updated_at",
    ),
    TableKind.FOLDERS: ("id", "user_id", "name", "color", "created_at"),
    TableKind.TAGS: ("id", "user_id", "name", "color", "created_at"),
    TableKind.NOTE_TAGS: ("note_id", "tag_id"),
    TableKind.FLASHCARDS: (
        "id",
        "note_id",
        "user_id",
        "question",
        "answer",
        "difficulty",
        "created_at",
    ),
    TableKind.NOTE_HISTORY: (
        "id",
        "note_id",
        "user_id",
        "title",
        "content",
        "tag_ids",
        "folder_id",
        "version_number",
        "created_at",
    ),
}

BOOL_COLUMNS = {"is_starred"}
JSON_COLUMNS = {"tag_ids"}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _now() -> str:
    return _utc_now().isoformat()


class SQLiteBackend(BackendClient):
    """
    SQLite-based backend data service.

    Features:
    - Server-assigned ids and timestamps
    - `updated_at` refreshed on every notes update (trigger semantics)
    - Unique constraint violations surfaced as DuplicateError
    - Change feed events published after each commit
    """

    def __init__(self, db_path: str = "data/notewise.db"):
        """
        Initialize SQLite backend.

        Args:
            db_path: Path to SQLite database file (":memory:" for a private in-memory db)
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None
        self.feed = ChangeFeedHub()
        self._write_lock = asyncio.Lock()

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            self.connection = await aiosqlite.connect(self.db_path)
            self.connection.row_factory = aiosqlite.Row
            await self.connection.execute("PRAGMA foreign_keys = ON")
            if self.db_path != ":memory:":
                await self.connection.execute("PRAGMA journal_mode = WAL")
            await self.connection.commit()

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()
        for statement in SCHEMA:
            await self.connection.execute(statement)
        await self.connection.commit()
        logger.info(f"SQLite backend ready at {self.db_path}")

    # ═══════════════════════════════════════════════════════════
    # ROW OPERATIONS
    # ═══════════════════════════════════════════════════════════

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
        """Select rows from a table."""
        await self.connect()

        query = f"SELECT * FROM {table.value}"
        where, params = self._where(table, filters)

        if search:
            clauses = []
            for column, needle in search.items():
                self._check_column(table, column)
                clauses.append(f"lower({column}) LIKE ? ESCAPE '\\'")
                params.append(f"%{self._escape_like(needle.lower())}%")
            where.append("(" + " OR ".join(clauses) + ")")

        if where:
            query += " WHERE " + " AND ".join(where)

        if order_by:
            self._check_column(table, order_by)
            query += f" ORDER BY {order_by} {'ASC' if ascending else 'DESC'}"

        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        try:
            cursor = await self.connection.execute(query, params)
            rows = await cursor.fetchall()
        except sqlite3.Error as e:
            raise BackendError(
                f"Select on {table.value} failed: {e}", context={"table": table.value}
            ) from e

        return [self._decode(dict(row)) for row in rows]

    async def insert(self, table: TableKind, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert rows, filling in server-side defaults."""
        await self.connect()

        prepared = [self._with_defaults(table, row) for row in rows]
        if not prepared:
            return []

        async with self._write_lock:
            try:
                for row in prepared:
                    columns = list(row.keys())
                    placeholders = ", ".join("?" for _ in columns)
                    await self.connection.execute(
                        f"INSERT INTO {table.value} ({', '.join(columns)}) VALUES ({placeholders})",
                        [self._encode(column, row[column]) for column in columns],
                    )
                await self.connection.commit()
            except sqlite3.IntegrityError as e:
                await self.connection.rollback()
                if "UNIQUE" in str(e) or "PRIMARY KEY" in str(e):
                    raise DuplicateError(
                        f"Duplicate row in {table.value}: {e}", context={"table": table.value}
                    ) from e
                raise BackendError(
                    f"Insert into {table.value} failed: {e}", context={"table": table.value}
                ) from e
            except sqlite3.Error as e:
                await self.connection.rollback()
                raise BackendError(
                    f"Insert into {table.value} failed: {e}", context={"table": table.value}
                ) from e

        inserted = [self._decode(dict(row)) for row in prepared]
        for row in inserted:
            self.feed.publish(ChangeEvent(event_type=ChangeType.INSERT, table=table, new=row))

        logger.debug(f"Inserted {len(inserted)} row(s) into {table.value}")
        return inserted

    async def update(
        self, table: TableKind, values: dict[str, Any], filters: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Update rows matching filters and return them as stored."""
        await self.connect()

        if not filters:
            raise ValidationError(
                "Refusing to update without filters", context={"table": table.value}
            )

        values = dict(values)
        for column in values:
            self._check_column(table, column)

        async with self._write_lock:
            before = await self.select(table, filters)
            if not before:
                return []

            if table == TableKind.NOTES:
                # never moves backwards, even if the clock does
                values["updated_at"] = max(
                    [_utc_now(), *(datetime.fromisoformat(row["updated_at"]) for row in before)]
                ).isoformat()

            where, params = self._where(table, filters)
            assignments = ", ".join(f"{column} = ?" for column in values)
            try:
                await self.connection.execute(
                    f"UPDATE {table.value} SET {assignments} WHERE {' AND '.join(where)}",
                    [self._encode(column, value) for column, value in values.items()] + params,
                )
                await self.connection.commit()
            except sqlite3.IntegrityError as e:
                await self.connection.rollback()
                if "UNIQUE" in str(e):
                    raise DuplicateError(
                        f"Duplicate row in {table.value}: {e}", context={"table": table.value}
                    ) from e
                raise BackendError(
                    f"Update of {table.value} failed: {e}", context={"table": table.value}
                ) from e
            except sqlite3.Error as e:
                await self.connection.rollback()
                raise BackendError(
                    f"Update of {table.value} failed: {e}", context={"table": table.value}
                ) from e

            after = [{**row, **values} for row in before]

        after = [self._decode(self._encode_row(row)) for row in after]
        for old, new in zip(before, after, strict=True):
            self.feed.publish(
                ChangeEvent(event_type=ChangeType.UPDATE, table=table, new=new, old=old)
            )

        return after

    async def delete(self, table: TableKind, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """Delete rows matching filters."""
        await self.connect()

        if not filters:
            raise ValidationError(
                "Refusing to delete without filters", context={"table": table.value}
            )

        async with self._write_lock:
            before = await self.select(table, filters)
            if not before:
                return []

            where, params = self._where(table, filters)
            try:
                await self.connection.execute(
                    f"DELETE FROM {table.value} WHERE {' AND '.join(where)}", params
                )
                await self.connection.commit()
            except sqlite3.Error as e:
                await self.connection.rollback()
                raise BackendError(
                    f"Delete from {table.value} failed: {e}", context={"table": table.value}
                ) from e

        for row in before:
            self.feed.publish(ChangeEvent(event_type=ChangeType.DELETE, table=table, old=row))

        return before

    # ═══════════════════════════════════════════════════════════
    # CHANGE FEED
    # ═══════════════════════════════════════════════════════════

    def subscribe(self, table: TableKind, callback) -> FeedSubscription:
        """Subscribe to committed changes of one table."""
        return self.feed.subscribe(table, callback)

    async def close(self) -> None:
        """Close database connection and drop subscriptions."""
        self.feed.close()
        if self.connection:
            await self.connection.close()
            self.connection = None

    # ═══════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════

    def _check_column(self, table: TableKind, column: str) -> None:
        if column not in COLUMNS[table]:
            raise ValidationError(
                f"Unknown column {column!r} for {table.value}",
                context={"table": table.value, "column": column},
            )

    def _where(self, table: TableKind, filters: dict[str, Any] | None) -> tuple[list[str], list]:
        clauses: list[str] = []
        params: list = []
        for column, value in (filters or {}).items():
            self._check_column(table, column)
            if value is None:
                clauses.append(f"{column} IS NULL")
            elif isinstance(value, (list, tuple, set, frozenset)):
                values = list(value)
                if not values:
                    clauses.append("0")
                    continue
                clauses.append(f"{column} IN ({', '.join('?' for _ in values)})")
                params.extend(self._encode(column, v) for v in values)
            else:
                clauses.append(f"{column} = ?")
                params.append(self._encode(column, value))
        return clauses, params

    def _with_defaults(self, table: TableKind, row: dict[str, Any]) -> dict[str, Any]:
        row = {k: v for k, v in row.items() if v is not None or k in ("folder_id",)}
        for column in row:
            self._check_column(table, column)

        now = _now()
        if table != TableKind.NOTE_TAGS:
            row.setdefault("id", generate_uuid())
            row.setdefault("created_at", now)
        if table == TableKind.NOTES:
            row.setdefault("updated_at", row["created_at"])
            row.setdefault("title", "Untitled")
            row.setdefault("content", "")
            row.setdefault("is_starred", False)
        if table == TableKind.NOTE_HISTORY:
            row.setdefault("tag_ids", [])
        return self._encode_row(row)

    @staticmethod
    def _escape_like(value: str) -> str:
        return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

    @staticmethod
    def _encode(column: str, value: Any) -> Any:
        if column in JSON_COLUMNS and not isinstance(value, str):
            return json.dumps(sorted(value or []))
        if column in BOOL_COLUMNS:
            return int(bool(value))
        if isinstance(value, datetime):
            return value.isoformat()
        if hasattr(value, "value") and not isinstance(value, (str, int, float)):
            return value.value
        return value

    def _encode_row(self, row: dict[str, Any]) -> dict[str, Any]:
        return {column: self._encode(column, value) for column, value in row.items()}

    @staticmethod
    def _decode(row: dict[str, Any]) -> dict[str, Any]:
        for column in BOOL_COLUMNS & row.keys():
            row[column] = bool(row[column])
        for column in JSON_COLUMNS & row.keys():
            if isinstance(row[column], str):
                row[column] = json.loads(row[column])
        return row
