"""
Tests for the SQLite backend data service and its change feed.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from notewise.models import ChangeType, TableKind
from notewise.utils.exceptions import BackendError, DuplicateError, ValidationError


async def insert_note(backend, **values):
    row = {"user_id": "user-1", **values}
    return (await backend.insert(TableKind.NOTES, [row]))[0]


@pytest.mark.sqlite
@pytest.mark.asyncio
class TestSQLiteRows:
    """Row operations."""

    async def test_initialize_creates_empty_tables(self, backend):
        for table in TableKind:
            assert await backend.select(table) == []

    async def test_insert_fills_server_defaults(self, backend):
        row = await insert_note(backend)

        assert row["id"]
        assert row["title"] == "Untitled"
        assert row["content"] == ""
        assert row["is_starred"] is False
        assert row["created_at"] == row["updated_at"]

    async def test_select_decodes_booleans(self, backend):
        await insert_note(backend, title="Starred", is_starred=True)

        rows = await backend.select(TableKind.NOTES, {"is_starred": True})

        assert len(rows) == 1
        assert rows[0]["is_starred"] is True

    async def test_update_refreshes_updated_at(self, backend):
        row = await insert_note(backend, title="Before")
        await asyncio.sleep(0.01)

        updated = await backend.update(TableKind.NOTES, {"title": "After"}, {"id": row["id"]})

        assert updated[0]["title"] == "After"
        assert datetime.fromisoformat(updated[0]["updated_at"]) > datetime.fromisoformat(
            row["updated_at"]
        )
        stored = await backend.select(TableKind.NOTES, {"id": row["id"]})
        assert stored[0]["updated_at"] == updated[0]["updated_at"]

    async def test_update_never_moves_updated_at_backwards(self, backend):
        row = await insert_note(backend, title="Before")
        earlier = datetime.now(timezone.utc) - timedelta(hours=1)

        with patch("notewise.core.backend.sqlite_backend._utc_now", return_value=earlier):
            updated = await backend.update(
                TableKind.NOTES, {"title": "After"}, {"id": row["id"]}
            )

        assert updated[0]["title"] == "After"
        assert updated[0]["updated_at"] == row["updated_at"]

    async def test_update_without_match_returns_empty(self, backend):
        assert await backend.update(TableKind.NOTES, {"title": "x"}, {"id": "missing"}) == []

    async def test_update_requires_filters(self, backend):
        with pytest.raises(ValidationError):
            await backend.update(TableKind.NOTES, {"title": "x"}, {})

    async def test_delete_returns_rows_and_cascades(self, backend):
        note = await insert_note(backend)
        tag = (await backend.insert(TableKind.TAGS, [{"user_id": "user-1", "name": "work"}]))[0]
        await backend.insert(TableKind.NOTE_TAGS, [{"note_id": note["id"], "tag_id": tag["id"]}])

        deleted = await backend.delete(TableKind.NOTES, {"id": note["id"]})

        assert [r["id"] for r in deleted] == [note["id"]]
        assert await backend.select(TableKind.NOTE_TAGS) == []
        assert len(await backend.select(TableKind.TAGS)) == 1

    async def test_duplicate_tag_name_raises_duplicate_error(self, backend):
        await backend.insert(TableKind.TAGS, [{"user_id": "user-1", "name": "work"}])

        with pytest.raises(DuplicateError):
            await backend.insert(TableKind.TAGS, [{"user_id": "user-1", "name": "work"}])

    async def test_same_tag_name_for_different_owners(self, backend):
        await backend.insert(TableKind.TAGS, [{"user_id": "user-1", "name": "work"}])
        await backend.insert(TableKind.TAGS, [{"user_id": "user-2", "name": "work"}])

        assert len(await backend.select(TableKind.TAGS)) == 2

    async def test_check_constraint_is_backend_error(self, backend):
        note = await insert_note(backend)

        with pytest.raises(BackendError) as exc_info:
            await backend.insert(
                TableKind.FLASHCARDS,
                [{"note_id": note["id"], "question": "q", "answer": "a", "difficulty": "extreme"}],
            )
        assert not isinstance(exc_info.value, DuplicateError)

    async def test_unknown_column_rejected(self, backend):
        with pytest.raises(ValidationError):
            await backend.select(TableKind.NOTES, {"nope": 1})
        with pytest.raises(ValidationError):
            await backend.insert(TableKind.NOTES, [{"nope": 1}])

    async def test_search_is_case_insensitive_over_title_or_content(self, backend):
        await insert_note(backend, title="Groceries", content="milk")
        await asyncio.sleep(0.01)
        await insert_note(backend, title="Ideas", content="<p>Buy MILK later</p>")
        await insert_note(backend, title="Other", content="nothing")

        rows = await backend.select(
            TableKind.NOTES,
            search={"title": "milk", "content": "milk"},
            order_by="updated_at",
            ascending=False,
        )

        assert [r["title"] for r in rows] == ["Ideas", "Groceries"]

    async def test_search_escapes_like_wildcards(self, backend):
        await insert_note(backend, title="100% done")
        await insert_note(backend, title="100 items")

        rows = await backend.select(TableKind.NOTES, search={"title": "100%"})

        assert [r["title"] for r in rows] == ["100% done"]

    async def test_list_filter_means_in(self, backend):
        a = await insert_note(backend, title="a")
        b = await insert_note(backend, title="b")
        await insert_note(backend, title="c")

        rows = await backend.select(TableKind.NOTES, {"id": [a["id"], b["id"]]})

        assert {r["title"] for r in rows} == {"a", "b"}

    async def test_history_tag_ids_round_trip_as_list(self, backend):
        note = await insert_note(backend)

        row = (
            await backend.insert(
                TableKind.NOTE_HISTORY,
                [
                    {
                        "note_id": note["id"],
                        "title": "v1",
                        "tag_ids": ["b", "a"],
                        "version_number": 1,
                    }
                ],
            )
        )[0]

        assert row["tag_ids"] == ["a", "b"]
        stored = await backend.select(TableKind.NOTE_HISTORY)
        assert stored[0]["tag_ids"] == ["a", "b"]

    async def test_history_version_unique_per_note(self, backend):
        note = await insert_note(backend)
        row = {"note_id": note["id"], "title": "v1", "version_number": 1}
        await backend.insert(TableKind.NOTE_HISTORY, [row])

        with pytest.raises(DuplicateError):
            await backend.insert(TableKind.NOTE_HISTORY, [row])


@pytest.mark.sqlite
@pytest.mark.asyncio
class TestSQLiteChangeFeed:
    """Change feed published by committed writes."""

    async def test_events_for_insert_update_delete(self, backend):
        events = []
        backend.subscribe(TableKind.NOTES, events.append)

        row = await insert_note(backend, title="one")
        await backend.update(TableKind.NOTES, {"title": "two"}, {"id": row["id"]})
        await backend.delete(TableKind.NOTES, {"id": row["id"]})
        await asyncio.sleep(0)

        assert [e.event_type for e in events] == [
            ChangeType.INSERT,
            ChangeType.UPDATE,
            ChangeType.DELETE,
        ]
        assert events[0].new["title"] == "one"
        assert events[1].old["title"] == "one"
        assert events[1].new["title"] == "two"
        assert events[2].old["id"] == row["id"]
        assert all(e.record_id == row["id"] for e in events)

    async def test_delivery_happens_after_writer_resumes(self, backend):
        events = []
        backend.subscribe(TableKind.NOTES, events.append)

        await insert_note(backend)
        assert events == []

        await asyncio.sleep(0)
        assert len(events) == 1

    async def test_events_only_reach_their_table(self, backend):
        folder_events = []
        backend.subscribe(TableKind.FOLDERS, folder_events.append)

        await insert_note(backend)
        await asyncio.sleep(0)

        assert folder_events == []

    async def test_closed_subscription_stops_delivery(self, backend):
        events = []
        subscription = backend.subscribe(TableKind.NOTES, events.append)

        subscription.close()
        subscription.close()
        await insert_note(backend)
        await asyncio.sleep(0)

        assert events == []
        assert not subscription.live
        assert backend.feed.subscriber_count(TableKind.NOTES) == 0

    async def test_failed_subscription_reports_error(self, backend):
        subscription = backend.subscribe(TableKind.NOTES, lambda event: None)

        backend.feed.disconnect_all(ConnectionError("socket closed"))

        assert not subscription.live
        assert isinstance(subscription.error, ConnectionError)

    async def test_broken_callback_does_not_block_others(self, backend):
        received = []

        def broken(event):
            raise RuntimeError("boom")

        backend.subscribe(TableKind.NOTES, broken)
        backend.subscribe(TableKind.NOTES, received.append)

        await insert_note(backend)
        await asyncio.sleep(0)

        assert len(received) == 1
