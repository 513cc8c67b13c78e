"""
Tests for the remote data source against a real SQLite backend.
"""

from unittest.mock import AsyncMock, patch

import pytest

from notewise.core.datasource import RemoteSource
from notewise.models import Difficulty, GeneratedFlashcard, Identity, NoteDraft, TableKind
from notewise.utils.exceptions import DuplicateError, NotFoundError, ValidationError


@pytest.fixture
def source(backend, identity):
    return RemoteSource(backend, identity)


@pytest.fixture
def other_source(backend):
    return RemoteSource(backend, Identity(id="user-2"))


@pytest.mark.sqlite
@pytest.mark.asyncio
class TestRemoteNotes:
    async def test_capabilities(self, source):
        assert source.supports_tags
        assert source.supports_history
        assert source.supports_flashcards
        assert source.supports_change_feed

    async def test_insert_and_get_note(self, source):
        note = await source.insert_note(NoteDraft(title="  Plan  ", content="<p>x</p>"))

        loaded = await source.get_note(note.id)

        assert loaded.title == "Plan"
        assert loaded.content == "<p>x</p>"
        assert loaded.user_id == "user-1"
        assert loaded.starred is False

    async def test_insert_blank_title_becomes_untitled(self, source):
        note = await source.insert_note()
        assert note.title == "Untitled"

    async def test_notes_are_scoped_to_owner(self, source, other_source):
        note = await source.insert_note(NoteDraft(title="mine"))
        await other_source.insert_note(NoteDraft(title="theirs"))

        assert [n.title for n in await source.list_notes()] == ["mine"]
        assert await other_source.get_note(note.id) is None
        with pytest.raises(NotFoundError):
            await other_source.update_note(note.id, {"title": "hijack"})
        with pytest.raises(NotFoundError):
            await other_source.delete_note(note.id)

    async def test_list_notes_starred_only(self, source):
        await source.insert_note(NoteDraft(title="a"), starred=True)
        await source.insert_note(NoteDraft(title="b"))

        starred = await source.list_notes(starred_only=True)

        assert [n.title for n in starred] == ["a"]

    async def test_update_maps_starred_column(self, source):
        note = await source.insert_note()

        updated = await source.update_note(note.id, {"starred": True})

        assert updated.starred is True
        assert updated.updated_at >= note.updated_at

    async def test_update_rejects_unknown_fields(self, source):
        note = await source.insert_note()
        with pytest.raises(ValidationError):
            await source.update_note(note.id, {"is_archived": True})

    async def test_update_syncs_note_tags(self, source, backend):
        work = await source.insert_tag("work", "#000000")
        home = await source.insert_tag("home", "#ffffff")
        note = await source.insert_note(NoteDraft(tag_ids=frozenset({work.id})))

        updated = await source.update_note(note.id, {"tag_ids": [home.id]})

        assert updated.tag_ids == [home.id]
        pairs = await backend.select(TableKind.NOTE_TAGS, {"note_id": note.id})
        assert [p["tag_id"] for p in pairs] == [home.id]

    async def test_tag_only_update_touches_row(self, source):
        tag = await source.insert_tag("work", "#000000")
        note = await source.insert_note()

        updated = await source.update_note(note.id, {"tag_ids": [tag.id]})

        assert updated.tag_ids == [tag.id]
        assert updated.updated_at >= note.updated_at

    async def test_delete_note(self, source):
        note = await source.insert_note()

        await source.delete_note(note.id)

        assert await source.get_note(note.id) is None
        with pytest.raises(NotFoundError):
            await source.delete_note(note.id)

    async def test_search_matches_title_or_content(self, source):
        await source.insert_note(NoteDraft(title="Trip", content="<p>Tokyo</p>"))
        await source.insert_note(NoteDraft(title="Tokyo plans"))
        await source.insert_note(NoteDraft(title="Other"))

        results = await source.search_notes("tokyo")

        assert {n.title for n in results} == {"Trip", "Tokyo plans"}


@pytest.mark.sqlite
@pytest.mark.asyncio
class TestRemoteOrganisation:
    async def test_folders(self, source, other_source):
        await source.insert_folder("Work", "#6366f1")
        await other_source.insert_folder("Hidden", "#6366f1")

        assert [f.name for f in await source.list_folders()] == ["Work"]

    async def test_duplicate_tag_name(self, source):
        await source.insert_tag("work", "#000000")
        with pytest.raises(DuplicateError):
            await source.insert_tag("work", "#111111")

    async def test_list_note_tags_only_for_own_notes(self, source, other_source):
        tag = await source.insert_tag("work", "#000000")
        note = await source.insert_note(NoteDraft(tag_ids=frozenset({tag.id})))
        other_tag = await other_source.insert_tag("x", "#000000")
        await other_source.insert_note(NoteDraft(tag_ids=frozenset({other_tag.id})))

        pairs = await source.list_note_tags()

        assert [(p.note_id, p.tag_id) for p in pairs] == [(note.id, tag.id)]

    async def test_list_note_tags_without_notes(self, source):
        assert await source.list_note_tags() == []


@pytest.mark.sqlite
@pytest.mark.asyncio
class TestRemoteHistory:
    async def test_versions_increase_from_one(self, source):
        note = await source.insert_note()

        first = await source.insert_history(note.id, NoteDraft(title="v1"))
        second = await source.insert_history(note.id, NoteDraft(title="v2", content="c"))

        assert (first.version_number, second.version_number) == (1, 2)
        versions = await source.list_history(note.id)
        assert [v.version_number for v in versions] == [2, 1]
        assert versions[0].content == "c"

    async def test_history_keeps_tags_and_folder(self, source):
        note = await source.insert_note()

        version = await source.insert_history(
            note.id, NoteDraft(title="", tag_ids=frozenset({"b", "a"}), folder_id="f1")
        )

        assert version.title == "Untitled"
        assert version.tag_ids == ["a", "b"]
        assert version.snapshot().folder_id == "f1"

    async def test_insert_history_retries_taken_version(self, source, backend):
        note = await source.insert_note()
        real_insert = backend.insert
        calls = {"n": 0}

        async def flaky_insert(table, rows):
            if table == TableKind.NOTE_HISTORY and calls["n"] == 0:
                calls["n"] += 1
                # A concurrent writer takes version 1 first
                await real_insert(table, rows)
                return await real_insert(table, rows)
            return await real_insert(table, rows)

        with patch.object(backend, "insert", AsyncMock(side_effect=flaky_insert)):
            version = await source.insert_history(note.id, NoteDraft(title="mine"))

        assert version.version_number == 2

    async def test_insert_history_gives_up(self, source, backend):
        note = await source.insert_note()
        source.history_retries = 2

        with patch.object(
            backend, "insert", AsyncMock(side_effect=DuplicateError("taken"))
        ) as mock_insert:
            with pytest.raises(DuplicateError):
                await source.insert_history(note.id, NoteDraft(title="x"))

        assert mock_insert.call_count == 2


@pytest.mark.sqlite
@pytest.mark.asyncio
class TestRemoteFlashcards:
    async def test_insert_list_delete(self, source):
        note = await source.insert_note()
        cards = [
            GeneratedFlashcard(question="Q1?", answer="A1"),
            GeneratedFlashcard(question="Q2?", answer="A2"),
        ]

        saved = await source.insert_flashcards(note.id, cards, Difficulty.HARD)

        assert [c.difficulty for c in saved] == [Difficulty.HARD, Difficulty.HARD]
        assert len(await source.list_flashcards(note.id)) == 2

        await source.delete_flashcard(saved[0].id)
        assert [c.question for c in await source.list_flashcards()] == ["Q2?"]
        with pytest.raises(NotFoundError):
            await source.delete_flashcard(saved[0].id)

    async def test_delete_all_for_note(self, source):
        a = await source.insert_note()
        b = await source.insert_note()
        card = [GeneratedFlashcard(question="Q?", answer="A")]
        await source.insert_flashcards(a.id, card, Difficulty.EASY)
        await source.insert_flashcards(b.id, card, Difficulty.EASY)

        assert await source.delete_flashcards(a.id) == 1
        assert [c.note_id for c in await source.list_flashcards()] == [b.id]

    async def test_empty_batch(self, source):
        note = await source.insert_note()
        assert await source.insert_flashcards(note.id, [], Difficulty.MEDIUM) == []

    async def test_cards_removed_with_note(self, source):
        note = await source.insert_note()
        await source.insert_flashcards(
            note.id, [GeneratedFlashcard(question="Q?", answer="A")], Difficulty.EASY
        )

        await source.delete_note(note.id)

        assert await source.list_flashcards() == []
