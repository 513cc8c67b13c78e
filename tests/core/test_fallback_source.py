"""
Tests for the fallback dataset and the fallback data source.
"""

import pytest

from notewise.core.datasource import DEMO_FOLDERS, DEMO_NOTES, FallbackDataset, FallbackSource
from notewise.core.local_state import (
    FALLBACK_FLAG_KEY,
    FALLBACK_FOLDERS_KEY,
    FALLBACK_NOTES_KEY,
    FALLBACK_USER_KEY,
    InMemoryKeyValueStore,
)
from notewise.models import NoteDraft
from notewise.utils.exceptions import ModeError, NotFoundError, ValidationError


@pytest.fixture
def dataset():
    dataset = FallbackDataset(InMemoryKeyValueStore())
    dataset.initialize(seed=True)
    return dataset


@pytest.fixture
def source(dataset):
    return FallbackSource(dataset)


@pytest.mark.unit
class TestFallbackDataset:
    def test_initialize_seeds_demo_data(self, dataset):
        assert dataset.is_active()
        assert len(dataset.load_notes()) == len(DEMO_NOTES) == 6
        assert [f["name"] for f in dataset.load_folders()] == [
            "Work Projects",
            "Personal",
            "Ideas",
        ]
        assert dataset.user().id == "demo-user"
        assert dataset.user().email == "demo@aitoolsy.com"

    def test_initialize_keeps_existing_collections(self):
        store = InMemoryKeyValueStore({FALLBACK_NOTES_KEY: [], FALLBACK_FOLDERS_KEY: []})
        dataset = FallbackDataset(store)

        dataset.initialize(seed=True)

        assert dataset.load_notes() == []
        assert dataset.load_folders() == []

    def test_initialize_without_seed(self):
        dataset = FallbackDataset(InMemoryKeyValueStore())
        dataset.initialize(seed=False)

        assert dataset.is_active()
        assert dataset.load_notes() == []

    def test_clear_removes_all_fallback_keys(self, dataset):
        dataset.clear()

        for key in (FALLBACK_FLAG_KEY, FALLBACK_NOTES_KEY, FALLBACK_FOLDERS_KEY, FALLBACK_USER_KEY):
            assert not dataset.store.contains(key)
        assert not dataset.is_active()

    def test_string_flag_is_accepted(self):
        dataset = FallbackDataset(InMemoryKeyValueStore({FALLBACK_FLAG_KEY: "true"}))
        assert dataset.is_active()

    def test_seed_copies_are_independent(self, dataset):
        notes = dataset.load_notes()
        notes[0]["title"] = "changed"

        assert DEMO_NOTES[0]["title"] != "changed"
        assert DEMO_FOLDERS[0]["name"] == "Work Projects"


@pytest.mark.unit
@pytest.mark.asyncio
class TestFallbackSource:
    async def test_capabilities(self, source):
        assert not source.supports_tags
        assert not source.supports_history
        assert not source.supports_flashcards
        assert not source.supports_change_feed

    async def test_list_notes_newest_first_without_tags(self, source):
        notes = await source.list_notes()

        assert [n.id for n in notes][:2] == ["note-1", "note-2"]
        assert all(n.tag_ids == [] for n in notes)
        assert notes[0].starred is True

    async def test_starred_filter(self, source):
        starred = await source.list_notes(starred_only=True)
        assert {n.id for n in starred} == {"note-1", "note-3", "note-5"}

    async def test_tags_degrade_to_empty(self, source):
        assert await source.list_tags() == []
        assert await source.list_note_tags() == []

    async def test_insert_note_coerces_title_and_persists(self, source, dataset):
        note = await source.insert_note(NoteDraft(title="   ", content="<p>hi</p>"))

        assert note.title == "Untitled"
        assert note.id.startswith("note-")
        assert dataset.load_notes()[0]["id"] == note.id

    async def test_update_note_keeps_legacy_tags(self, source, dataset):
        note = await source.update_note("note-1", {"title": "Renamed", "starred": False})

        assert note.title == "Renamed"
        assert note.starred is False
        row = next(r for r in dataset.load_notes() if r["id"] == "note-1")
        assert row["tags"] == ["AI", "features", "demo"]
        assert note.updated_at > note.created_at

    async def test_update_ignores_tag_ids(self, source, dataset):
        await source.update_note("note-2", {"tag_ids": ["x"]})

        row = next(r for r in dataset.load_notes() if r["id"] == "note-2")
        assert row["tags"] == ["meeting", "roadmap", "planning"]

    async def test_update_unknown_note(self, source):
        with pytest.raises(NotFoundError):
            await source.update_note("nope", {"title": "x"})

    async def test_update_unknown_field(self, source):
        with pytest.raises(ValidationError):
            await source.update_note("note-1", {"color": "red"})

    async def test_delete_note(self, source, dataset):
        await source.delete_note("note-4")

        assert "note-4" not in {r["id"] for r in dataset.load_notes()}
        with pytest.raises(NotFoundError):
            await source.delete_note("note-4")

    async def test_search(self, source):
        results = await source.search_notes("TOKYO")
        assert [n.id for n in results] == ["note-5"]

    async def test_insert_folder(self, source, dataset):
        folder = await source.insert_folder("Archive", "#6b7280")

        assert folder.name == "Archive"
        assert len(dataset.load_folders()) == 4

    async def test_history_and_flashcards_unsupported(self, source):
        with pytest.raises(ModeError):
            await source.list_history("note-1")
        with pytest.raises(ModeError):
            await source.insert_history("note-1", NoteDraft(title="x"))
        with pytest.raises(ModeError):
            await source.list_flashcards()
        with pytest.raises(ModeError):
            await source.insert_tag("work", "#000000")

    async def test_last_writer_wins_per_collection(self, dataset):
        first = FallbackSource(dataset)
        second = FallbackSource(dataset)

        await first.update_note("note-1", {"title": "from first"})
        await second.update_note("note-1", {"title": "from second"})

        assert (await first.get_note("note-1")).title == "from second"
