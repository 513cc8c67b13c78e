"""
Tests for the view controllers.
"""

import pytest

from notewise.core.datasource import RemoteSource
from notewise.models import Identity, NoteDraft
from notewise.services.mode_selector import ModeSelector
from notewise.services.reconciler import ChangeFeedReconciler
from notewise.services.views import (
    AUTH_PATH,
    DASHBOARD_PATH,
    EditorView,
    NotesView,
    Redirect,
    ViewKind,
    editor_path,
)


@pytest.mark.sqlite
@pytest.mark.asyncio
class TestNotesView:
    async def test_redirects_without_data_access(self, kv_store):
        selector = ModeSelector(kv_store)
        view = NotesView(selector, ChangeFeedReconciler(selector))

        assert await view.mount() == Redirect(path=AUTH_PATH)
        assert not view.mounted

    async def test_mount_loads_and_goes_live(self, signed_in):
        await signed_in.source().insert_note(NoteDraft(title="hello"))
        view = NotesView(signed_in, ChangeFeedReconciler(signed_in))

        assert await view.mount() is None

        assert view.live
        assert [n.title for n in view.visible_notes()] == ["hello"]
        view.unmount()
        assert not view.live

    async def test_fallback_view_is_not_live(self, fallback_selector):
        view = NotesView(fallback_selector, ChangeFeedReconciler(fallback_selector))

        await view.mount()

        assert not view.live
        assert len(view.visible_notes()) == 6
        assert len(view.notes_in_folder("folder-2")) == 2
        assert [f.name for f in view.folders] == ["Ideas", "Personal", "Work Projects"]
        assert view.tags == []
        view.unmount()

    async def test_starred_view_and_local_filter(self, fallback_selector):
        reconciler = ChangeFeedReconciler(fallback_selector)
        view = NotesView(fallback_selector, reconciler, ViewKind.STARRED)
        await view.mount()

        assert {n.id for n in view.visible_notes()} == {"note-1", "note-3", "note-5"}
        assert [n.id for n in view.visible_notes("tokyo")] == ["note-5"]
        view.unmount()

    async def test_search_view(self, fallback_selector):
        reconciler = ChangeFeedReconciler(fallback_selector)
        view = NotesView(fallback_selector, reconciler, ViewKind.SEARCH)
        await view.mount()

        results = await view.run_search("react")

        assert [n.id for n in results] == ["note-4"]
        assert view.visible_notes() == results
        assert await view.run_search("  ") == []
        view.unmount()

    async def test_sign_out_redirects(self, signed_in):
        view = NotesView(signed_in, ChangeFeedReconciler(signed_in))
        await view.mount()

        signed_in.sign_out()

        assert view.redirect == Redirect(path=AUTH_PATH)
        assert view.store.notes == []
        assert not view.live
        view.unmount()

    async def test_identity_change_reloads(self, signed_in, backend):
        other = Identity(id="user-2")
        await RemoteSource(backend, other).insert_note(NoteDraft(title="other account"))
        view = NotesView(signed_in, ChangeFeedReconciler(signed_in))
        await view.mount()
        assert view.store.notes == []

        signed_in.sign_in(other)
        await view.store.wait_reloads()

        assert [n.title for n in view.store.notes] == ["other account"]
        assert view.live
        view.unmount()

    async def test_unmount_stops_mode_listening(self, signed_in):
        view = NotesView(signed_in, ChangeFeedReconciler(signed_in))
        await view.mount()
        view.unmount()
        view.unmount()

        signed_in.sign_out()

        assert view.redirect is None


@pytest.mark.sqlite
@pytest.mark.asyncio
class TestEditorView:
    async def test_redirects_without_data_access(self, kv_store):
        view = EditorView(ModeSelector(kv_store))

        assert await view.mount("n1") == Redirect(path=AUTH_PATH)

    async def test_missing_note_redirects_to_dashboard(self, signed_in, notifications):
        view = EditorView(signed_in, notifications)

        assert await view.mount("missing") == Redirect(path=DASHBOARD_PATH)
        assert notifications.errors()[-1].title == "Error loading note"
        assert view.controller.closed

    async def test_new_document_path_follows_assigned_id(self, signed_in):
        view = EditorView(signed_in)
        assert await view.mount() is None
        assert view.path == "/editor"

        view.controller.set_title("Fresh")
        await view.controller.save()

        assert view.path == editor_path(view.controller.note_id)
        view.unmount()

    async def test_open_existing(self, signed_in):
        note = await signed_in.source().insert_note(NoteDraft(title="Existing"))
        view = EditorView(signed_in)

        assert await view.mount(note.id) is None

        assert view.path == f"/editor/{note.id}"
        assert view.controller.draft.title == "Existing"
        view.unmount()
