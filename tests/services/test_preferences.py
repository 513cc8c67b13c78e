"""
Tests for preferences and the notification channel.
"""

import pytest

from notewise.config import AutosaveConfig
from notewise.core.local_state import PREFERENCES_KEY
from notewise.models import UserPreferences
from notewise.services.notifications import NotificationCenter, NotificationLevel
from notewise.services.preferences import PreferencesService
from notewise.utils.exceptions import BackendError


@pytest.mark.unit
class TestPreferencesService:
    def test_defaults_from_config(self, kv_store):
        service = PreferencesService(kv_store, AutosaveConfig(enabled=False, interval_ms=2000))

        prefs = service.load()

        assert prefs.autosave_enabled is False
        assert prefs.autosave_interval_ms == 2000
        assert prefs.confirm_delete is True

    def test_stored_blob_is_camel_case(self, kv_store):
        service = PreferencesService(kv_store)

        service.update(autosave_interval_ms=3000)

        assert kv_store.get(PREFERENCES_KEY)["autosaveIntervalMs"] == 3000
        assert service.load().autosave_interval == 3.0

    def test_partial_blob_merges_over_defaults(self, kv_store):
        kv_store.set(PREFERENCES_KEY, {"showPreview": False})

        prefs = PreferencesService(kv_store).load()

        assert prefs.show_preview is False
        assert prefs.autosave_enabled is True

    def test_interval_is_clamped(self, kv_store):
        service = PreferencesService(
            kv_store, AutosaveConfig(min_interval_ms=500, max_interval_ms=5000)
        )

        assert service.save(UserPreferences(autosave_interval_ms=10)).autosave_interval_ms == 500
        kv_store.set(PREFERENCES_KEY, {"autosaveIntervalMs": 60000})
        assert service.load().autosave_interval_ms == 5000

    def test_invalid_blob_falls_back_to_defaults(self, kv_store):
        kv_store.set(PREFERENCES_KEY, {"autosaveIntervalMs": "soon"})
        assert PreferencesService(kv_store).load() == PreferencesService(kv_store).defaults()

        kv_store.set(PREFERENCES_KEY, "garbage")
        assert PreferencesService(kv_store).load().autosave_enabled is True

    def test_broadcast(self, kv_store):
        service = PreferencesService(kv_store)
        received = []
        unsubscribe = service.subscribe(received.append)

        service.update(autosave_enabled=False)
        unsubscribe()
        service.update(autosave_enabled=True)

        assert [p.autosave_enabled for p in received] == [False]


@pytest.mark.unit
class TestNotificationCenter:
    def test_error_uses_exception_message(self):
        center = NotificationCenter()

        notification = center.error("Failed to save note", error=BackendError("offline"))

        assert notification.level == NotificationLevel.ERROR
        assert notification.message == "offline"
        assert center.errors() == [notification]

    def test_keeps_most_recent(self):
        center = NotificationCenter(keep=2)
        for i in range(3):
            center.info(f"n{i}")

        assert [n.title for n in center.recent] == ["n1", "n2"]

    def test_listeners(self):
        center = NotificationCenter()
        received = []

        def broken(notification):
            raise RuntimeError("boom")

        center.subscribe(broken)
        unsubscribe = center.subscribe(received.append)
        center.success("Saved")
        unsubscribe()
        center.success("Again")

        assert [n.title for n in received] == ["Saved"]

    def test_error_excluded_from_dump(self):
        notification = NotificationCenter().error("x", error=ValueError("y"))
        assert "error" not in notification.model_dump()
