"""
User preferences service.

Preferences live in persisted local state as one camelCase blob. Every
save is broadcast so open editors pick up autosave changes immediately.
"""

from collections.abc import Callable

from pydantic import ValidationError as PydanticValidationError

from notewise.config import AutosaveConfig
from notewise.core.local_state.base import PREFERENCES_KEY, KeyValueStore
from notewise.models import UserPreferences
from notewise.utils.logger import get_logger

logger = get_logger(__name__)

PreferencesListener = Callable[[UserPreferences], None]


class PreferencesService:
    """Load, save and broadcast user preferences."""

    def __init__(self, store: KeyValueStore, autosave: AutosaveConfig | None = None):
        self.store = store
        self.autosave = autosave or AutosaveConfig()
        self._listeners: list[PreferencesListener] = []

    def defaults(self) -> UserPreferences:
        return UserPreferences(
            autosave_enabled=self.autosave.enabled,
            autosave_interval_ms=self.autosave.interval_ms,
        )

    def load(self) -> UserPreferences:
        """
        Current preferences: stored values over defaults, interval clamped.
        An unreadable blob falls back to the defaults.
        """
        blob = self.store.get(PREFERENCES_KEY)
        if not isinstance(blob, dict):
            return self.defaults()
        try:
            prefs = UserPreferences.model_validate({**self.defaults().to_blob(), **blob})
        except PydanticValidationError as e:
            logger.warning(f"Ignoring invalid stored preferences: {e}")
            return self.defaults()
        return self._clamp(prefs)

    def save(self, prefs: UserPreferences) -> UserPreferences:
        """Persist and broadcast. Returns the (clamped) preferences stored."""
        prefs = self._clamp(prefs)
        self.store.set(PREFERENCES_KEY, prefs.to_blob())
        logger.debug(
            "Preferences saved",
            extra={
                "autosave_enabled": prefs.autosave_enabled,
                "autosave_interval_ms": prefs.autosave_interval_ms,
            },
        )
        for listener in list(self._listeners):
            try:
                listener(prefs)
            except Exception as e:
                logger.error(f"Preferences listener failed: {e}")
        return prefs

    def update(self, **changes) -> UserPreferences:
        """Save the current preferences with some fields changed (snake_case names)."""
        current = self.load()
        return self.save(UserPreferences.model_validate({**current.model_dump(), **changes}))

    def subscribe(self, listener: PreferencesListener) -> Callable[[], None]:
        """Register for broadcasts. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _clamp(self, prefs: UserPreferences) -> UserPreferences:
        return prefs.clamped(self.autosave.min_interval_ms, self.autosave.max_interval_ms)
