"""
Mode selector.

Decides where reads and writes go: the remote backend for a signed-in
identity, the persisted fallback dataset in fallback mode, nowhere when
neither holds. Mode changes are pushed to listeners as events.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from notewise.config import FallbackConfig
from notewise.core.backend.base import BackendClient
from notewise.core.datasource.base import DataSource
from notewise.core.datasource.fallback import FallbackDataset, FallbackSource
from notewise.core.datasource.remote import RemoteSource
from notewise.core.local_state.base import FALLBACK_RESET_KEY, KeyValueStore
from notewise.models import Identity, SessionState
from notewise.models.note import utc_now
from notewise.utils.exceptions import ConfigurationError, UnauthenticatedError
from notewise.utils.logger import get_logger, mode_context

logger = get_logger(__name__)

ModeListener = Callable[[SessionState], None]


class ModeSelector:
    """
    Routes data access by session mode.

    A signed-in identity takes precedence over a persisted fallback flag.
    No network I/O happens here.
    """

    def __init__(
        self,
        store: KeyValueStore,
        backend: BackendClient | None = None,
        config: FallbackConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the mode selector.

        Args:
            store: Persisted local state holding the fallback dataset and flags
            backend: Backend client used for the authenticated source
            config: Fallback settings (TTL, demo seeding)
            clock: Current time provider
        """
        self.store = store
        self.backend = backend
        self.config = config or FallbackConfig()
        self.clock = clock
        self.dataset = FallbackDataset(store)

        self._identity: Identity | None = None
        self._listeners: list[ModeListener] = []
        self._remote: RemoteSource | None = None
        self._last_state = self.current_mode()

    def current_mode(self) -> SessionState:
        if self._identity is not None:
            return SessionState.authenticated(self._identity)
        if self.dataset.is_active():
            return SessionState.fallback(self.dataset.user())
        return SessionState.unauthenticated()

    def maybe_auto_reset_fallback(self) -> bool:
        """
        Clear the fallback dataset when a reset marker is present.

        Markers: an explicit reset flag, or a fallback session older than
        the configured TTL. Called once at startup; calling it again after
        a reset finds no marker and does nothing.

        Returns:
            True if the dataset was cleared
        """
        reason = None
        if self.store.get(FALLBACK_RESET_KEY):
            reason = "reset requested"
        elif self.dataset.is_active() and self.config.ttl_hours > 0:
            started_at = self.dataset.started_at()
            if started_at is not None:
                if self.clock() - started_at >= timedelta(hours=self.config.ttl_hours):
                    reason = "session expired"

        if reason is None:
            return False

        self.dataset.clear()
        logger.info(f"Fallback dataset auto-reset ({reason})", extra={"reason": reason})
        self._emit()
        return True

    def request_fallback_reset(self) -> None:
        """Mark the fallback dataset for clearing at next startup."""
        self.store.set(FALLBACK_RESET_KEY, True)

    # ═══════════════════════════════════════════════════════════
    # TRANSITIONS
    # ═══════════════════════════════════════════════════════════

    def sign_in(self, identity: Identity) -> SessionState:
        """Adopt a signed-in identity. The fallback dataset is left for import."""
        if self._identity != identity:
            self._identity = identity
            self._remote = None
        return self._emit()

    def sign_out(self) -> SessionState:
        self._identity = None
        self._remote = None
        return self._emit()

    def enter_fallback(self, seed: bool | None = None) -> SessionState:
        """Start fallback mode, seeding the demo dataset unless disabled."""
        self.dataset.initialize(self.config.seed_demo_data if seed is None else seed)
        return self._emit()

    def exit_fallback(self) -> SessionState:
        """Leave fallback mode and delete the local dataset."""
        self.dataset.clear()
        return self._emit()

    # ═══════════════════════════════════════════════════════════
    # ROUTING
    # ═══════════════════════════════════════════════════════════

    def source(self) -> DataSource:
        """
        Data source for the current mode.

        Raises:
            UnauthenticatedError: When neither signed in nor in fallback mode
            ConfigurationError: When signed in without a backend client
        """
        state = self.current_mode()

        if state.is_authenticated:
            if self.backend is None:
                raise ConfigurationError("No backend configured for authenticated mode")
            if self._remote is None:
                self._remote = RemoteSource(self.backend, state.identity)
            return self._remote

        if state.is_fallback:
            return FallbackSource(self.dataset)

        raise UnauthenticatedError("Sign in or start demo mode to access notes")

    def subscribe(self, listener: ModeListener) -> Callable[[], None]:
        """Register a mode-change listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> SessionState:
        state = self.current_mode()
        if state == self._last_state:
            return state

        logger.debug(
            f"Mode changed: {self._last_state.mode.value} -> {state.mode.value}",
            extra={"mode": state.mode.value},
        )
        self._last_state = state
        with mode_context(state.mode.value):
            for listener in list(self._listeners):
                try:
                    listener(state)
                except Exception as e:
                    logger.error(
                        "Mode listener failed", extra={"error": str(e), "mode": state.mode.value}
                    )
        return state
