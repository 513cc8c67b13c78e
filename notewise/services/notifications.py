"""
Notification channel.

Services report user-facing outcomes here (toasts, in UI terms) instead of
raising across view boundaries.
"""

from collections.abc import Callable
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from notewise.models.note import utc_now
from notewise.utils.logger import get_logger

logger = get_logger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


class Notification(BaseModel):
    """One message for the user."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    level: NotificationLevel
    title: str
    message: str = ""
    error: Exception | None = Field(default=None, exclude=True)
    created_at: datetime = Field(default_factory=utc_now)


class NotificationCenter:
    """Fan-out of notifications to listeners; keeps the most recent ones."""

    def __init__(self, keep: int = 50):
        self.keep = keep
        self.recent: list[Notification] = []
        self._listeners: list[Callable[[Notification], None]] = []

    def subscribe(self, listener: Callable[[Notification], None]) -> Callable[[], None]:
        """Register a listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, notification: Notification) -> Notification:
        self.recent.append(notification)
        del self.recent[: -self.keep]
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception as e:
                logger.error(f"Notification listener failed: {e}")
        return notification

    def success(self, title: str, message: str = "") -> Notification:
        return self.publish(
            Notification(level=NotificationLevel.SUCCESS, title=title, message=message)
        )

    def info(self, title: str, message: str = "") -> Notification:
        return self.publish(
            Notification(level=NotificationLevel.INFO, title=title, message=message)
        )

    def error(self, title: str, message: str = "", error: Exception | None = None) -> Notification:
        if not message and error is not None:
            message = getattr(error, "message", None) or str(error)
        return self.publish(
            Notification(level=NotificationLevel.ERROR, title=title, message=message, error=error)
        )

    def errors(self) -> list[Notification]:
        return [n for n in self.recent if n.level == NotificationLevel.ERROR]
