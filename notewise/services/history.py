"""
Note history listing.
"""

from pydantic import BaseModel

from notewise.models import HistoryVersion
from notewise.services.mode_selector import ModeSelector
from notewise.services.notifications import NotificationCenter
from notewise.utils.exceptions import NotewiseError
from notewise.utils.html import preview_text


class HistoryEntry(BaseModel):
    """A version plus the plain-text preview shown in the history list."""

    version: HistoryVersion
    preview: str


class HistoryService:
    def __init__(self, selector: ModeSelector, notifications: NotificationCenter | None = None):
        self.selector = selector
        self.notifications = notifications or NotificationCenter()

    async def list_versions(self, note_id: str) -> list[HistoryEntry]:
        """Versions of a note, newest first. Empty where history is unsupported."""
        source = self.selector.source()
        if not source.supports_history:
            return []

        try:
            versions = await source.list_history(note_id)
        except NotewiseError as e:
            self.notifications.error("Failed to load note history", error=e)
            return []

        return [
            HistoryEntry(version=version, preview=preview_text(version.content))
            for version in sorted(versions, key=lambda v: v.version_number, reverse=True)
        ]
