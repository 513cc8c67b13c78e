"""
User preferences persisted in local state.

Stored as a camelCase JSON blob; exposed with snake_case attributes.
"""

from pydantic import BaseModel, Field


class UserPreferences(BaseModel):
    """Editor preferences shared by every open draft controller."""

    model_config = {"populate_by_name": True, "frozen": True}

    autosave_enabled: bool = Field(default=True, alias="autosaveEnabled")
    autosave_interval_ms: int = Field(default=1000, ge=1, alias="autosaveIntervalMs")
    confirm_delete: bool = Field(default=True, alias="confirmDelete")
    show_preview: bool = Field(default=True, alias="showPreview")

    def clamped(self, min_interval_ms: int, max_interval_ms: int) -> "UserPreferences":
        """Copy with the autosave interval forced into [min, max]."""
        interval = max(min_interval_ms, min(max_interval_ms, self.autosave_interval_ms))
        if interval == self.autosave_interval_ms:
            return self
        return self.model_copy(update={"autosave_interval_ms": interval})

    def to_blob(self) -> dict:
        """camelCase dict as persisted."""
        return self.model_dump(by_alias=True)

    @property
    def autosave_interval(self) -> float:
        """Interval in seconds."""
        return self.autosave_interval_ms / 1000.0
