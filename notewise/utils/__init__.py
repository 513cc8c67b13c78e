"""Utility modules for notewise."""

from notewise.utils.exceptions import (
    AIServiceError,
    BackendError,
    ConfigurationError,
    DuplicateError,
    LLMError,
    LocalStateError,
    ModeError,
    NotewiseError,
    NotFoundError,
    StoreError,
    SyncError,
    UnauthenticatedError,
    ValidationError,
)
from notewise.utils.html import plain_text_to_html, preview_text, strip_html
from notewise.utils.id_generator import (
    generate_folder_id,
    generate_note_id,
    generate_uuid,
)
from notewise.utils.logger import get_logger, mode_context, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "mode_context",
    # ID Generators
    "generate_note_id",
    "generate_folder_id",
    "generate_uuid",
    # Markup
    "strip_html",
    "preview_text",
    "plain_text_to_html",
    # Exceptions
    "NotewiseError",
    "StoreError",
    "BackendError",
    "DuplicateError",
    "LocalStateError",
    "SyncError",
    "ValidationError",
    "NotFoundError",
    "ConfigurationError",
    "ModeError",
    "UnauthenticatedError",
    "LLMError",
    "AIServiceError",
]
