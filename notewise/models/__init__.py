"""
Data models for notewise.

Domain models:
- Note, NoteDraft: notes and their editable fields
- Folder, Tag, NoteTag: organisation
- HistoryVersion: immutable saved states of a note
- Flashcard, GeneratedFlashcard, Difficulty: study cards

Session, feed and transport models:
- Mode, Identity, SessionState: data routing mode
- TableKind, ChangeType, ChangeEvent: backend change feed
- UserPreferences: persisted editor preferences
- Snapshot: in-memory collections held by a view
- AIAction, AssistRequest/Response, FlashcardRequest/Response: AI functions
"""

from notewise.models.ai import (
    AIAction,
    AssistRequest,
    AssistResponse,
    ErrorResponse,
    FlashcardRequest,
    FlashcardResponse,
)
from notewise.models.events import ChangeEvent, ChangeType, TableKind
from notewise.models.flashcard import Difficulty, Flashcard, GeneratedFlashcard
from notewise.models.folder import DEFAULT_FOLDER_COLOR, FOLDER_COLORS, Folder
from notewise.models.history import HistoryVersion
from notewise.models.note import UNTITLED, Note, NoteDraft, normalize_title, utc_now
from notewise.models.preferences import UserPreferences
from notewise.models.session import Identity, Mode, SessionState
from notewise.models.snapshot import Snapshot
from notewise.models.tag import DEFAULT_TAG_COLOR, NoteTag, Tag, normalize_legacy_tags

__all__ = [
    # Domain models
    "Note",
    "NoteDraft",
    "UNTITLED",
    "normalize_title",
    "utc_now",
    "Folder",
    "FOLDER_COLORS",
    "DEFAULT_FOLDER_COLOR",
    "Tag",
    "NoteTag",
    "DEFAULT_TAG_COLOR",
    "normalize_legacy_tags",
    "HistoryVersion",
    "Flashcard",
    "GeneratedFlashcard",
    "Difficulty",
    # Session / feed models
    "Mode",
    "Identity",
    "SessionState",
    "TableKind",
    "ChangeType",
    "ChangeEvent",
    "UserPreferences",
    "Snapshot",
    # AI payloads
    "AIAction",
    "AssistRequest",
    "AssistResponse",
    "FlashcardRequest",
    "FlashcardResponse",
    "ErrorResponse",
]
