"""
Services layer for notewise.

Data layer:
- ModeSelector: routes reads/writes by session mode
- SnapshotStore: in-memory notes/folders/tags of a view
- ChangeFeedReconciler: applies change feed events to snapshot stores
- DraftController: single-document draft with debounced autosave

Application services:
- NoteService, HistoryService, PreferencesService, NotificationCenter
- NotesView, EditorView
- AIAssistService, FlashcardGenerator (server side of the AI functions)
- EditorAssistant, FlashcardService, StudyDeck (client side)
"""

from notewise.services.ai_assist import AIAssistService, FlashcardGenerator, parse_flashcards
from notewise.services.draft_controller import DraftController, DraftState
from notewise.services.editor_assistant import EditorAssistant
from notewise.services.flashcards import FlashcardService, StudyDeck
from notewise.services.history import HistoryEntry, HistoryService
from notewise.services.mode_selector import ModeSelector
from notewise.services.notes import NoteService, filter_notes
from notewise.services.notifications import Notification, NotificationCenter, NotificationLevel
from notewise.services.preferences import PreferencesService
from notewise.services.reconciler import (
    ChangeFeedReconciler,
    FeedAttachment,
    FeedHandle,
    apply_event,
)
from notewise.services.snapshot_store import SnapshotStore
from notewise.services.views import EditorView, NotesView, Redirect, ViewKind

__all__ = [
    "ModeSelector",
    "SnapshotStore",
    "ChangeFeedReconciler",
    "FeedHandle",
    "FeedAttachment",
    "apply_event",
    "DraftController",
    "DraftState",
    "NoteService",
    "filter_notes",
    "HistoryService",
    "HistoryEntry",
    "PreferencesService",
    "NotificationCenter",
    "Notification",
    "NotificationLevel",
    "NotesView",
    "EditorView",
    "Redirect",
    "ViewKind",
    "AIAssistService",
    "FlashcardGenerator",
    "parse_flashcards",
    "EditorAssistant",
    "FlashcardService",
    "StudyDeck",
]
