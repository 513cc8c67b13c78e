"""
Data sources selected by session mode.

- RemoteSource: backend data service for a signed-in identity
- FallbackSource: persisted local dataset for fallback (demo) mode
"""
from notewise.core.datasource.base import NOTE_FIELDS, DataSource
from notewise.core.datasource.demo_data import DEMO_FOLDERS, DEMO_NOTES, DEMO_USER
from notewise.core.datasource.fallback import FallbackDataset, FallbackSource
from notewise.core.datasource.remote import RemoteSource

__all__ = [
    "DataSource",
    "NOTE_FIELDS",
    "RemoteSource",
    "FallbackSource",
    "FallbackDataset",
    "DEMO_NOTES",
    "DEMO_FOLDERS",
    "DEMO_USER",
]
