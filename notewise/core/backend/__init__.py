"""
Backend data service abstraction.

Implementations:
- SQLiteBackend (aiosqlite) with an in-process change feed
"""
from notewise.core.backend.base import BackendClient
from notewise.core.backend.change_feed import ChangeFeedHub, FeedSubscription
from notewise.core.backend.sqlite_backend import SQLiteBackend

__all__ = [
    "BackendClient",
    "ChangeFeedHub",
    "FeedSubscription",
    "SQLiteBackend",
]
