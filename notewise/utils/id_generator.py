"""
ID generation utilities for notewise.

Rows created by the fallback dataset get readable prefixed IDs:
- Notes: note-xxx
- Folders: folder-xxx

The SQLite backend assigns plain UUIDs, the way a hosted backend would.
"""

from uuid import uuid4


def _short_hex() -> str:
    return uuid4().hex[:12]


def generate_note_id() -> str:
    """
    Generate unique Note ID.

    Returns:
        ID in format "note-xxx" where xxx is 12 hex characters
    """
    return f"note-{_short_hex()}"


def generate_folder_id() -> str:
    """Generate unique Folder ID ("folder-xxx")."""
    return f"folder-{_short_hex()}"


def generate_uuid() -> str:
    """Generate a plain UUID4 string."""
    return str(uuid4())
