"""
Session state models.

Exactly one mode holds at a time: a signed-in identity, fallback (demo)
mode, or neither.
"""

from enum import Enum

from pydantic import BaseModel


class Mode(str, Enum):
    """Data routing mode."""

    AUTHENTICATED = "authenticated"
    FALLBACK = "fallback"
    UNAUTHENTICATED = "unauthenticated"


class Identity(BaseModel):
    """A signed-in user (or the fallback demo user)."""

    id: str
    email: str | None = None
    name: str | None = None


class SessionState(BaseModel):
    """Current session mode plus the identity that owns written rows."""

    model_config = {"frozen": True}

    mode: Mode
    identity: Identity | None = None

    @classmethod
    def authenticated(cls, identity: Identity) -> "SessionState":
        return cls(mode=Mode.AUTHENTICATED, identity=identity)

    @classmethod
    def fallback(cls, demo_user: Identity | None = None) -> "SessionState":
        return cls(mode=Mode.FALLBACK, identity=demo_user)

    @classmethod
    def unauthenticated(cls) -> "SessionState":
        return cls(mode=Mode.UNAUTHENTICATED)

    @property
    def is_authenticated(self) -> bool:
        return self.mode == Mode.AUTHENTICATED

    @property
    def is_fallback(self) -> bool:
        return self.mode == Mode.FALLBACK

    @property
    def has_data_access(self) -> bool:
        return self.mode != Mode.UNAUTHENTICATED
