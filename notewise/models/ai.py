"""
Request/response payloads of the two AI HTTP functions.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from notewise.models.flashcard import Difficulty, GeneratedFlashcard


class AIAction(str, Enum):
    """Actions supported by the assist function."""

    IMPROVE = "improve"
    SUMMARIZE = "summarize"
    EXPAND = "expand"
    TONE = "tone"
    GENERATE = "generate"


class AssistRequest(BaseModel):
    """Body of POST /functions/ai-assist."""

    model_config = {"extra": "ignore"}

    action: AIAction | None = None
    content: str | None = None
    prompt: str | None = None

    def has_input(self) -> bool:
        return bool((self.content or "").strip() or (self.prompt or "").strip())


class AssistResponse(BaseModel):
    """Successful assist reply."""

    result: str
    usage: dict[str, Any] | None = None


class FlashcardRequest(BaseModel):
    """Body of POST /functions/generate-flashcards."""

    model_config = {"extra": "ignore"}

    content: str | None = None
    difficulty: Difficulty | None = None


class FlashcardResponse(BaseModel):
    """Successful flashcard generation reply."""

    flashcards: list[GeneratedFlashcard] = Field(default_factory=list)
    usage: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Error body returned by both functions."""

    error: str
