"""
Flashcard models.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from notewise.models.note import utc_now


class Difficulty(str, Enum):
    """Flashcard difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GeneratedFlashcard(BaseModel):
    """A question/answer pair as returned by the generator (LLM output)."""

    model_config = {"extra": "ignore"}

    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class Flashcard(BaseModel):
    """A stored flashcard. Created in batches, never versioned."""

    id: str
    note_id: str
    user_id: str | None = None
    question: str
    answer: str
    difficulty: Difficulty = Difficulty.MEDIUM
    created_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Flashcard":
        return cls.model_validate(row)

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump()
        row["difficulty"] = self.difficulty.value
        row["created_at"] = self.created_at.isoformat()
        return row
