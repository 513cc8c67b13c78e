"""
Flashcards: generation from a note, storage, and a study deck.
"""

from notewise.core.ai_client import AIServiceClient
from notewise.models import Difficulty, Flashcard, GeneratedFlashcard, Note
from notewise.services.mode_selector import ModeSelector
from notewise.services.notifications import NotificationCenter
from notewise.utils.exceptions import NotewiseError
from notewise.utils.html import strip_html
from notewise.utils.logger import get_logger

logger = get_logger(__name__)


class FlashcardService:
    """Generate, save, list and delete flashcards."""

    def __init__(
        self,
        selector: ModeSelector,
        client: AIServiceClient,
        notifications: NotificationCenter | None = None,
    ):
        self.selector = selector
        self.client = client
        self.notifications = notifications or NotificationCenter()

    async def generate(
        self, note: Note, difficulty: Difficulty = Difficulty.MEDIUM
    ) -> list[GeneratedFlashcard]:
        """Ask the AI service for cards from the note's plain text."""
        text = strip_html(note.content)
        if not text:
            self.notifications.error("This note has no content to study")
            return []

        try:
            response = await self.client.generate_flashcards(text, difficulty)
        except NotewiseError as e:
            self.notifications.error("Failed to generate flashcards", error=e)
            return []

        if not response.flashcards:
            self.notifications.info("No flashcards generated")
        return response.flashcards

    async def save(
        self, note_id: str, cards: list[GeneratedFlashcard], difficulty: Difficulty
    ) -> list[Flashcard]:
        try:
            source = self.selector.source()
            saved = await source.insert_flashcards(note_id, cards, difficulty)
        except NotewiseError as e:
            self.notifications.error("Failed to save flashcards", error=e)
            return []

        self.notifications.success("Flashcards saved", f"{len(saved)} flashcards created")
        return saved

    async def generate_and_save(
        self, note: Note, difficulty: Difficulty = Difficulty.MEDIUM
    ) -> list[Flashcard]:
        cards = await self.generate(note, difficulty)
        if not cards:
            return []
        return await self.save(note.id, cards, difficulty)

    async def list_cards(self, note_id: str | None = None) -> list[Flashcard]:
        try:
            return await self.selector.source().list_flashcards(note_id)
        except NotewiseError as e:
            self.notifications.error("Failed to load flashcards", error=e)
            return []

    async def delete(self, flashcard_id: str) -> bool:
        try:
            await self.selector.source().delete_flashcard(flashcard_id)
        except NotewiseError as e:
            self.notifications.error("Failed to delete flashcard", error=e)
            return False
        return True

    async def delete_all(self, note_id: str | None = None) -> int:
        try:
            count = await self.selector.source().delete_flashcards(note_id)
        except NotewiseError as e:
            self.notifications.error("Failed to delete flashcards", error=e)
            return 0
        logger.info(f"Deleted {count} flashcards", extra={"note_id": note_id})
        self.notifications.success("Flashcards deleted", f"{count} flashcards removed")
        return count


class StudyDeck:
    """Walks through a set of cards one at a time. Navigation wraps around."""

    def __init__(self, cards: list[Flashcard]):
        self.cards = list(cards)
        self.index = 0
        self.flipped = False

    def __len__(self) -> int:
        return len(self.cards)

    @property
    def current(self) -> Flashcard | None:
        return self.cards[self.index] if self.cards else None

    @property
    def position(self) -> str:
        return f"{self.index + 1} / {len(self.cards)}" if self.cards else "0 / 0"

    def next(self) -> Flashcard | None:
        if self.cards:
            self.index = (self.index + 1) % len(self.cards)
            self.flipped = False
        return self.current

    def previous(self) -> Flashcard | None:
        if self.cards:
            self.index = (self.index - 1) % len(self.cards)
            self.flipped = False
        return self.current

    def flip(self) -> bool:
        if self.cards:
            self.flipped = not self.flipped
        return self.flipped

    def reset(self) -> None:
        self.index = 0
        self.flipped = False
