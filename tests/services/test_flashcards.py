"""
Tests for flashcard generation/storage and the study deck.
"""

from unittest.mock import AsyncMock

import pytest

from notewise.models import (
    Difficulty,
    Flashcard,
    FlashcardResponse,
    GeneratedFlashcard,
    NoteDraft,
)
from notewise.services.flashcards import FlashcardService, StudyDeck
from notewise.utils.exceptions import AIServiceError


@pytest.fixture
def client():
    mock = AsyncMock()
    mock.generate_flashcards.return_value = FlashcardResponse(
        flashcards=[
            GeneratedFlashcard(question="What is ATP?", answer="Energy currency"),
            GeneratedFlashcard(question="Where is it made?", answer="Mitochondria"),
        ]
    )
    return mock


@pytest.fixture
async def note(signed_in):
    return await signed_in.source().insert_note(
        NoteDraft(title="Biology", content="<p>ATP &amp; mitochondria</p>")
    )


@pytest.mark.sqlite
@pytest.mark.asyncio
class TestFlashcardService:
    async def test_generate_sends_plain_text(self, signed_in, client, note, notifications):
        service = FlashcardService(signed_in, client, notifications)

        cards = await service.generate(note, Difficulty.HARD)

        assert len(cards) == 2
        client.generate_flashcards.assert_awaited_once_with("ATP & mitochondria", Difficulty.HARD)

    async def test_generate_and_save(self, signed_in, client, note, notifications):
        service = FlashcardService(signed_in, client, notifications)

        saved = await service.generate_and_save(note, Difficulty.EASY)

        assert [c.difficulty for c in saved] == [Difficulty.EASY, Difficulty.EASY]
        assert len(await service.list_cards(note.id)) == 2
        assert notifications.recent[-1].title == "Flashcards saved"

    async def test_empty_note(self, signed_in, client, notifications):
        empty = await signed_in.source().insert_note(NoteDraft(content="<p> </p>"))
        service = FlashcardService(signed_in, client, notifications)

        assert await service.generate_and_save(empty) == []
        client.generate_flashcards.assert_not_called()
        assert notifications.errors()[-1].title == "This note has no content to study"

    async def test_service_error_is_reported(self, signed_in, client, note, notifications):
        client.generate_flashcards.side_effect = AIServiceError("quota", status_code=500)
        service = FlashcardService(signed_in, client, notifications)

        assert await service.generate(note) == []
        assert notifications.errors()[-1].message == "quota"

    async def test_delete_and_delete_all(self, signed_in, client, note, notifications):
        service = FlashcardService(signed_in, client, notifications)
        saved = await service.generate_and_save(note)

        assert await service.delete(saved[0].id) is True
        assert await service.delete(saved[0].id) is False
        assert await service.delete_all(note.id) == 1
        assert await service.list_cards() == []

    async def test_unsupported_in_fallback(self, fallback_selector, client, notifications):
        service = FlashcardService(fallback_selector, client, notifications)

        assert await service.list_cards() == []
        assert notifications.errors()[-1].title == "Failed to load flashcards"


def make_cards(n):
    return [
        Flashcard(id=f"c{i}", note_id="n1", question=f"Q{i}", answer=f"A{i}") for i in range(n)
    ]


@pytest.mark.unit
class TestStudyDeck:
    def test_navigation_wraps(self):
        deck = StudyDeck(make_cards(3))

        assert deck.position == "1 / 3"
        assert deck.previous().id == "c2"
        assert deck.next().id == "c0"
        assert deck.next().id == "c1"

    def test_flip_resets_on_move(self):
        deck = StudyDeck(make_cards(2))

        assert deck.flip() is True
        deck.next()
        assert deck.flipped is False

    def test_empty_deck(self):
        deck = StudyDeck([])

        assert len(deck) == 0
        assert deck.current is None
        assert deck.next() is None
        assert deck.flip() is False
        assert deck.position == "0 / 0"

    def test_reset(self):
        deck = StudyDeck(make_cards(3))
        deck.next()
        deck.flip()

        deck.reset()

        assert deck.current.id == "c0"
        assert not deck.flipped
