"""
Tests for the server-side AI functions and flashcard reply parsing.
"""

from unittest.mock import AsyncMock

import pytest

from notewise.config import LLMConfig
from notewise.core.llm.base import Completion
from notewise.models import AIAction, AssistRequest, Difficulty, FlashcardRequest
from notewise.services.ai_assist import (
    ASSIST_PROMPTS,
    FLASHCARD_PROMPTS,
    AIAssistService,
    FlashcardGenerator,
    parse_flashcards,
)
from notewise.utils.exceptions import LLMError, ValidationError


@pytest.fixture
def llm():
    mock = AsyncMock()
    mock.complete.return_value = Completion(text="Shorter text.", usage={"total_tokens": 12})
    return mock


@pytest.mark.unit
@pytest.mark.asyncio
class TestAIAssistService:
    async def test_action_prompt_and_html_result(self, llm):
        service = AIAssistService(llm, LLMConfig(max_tokens=500, temperature=0.2))

        response = await service.assist(
            AssistRequest(action=AIAction.SUMMARIZE, content="Long text")
        )

        assert response.result == "<p>Shorter text.</p>"
        assert response.usage == {"total_tokens": 12}
        args, kwargs = llm.complete.call_args
        assert args[0] == "Summarize this text:\n\nLong text"
        assert kwargs["system_prompt"] == ASSIST_PROMPTS[AIAction.SUMMARIZE][0]
        assert kwargs["max_tokens"] == 500
        assert kwargs["temperature"] == 0.2

    async def test_generate_uses_prompt(self, llm):
        await AIAssistService(llm).assist(
            AssistRequest(action=AIAction.GENERATE, prompt="Write about bees")
        )

        assert llm.complete.call_args.args[0] == "Write about bees"

    async def test_default_action(self, llm):
        await AIAssistService(llm).assist(AssistRequest(prompt="Hello?"))

        assert llm.complete.call_args.kwargs["system_prompt"] == ASSIST_PROMPTS[None][0]

    async def test_html_reply_is_kept(self, llm):
        llm.complete.return_value = Completion(text="<ul><li>a</li></ul>")

        response = await AIAssistService(llm).assist(
            AssistRequest(action=AIAction.EXPAND, content="a")
        )

        assert response.result == "<ul><li>a</li></ul>"

    async def test_requires_input(self, llm):
        with pytest.raises(ValidationError):
            await AIAssistService(llm).assist(AssistRequest(action=AIAction.TONE, content=" "))
        llm.complete.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
class TestFlashcardGenerator:
    async def test_generate(self, llm):
        llm.complete.return_value = Completion(
            text='Here you go:\n```json\n[{"question": "Q1?", "answer": "A1"}]\n```'
        )

        response = await FlashcardGenerator(llm).generate(
            FlashcardRequest(content="Cells", difficulty=Difficulty.EASY)
        )

        assert [(c.question, c.answer) for c in response.flashcards] == [("Q1?", "A1")]
        kwargs = llm.complete.call_args.kwargs
        assert kwargs["system_prompt"] == FLASHCARD_PROMPTS[Difficulty.EASY]
        assert "Cells" in llm.complete.call_args.args[0]

    async def test_mixed_difficulty_when_unset(self, llm):
        llm.complete.return_value = Completion(text="[]")

        await FlashcardGenerator(llm).generate(FlashcardRequest(content="Cells"))

        assert llm.complete.call_args.kwargs["system_prompt"] == FLASHCARD_PROMPTS[None]

    async def test_requires_content(self, llm):
        with pytest.raises(ValidationError, match="Content is required"):
            await FlashcardGenerator(llm).generate(FlashcardRequest(content=""))


@pytest.mark.unit
class TestParseFlashcards:
    def test_bare_array(self):
        cards = parse_flashcards('[{"question": "Q?", "answer": "A", "hint": "ignored"}]')
        assert cards[0].question == "Q?"

    def test_no_array(self):
        with pytest.raises(LLMError, match="Failed to parse generated flashcards"):
            parse_flashcards("Sorry, I cannot help with that.")

    def test_wrong_shape(self):
        with pytest.raises(LLMError):
            parse_flashcards('[{"q": "Q?", "a": "A"}]')
