"""
Server side of the AI functions.

AIAssistService turns an assist request into one LLM call and returns
HTML. FlashcardGenerator asks for five question/answer pairs and pulls
the JSON array out of whatever the model wrapped around it.
"""

import json
import re

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from notewise.config import LLMConfig
from notewise.core.llm.base import LLMProvider
from notewise.models import (
    AIAction,
    AssistRequest,
    AssistResponse,
    Difficulty,
    FlashcardRequest,
    FlashcardResponse,
    GeneratedFlashcard,
)
from notewise.utils.exceptions import LLMError, ValidationError
from notewise.utils.html import plain_text_to_html
from notewise.utils.logger import get_logger

logger = get_logger(__name__)

HTML_HINT = "Format the answer as HTML using p, ul, ol, li, strong and em tags."

ASSIST_PROMPTS: dict[AIAction | None, tuple[str, str]] = {
    AIAction.IMPROVE: (
        "You are a writing assistant. Make the text clearer, better structured and more "
        "engaging without changing its meaning or tone. " + HTML_HINT,
        "Improve this text:\n\n{content}",
    ),
    AIAction.SUMMARIZE: (
        "You summarize notes. Keep the key points and essential facts, drop the rest. "
        + HTML_HINT,
        "Summarize this text:\n\n{content}",
    ),
    AIAction.EXPAND: (
        "You are a writing assistant. Elaborate on the text with relevant details and "
        "examples, staying consistent with what it already says. " + HTML_HINT,
        "Expand this text with more detail and examples:\n\n{content}",
    ),
    AIAction.TONE: (
        "You adjust writing style. Rewrite the text in a professional, engaging tone "
        "suited to a general audience. " + HTML_HINT,
        "Adjust the tone of this text:\n\n{content}",
    ),
    AIAction.GENERATE: (
        "You write well-structured, informative content from a short request. "
        "Use headings where they help. " + HTML_HINT.replace("p,", "h3, p,"),
        "{prompt}",
    ),
    None: (
        "You help with note-taking and writing. Answer clearly and concisely. " + HTML_HINT,
        "{prompt}",
    ),
}

FLASHCARD_PROMPTS: dict[Difficulty | None, str] = {
    Difficulty.EASY: (
        "You are an educator. Write 5 simple flashcards about basic facts, definitions "
        "and key concepts of the content."
    ),
    Difficulty.MEDIUM: (
        "You are an educator. Write 5 intermediate flashcards about how the concepts in "
        "the content connect and apply. They should need some analysis."
    ),
    Difficulty.HARD: (
        "You are an educator. Write 5 challenging flashcards that need critical thinking, "
        "synthesis and evaluation of the content."
    ),
    None: "You are an educator. Write 5 flashcards of mixed difficulty about the content.",
}

FLASHCARD_USER_PROMPT = """Create flashcards from the content below. Reply with ONLY a JSON array:
[
  {{"question": "Question text?", "answer": "Answer text"}}
]

Content:
{content}"""

_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_flashcard_list = TypeAdapter(list[GeneratedFlashcard])


class AIAssistService:
    """Runs assist actions against the LLM provider."""

    def __init__(self, llm: LLMProvider, config: LLMConfig | None = None):
        self.llm = llm
        self.config = config or LLMConfig()

    async def assist(self, request: AssistRequest) -> AssistResponse:
        """
        Run one assist action.

        Raises:
            ValidationError: If the request has neither content nor prompt
            LLMError: If generation fails
        """
        if not request.has_input():
            raise ValidationError("Either prompt or content is required")

        system_prompt, template = ASSIST_PROMPTS.get(request.action, ASSIST_PROMPTS[None])
        content = request.content or ""
        prompt = request.prompt or content
        user_prompt = template.format(content=content or prompt, prompt=prompt)

        logger.info(
            f"AI assist: {request.action.value if request.action else 'default'}",
            extra={"prompt_length": len(user_prompt), "system_length": len(system_prompt)},
        )

        completion = await self.llm.complete(
            user_prompt,
            system_prompt=system_prompt,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )
        return AssistResponse(result=plain_text_to_html(completion.text), usage=completion.usage)


class FlashcardGenerator:
    """Generates flashcards with the LLM provider."""

    def __init__(self, llm: LLMProvider, config: LLMConfig | None = None):
        self.llm = llm
        self.config = config or LLMConfig()

    async def generate(self, request: FlashcardRequest) -> FlashcardResponse:
        """
        Generate flashcards from content.

        Raises:
            ValidationError: If content is empty
            LLMError: If generation fails or the reply holds no usable card array
        """
        if not request.content or not request.content.strip():
            raise ValidationError("Content is required")

        logger.info(
            "Generating flashcards",
            extra={"difficulty": request.difficulty.value if request.difficulty else "mixed"},
        )

        completion = await self.llm.complete(
            FLASHCARD_USER_PROMPT.format(content=request.content),
            system_prompt=FLASHCARD_PROMPTS.get(request.difficulty, FLASHCARD_PROMPTS[None]),
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )
        return FlashcardResponse(
            flashcards=parse_flashcards(completion.text), usage=completion.usage
        )


def parse_flashcards(text: str) -> list[GeneratedFlashcard]:
    """
    Extract the flashcard array from a model reply.

    The outermost [...] span is used when the reply wraps the array in
    prose or code fences; otherwise the whole reply is parsed.

    Raises:
        LLMError: If no valid array of question/answer objects is found
    """
    match = _JSON_ARRAY_RE.search(text)
    raw = match.group(0) if match else text
    try:
        return _flashcard_list.validate_python(json.loads(raw))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        logger.error(
            "Failed to parse flashcards",
            extra={"error": str(e), "reply_preview": text[:200]},
        )
        raise LLMError("Failed to parse generated flashcards") from e
