"""
Client for the two AI HTTP functions (text assist and flashcard generation).

Every failure mode (transport error, non-2xx status, body that is not the
expected JSON) surfaces as AIServiceError so callers can treat AI problems
as recoverable.
"""

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from notewise.config import AIServiceConfig
from notewise.models import (
    AIAction,
    AssistRequest,
    AssistResponse,
    Difficulty,
    FlashcardRequest,
    FlashcardResponse,
)
from notewise.utils.exceptions import AIServiceError, ValidationError
from notewise.utils.logger import get_logger

logger = get_logger(__name__)


class AIServiceClient:
    """
    Async client for the AI functions.

    Args:
        config: Base URL, paths and timeout of the functions
        transport: Optional httpx transport (tests mount a MockTransport here)
    """

    def __init__(
        self,
        config: AIServiceConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or AIServiceConfig()
        self.client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def assist(
        self,
        action: AIAction | None,
        content: str | None = None,
        prompt: str | None = None,
    ) -> AssistResponse:
        """
        Run an assist action.

        Args:
            action: improve / summarize / expand / tone / generate (None for free-form)
            content: Text to transform
            prompt: Instruction for generate / free-form requests

        Returns:
            AssistResponse with the HTML result

        Raises:
            ValidationError: If neither content nor prompt has text
            AIServiceError: If the request fails
        """
        request = AssistRequest(action=action, content=content, prompt=prompt)
        if not request.has_input():
            raise ValidationError("Either prompt or content is required")

        return await self._post(self.config.assist_path, request, AssistResponse)

    async def generate_flashcards(self, content: str, difficulty: Difficulty) -> FlashcardResponse:
        """
        Generate flashcards from plain text.

        Raises:
            ValidationError: If content is empty
            AIServiceError: If the request fails
        """
        if not content or not content.strip():
            raise ValidationError("Content is required")

        request = FlashcardRequest(content=content, difficulty=difficulty)
        return await self._post(self.config.flashcards_path, request, FlashcardResponse)

    async def _post(
        self, path: str, request: BaseModel, response_model: type[BaseModel]
    ) -> BaseModel:
        try:
            payload = request.model_dump(mode="json", exclude_none=True)
            response = await self.client.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.warning(
                f"AI service request to {path} failed",
                extra={"error": str(e), "path": path, "error_type": type(e).__name__},
            )
            raise AIServiceError(f"AI service unreachable: {e}", context={"path": path}) from e

        try:
            body = response.json()
        except ValueError as e:
            raise AIServiceError(
                f"AI service returned malformed JSON (status {response.status_code})",
                status_code=response.status_code,
                context={"path": path},
            ) from e

        if not response.is_success:
            message = body.get("error") if isinstance(body, dict) else None
            logger.warning(
                f"AI service error {response.status_code} from {path}",
                extra={"error": str(message), "path": path, "status_code": response.status_code},
            )
            raise AIServiceError(
                message or f"AI service error {response.status_code}",
                status_code=response.status_code,
                context={"path": path},
            )

        try:
            return response_model.model_validate(body)
        except PydanticValidationError as e:
            raise AIServiceError(
                f"AI service returned an unexpected body: {e}",
                status_code=response.status_code,
                context={"path": path},
            ) from e

    async def close(self) -> None:
        await self.client.aclose()
