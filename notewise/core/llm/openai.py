"""
OpenAI LLM provider using official SDK.

Works with any OpenAI-compatible chat completions gateway via `base_url`.
"""

from openai import AsyncOpenAI

from notewise.core.llm.base import Completion, LLMProvider, build_messages
from notewise.utils.exceptions import LLMError, ValidationError
from notewise.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAILLM(LLMProvider):
    """
    OpenAI LLM provider for text generation.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        organization: str | None = None,
        base_url: str | None = None,
        timeout: float = 120.0,
    ):
        """
        Initialize OpenAI LLM provider.

        Args:
            api_key: OpenAI API key
            model: Model name (e.g., "gpt-4o", "gpt-4o-mini")
            organization: Optional organization ID
            base_url: Optional custom base URL (OpenAI-compatible gateway)
            timeout: Request timeout in seconds
        """
        self.model = model

        self.client = AsyncOpenAI(
            api_key=api_key, organization=organization, base_url=base_url, timeout=timeout
        )

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.7,
        **kwargs,
    ) -> Completion:
        """
        Generate completion using OpenAI chat completions.

        Args:
            prompt: User message
            system_prompt: Optional system message
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            **kwargs: Additional parameters (e.g., top_p, presence_penalty)
        Returns:
            Completion with text and usage
        Raises:
            LLMError: If OpenAI API call fails
            ValidationError: If the prompt is empty
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt cannot be empty")

        params = {
            "model": self.model,
            "messages": build_messages(prompt, system_prompt),
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        }

        try:
            response = await self.client.chat.completions.create(**params)
        except Exception as e:
            logger.error(
                "OpenAI API error",
                extra={
                    "model": self.model,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            raise LLMError(f"OpenAI API error: {e}") from e

        if not response.choices or response.choices[0].message is None:
            raise LLMError("Invalid response from OpenAI: no choices")

        content = response.choices[0].message.content
        if not content:
            raise LLMError("OpenAI returned empty content")

        usage = response.usage.model_dump() if response.usage is not None else None
        return Completion(text=content, usage=usage)

    async def close(self):
        """Close OpenAI client."""
        await self.client.close()
