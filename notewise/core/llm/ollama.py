"""
Ollama LLM provider using native ollama-python SDK.
"""

import ollama

from notewise.core.llm.base import Completion, LLMProvider, build_messages
from notewise.utils.exceptions import LLMError, ValidationError
from notewise.utils.logger import get_logger

logger = get_logger(__name__)


class OllamaLLM(LLMProvider):
    """
    Ollama LLM provider for text generation.

    Uses native ollama-python SDK for chat completions.
    """

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
        timeout: float = 120.0,
    ):
        """
        Initialize Ollama LLM provider.

        Args:
            host: Ollama server URL
            model: Model name for text generation (e.g., "llama3.1", "mistral")
            timeout: Request timeout in seconds
        """
        self.host = host
        self.model = model
        self.timeout = timeout

        self.client = ollama.AsyncClient(host=host, timeout=timeout)

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.7,
        **kwargs,
    ) -> Completion:
        """
        Generate completion using Ollama.

        Args:
            prompt: User message
            system_prompt: Optional system message
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            **kwargs: Additional options (passed to Ollama under "options")

        Returns:
            Completion with text; usage carries Ollama's token counters
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt cannot be empty")

        options = {
            "temperature": temperature,
            "num_predict": max_tokens,
            **kwargs.get("options", {}),
        }

        try:
            response = await self.client.chat(
                model=self.model,
                messages=build_messages(prompt, system_prompt),
                options=options,
            )
        except Exception as e:
            logger.error(
                "Ollama API error",
                extra={
                    "model": self.model,
                    "host": self.host,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            raise LLMError(f"Ollama API error: {e}") from e

        content = response["message"]["content"]
        if not content:
            raise LLMError("Ollama returned empty content")

        usage = None
        if response.get("eval_count") is not None:
            prompt_tokens = response.get("prompt_eval_count") or 0
            completion_tokens = response.get("eval_count") or 0
            usage = {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            }

        return Completion(text=content, usage=usage)

    async def close(self):
        """Close client (Ollama SDK handles cleanup internally)."""
        pass
