"""
Abstract base class for LLM providers.
Handles chat-style text generation for the AI functions.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


class Completion(BaseModel):
    """Generated text plus the provider's token usage report, when it sends one."""

    text: str
    usage: dict[str, Any] | None = None


class LLMProvider(ABC):
    """
    Abstract base for LLM text generation providers.

    Responsibilities:
    - Text completion from a user prompt and an optional system prompt
    - Token usage passthrough
    """

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.7,
        **kwargs,
    ) -> Completion:
        """
        Generate completion from prompt.

        Args:
            prompt: The user message
            system_prompt: Optional instructions sent as the system message
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature (0.0 = deterministic, 1.0 = creative)
            **kwargs: Provider-specific parameters

        Returns:
            Completion with the generated text

        Raises:
            ValidationError: If the prompt is empty
            LLMError: Provider-specific errors
        """
        pass

    @abstractmethod
    async def close(self):
        """
        Close any open connections.
        Optional to override if provider needs cleanup.
        """


def build_messages(prompt: str, system_prompt: str | None) -> list[dict[str, str]]:
    """Chat message list shared by the providers."""
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages
