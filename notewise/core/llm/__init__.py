"""
LLM provider abstraction layer for the AI functions.

Supported providers:
- Ollama (native SDK)
- OpenAI (official SDK, or any compatible gateway)
"""
from notewise.core.llm.base import Completion, LLMProvider
from notewise.core.llm.ollama import OllamaLLM
from notewise.core.llm.openai import OpenAILLM

__all__ = [
    "Completion",
    "LLMProvider",
    "OllamaLLM",
    "OpenAILLM",
]
