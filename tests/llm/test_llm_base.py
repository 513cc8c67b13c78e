"""
Tests for LLM base class.
"""

import pytest

from notewise.core.llm.base import Completion, LLMProvider, build_messages


class MockLLM(LLMProvider):
    """Mock LLM provider for testing."""

    async def complete(self, prompt: str, system_prompt=None, **kwargs):
        return Completion(text=f"echo: {prompt}")

    async def close(self):
        pass


@pytest.mark.unit
@pytest.mark.asyncio
class TestLLMProviderBase:
    """Test base LLM provider functionality."""

    async def test_abstract_instantiation(self):
        with pytest.raises(TypeError, match="Can't instantiate abstract class"):
            LLMProvider()

    async def test_complete_interface(self):
        llm = MockLLM()

        result = await llm.complete("hello")

        assert result.text == "echo: hello"
        assert result.usage is None

    async def test_build_messages_with_system_prompt(self):
        messages = build_messages("question", "be brief")

        assert messages == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "question"},
        ]

    async def test_build_messages_without_system_prompt(self):
        assert build_messages("question", None) == [{"role": "user", "content": "question"}]
