"""
Factory modules for creating notewise components.

Provides factories for the LLM provider and the backend data service.
"""

from notewise.core.factory.backend_factory import BackendFactory
from notewise.core.factory.llm_factory import LLMFactory

__all__ = [
    "LLMFactory",
    "BackendFactory",
]
