"""
Factory for creating backend data service clients.
"""

from notewise.config import BackendConfig
from notewise.core.backend.base import BackendClient
from notewise.core.backend.sqlite_backend import SQLiteBackend
from notewise.utils.exceptions import ConfigurationError


class BackendFactory:
    """Factory for creating backend clients from configuration."""

    @staticmethod
    async def create(config: BackendConfig) -> BackendClient:
        """
        Create and initialize a backend client.

        Args:
            config: Backend configuration

        Returns:
            Initialized backend client

        Raises:
            ConfigurationError: If provider is not supported
        """
        if config.provider == "sqlite":
            backend = SQLiteBackend(db_path=config.db_path)
            await backend.initialize()
            return backend

        raise ConfigurationError(
            f"Unsupported backend provider: {config.provider}",
            context={"provider": config.provider},
        )
