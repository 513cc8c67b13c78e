"""
Configuration for notewise.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class BackendConfig(BaseModel):
    """Backend data service configuration."""

    provider: str = "sqlite"
    db_path: str = "data/notewise.db"


class LLMConfig(BaseModel):
    """LLM provider configuration (used by the AI HTTP functions)."""

    provider: str = "openai"  # openai, ollama
    model: str = "gpt-4o-mini"
    base_url: str | None = None
    api_key: str | None = None
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout: float = 120.0


class AIServiceConfig(BaseModel):
    """Client-side settings for calling the AI HTTP functions."""

    base_url: str = "http://localhost:8000"
    assist_path: str = "/functions/ai-assist"
    flashcards_path: str = "/functions/generate-flashcards"
    timeout: float = 60.0


class AutosaveConfig(BaseModel):
    """Autosave defaults and bounds for persisted preferences."""

    enabled: bool = True
    interval_ms: int = 1000
    min_interval_ms: int = 500
    max_interval_ms: int = 10000


class FallbackConfig(BaseModel):
    """Fallback (demo) mode configuration."""

    state_path: str = "data/local_state.json"
    ttl_hours: float = 24.0
    seed_demo_data: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class Config(BaseModel):
    """Main configuration."""

    backend: BackendConfig = Field(default_factory=BackendConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    ai_service: AIServiceConfig = Field(default_factory=AIServiceConfig)
    autosave: AutosaveConfig = Field(default_factory=AutosaveConfig)
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            NOTEWISE_BACKEND_PROVIDER: Backend provider (sqlite)
            NOTEWISE_BACKEND_DB_PATH: SQLite database path
            NOTEWISE_LLM_PROVIDER: LLM provider (openai, ollama)
            NOTEWISE_LLM_MODEL: LLM model name
            NOTEWISE_LLM_BASE_URL: LLM base URL
            NOTEWISE_LLM_API_KEY: LLM API key (for OpenAI-compatible gateways)
            NOTEWISE_AI_SERVICE_URL: Base URL of the AI HTTP functions
            NOTEWISE_AUTOSAVE_ENABLED: Default autosave switch
            NOTEWISE_AUTOSAVE_INTERVAL_MS: Default autosave debounce interval
            NOTEWISE_FALLBACK_STATE_PATH: Local state file for fallback mode
            NOTEWISE_FALLBACK_TTL_HOURS: Hours before fallback mode auto-resets
            NOTEWISE_LOG_LEVEL: Log level
        """
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None:
                return default
            if value == "":
                return default
            # bool before int: bool is an int subclass
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        return cls(
            backend=BackendConfig(
                provider=get_env("NOTEWISE_BACKEND_PROVIDER", "sqlite"),
                db_path=get_env("NOTEWISE_BACKEND_DB_PATH", "data/notewise.db"),
            ),
            llm=LLMConfig(
                provider=get_env("NOTEWISE_LLM_PROVIDER", "openai"),
                model=get_env("NOTEWISE_LLM_MODEL", "gpt-4o-mini"),
                base_url=get_env("NOTEWISE_LLM_BASE_URL"),
                api_key=get_env("NOTEWISE_LLM_API_KEY"),
                temperature=get_env("NOTEWISE_LLM_TEMPERATURE", 0.7),
                max_tokens=get_env("NOTEWISE_LLM_MAX_TOKENS", 2000),
                timeout=get_env("NOTEWISE_LLM_TIMEOUT", 120.0),
            ),
            ai_service=AIServiceConfig(
                base_url=get_env("NOTEWISE_AI_SERVICE_URL", "http://localhost:8000"),
                timeout=get_env("NOTEWISE_AI_SERVICE_TIMEOUT", 60.0),
            ),
            autosave=AutosaveConfig(
                enabled=get_env("NOTEWISE_AUTOSAVE_ENABLED", True),
                interval_ms=get_env("NOTEWISE_AUTOSAVE_INTERVAL_MS", 1000),
            ),
            fallback=FallbackConfig(
                state_path=get_env("NOTEWISE_FALLBACK_STATE_PATH", "data/local_state.json"),
                ttl_hours=get_env("NOTEWISE_FALLBACK_TTL_HOURS", 24.0),
                seed_demo_data=get_env("NOTEWISE_FALLBACK_SEED_DEMO_DATA", True),
            ),
            logging=LoggingConfig(
                level=get_env("NOTEWISE_LOG_LEVEL", "INFO"),
                log_to_file=get_env("NOTEWISE_LOG_TO_FILE", False),
                log_dir=get_env("NOTEWISE_LOG_DIR", "logs"),
                file_rotation=get_env("NOTEWISE_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("NOTEWISE_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("NOTEWISE_LOG_COMPRESSION", "zip"),
                serialize=get_env("NOTEWISE_LOG_SERIALIZE", True),
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file=env_file)

        final_dict = {**config_dict}

        # Apply env overrides (non-default sections only)
        default = cls()
        for section in ("backend", "llm", "ai_service", "autosave", "fallback", "logging"):
            env_section = getattr(env_config, section)
            if env_section != getattr(default, section):
                final_dict[section] = env_section.model_dump()

        return cls(**final_dict) if final_dict else env_config


# Default config instance
default_config = Config()
