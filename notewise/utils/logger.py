"""
Logging configuration using Loguru.

Every record carries two extra fields: `module` (bound by get_logger) and
`mode` (the session mode the record was written under, "-" outside any
mode_context block).
"""

import sys
from pathlib import Path

from loguru import logger

from notewise.config import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[mode]: <15}</magenta> | <cyan>{extra[module]}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[mode]} | {extra[module]} - {message}"
)


def setup_logging(config: LoggingConfig | None = None, **overrides) -> None:
    """
    Configure Loguru sinks.

    Args:
        config: Logging section of the app config (defaults when omitted)
        **overrides: Individual LoggingConfig fields, e.g. level="DEBUG"
    """
    config = (config or LoggingConfig()).model_copy(update=overrides)

    logger.remove()
    logger.configure(extra={"module": "notewise", "mode": "-"})

    logger.add(sys.stderr, level=config.level, format=CONSOLE_FORMAT, colorize=True)

    if config.log_to_file:
        log_path = Path(config.log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # JSON lines when serialized; the format string is ignored then
        logger.add(
            log_path / "notewise_{time:YYYY-MM-DD}.log",
            level=config.level,
            format=FILE_FORMAT,
            rotation=config.file_rotation,
            retention=config.file_retention,
            compression=config.compression,
            serialize=config.serialize,
            enqueue=True,
        )


def get_logger(name: str):
    """Get a logger instance for a module."""
    return logger.bind(module=name)


def mode_context(mode: str):
    """Tag every record written inside the block with the session mode."""
    return logger.contextualize(mode=mode)
