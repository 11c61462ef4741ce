"""Logging utilities for the streaming MCP client."""

import logging
import os
import sys
from typing import Optional, TextIO, Union

_LOGGER_NAME = "streaming_mcp_client"

# Per-request and per-message chatter of the HTTP and MCP transports
NOISY_LOGGERS = ("httpx", "httpcore", "mcp")


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance for the library.

    Module names (``streaming_mcp_client.x.y``) are used as they are; any other
    name becomes a child of the library logger.

    Args:
        name: Optional sub-logger name. If None, returns the root library logger.

    Returns:
        The requested logger.
    """
    if name:
        if name == _LOGGER_NAME or name.startswith(_LOGGER_NAME + "."):
            return logging.getLogger(name)
        return logging.getLogger(f"{_LOGGER_NAME}.{name}")
    return logging.getLogger(_LOGGER_NAME)


def resolve_level(level: Union[int, str, None] = None) -> int:
    """Turn ``level`` (or ``$LOG_LEVEL`` when None) into a logging level, INFO by default.

    Raises:
        ValueError: If the name is not a logging level.
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL") or logging.INFO
    if isinstance(level, int):
        return level
    if level.strip().isdigit():
        return int(level)
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    level: Union[int, str, None] = None,
    format_str: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream: Optional[TextIO] = None,
) -> None:
    """Setup default logging configuration for the library.

    Adds a StreamHandler to the library's root logger. Meant to be called by the
    application (e.g. the CLI), not by the library itself. Records go to stderr so
    they do not interleave with an answer streamed to stdout. Below DEBUG, the
    transport loggers are limited to warnings.

    Args:
        level: Logging level or level name; ``$LOG_LEVEL`` or INFO when None.
        format_str: Log format string.
        stream: Destination of the records; stderr when None.
    """
    logger = logging.getLogger(_LOGGER_NAME)

    # Avoid adding multiple handlers if called multiple times
    if any(not isinstance(h, logging.NullHandler) for h in logger.handlers):
        return

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(format_str))
    logger.addHandler(handler)
    logger.setLevel(resolved)

    if resolved > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


# Set default NullHandler to avoid "No handler found" warnings
logging.getLogger(_LOGGER_NAME).addHandler(logging.NullHandler())
