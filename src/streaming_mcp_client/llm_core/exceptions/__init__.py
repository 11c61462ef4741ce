"""Export the exception hierarchy used across registration, streaming and dispatch."""

from .exceptions import (
    StreamingMcpError,
    ProviderConnectionError,
    ToolRegistrationError,
    ArgumentParseError,
    IncompleteArgumentsError,
    InvalidArgumentsError,
    IncompleteResponseError,
    TurnCanceledError,
    ToolExecutionError,
    SessionCloseError,
)

__all__ = [
    "StreamingMcpError",
    "ProviderConnectionError",
    "ToolRegistrationError",
    "ArgumentParseError",
    "IncompleteArgumentsError",
    "InvalidArgumentsError",
    "IncompleteResponseError",
    "TurnCanceledError",
    "ToolExecutionError",
    "SessionCloseError",
]
