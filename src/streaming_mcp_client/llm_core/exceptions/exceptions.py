"""
Custom exception classes for the streaming MCP client.

The hierarchy separates the failure kinds a turn can run into: provider
registration, argument decoding (truncated vs. malformed), cancellation,
provider-side tool failures and session shutdown.
"""

from typing import List, Optional


class StreamingMcpError(Exception):
    """Base exception for all library errors."""

    pass


class ProviderConnectionError(StreamingMcpError, ConnectionError):
    """Raised when a tool provider cannot be connected or refuses to list its tools."""

    pass


class ToolRegistrationError(StreamingMcpError):
    """Raised when a tool cannot be published into the registry."""

    pass


class ArgumentParseError(StreamingMcpError, ValueError):
    """Raised when the accumulated arguments of a tool call cannot be decoded."""

    def __init__(self, message: str, tool_name: str = "unknown", raw_arguments: str = ""):
        super().__init__(message)
        self.tool_name = tool_name
        self.raw_arguments = raw_arguments


class IncompleteArgumentsError(ArgumentParseError):
    """The arguments string ended before the JSON payload was closed (stream truncation)."""

    pass


class InvalidArgumentsError(ArgumentParseError):
    """The arguments string is complete but is not a valid JSON object."""

    pass


class IncompleteResponseError(StreamingMcpError):
    """Raised when every attempt of a turn produced truncated tool-call arguments."""

    def __init__(self, attempts: int):
        super().__init__(
            f"Failed to get complete response from the model after {attempts} attempts. "
            "Please check your network connection and try again."
        )
        self.attempts = attempts


class TurnCanceledError(StreamingMcpError):
    """Raised when the cancellation signal of a turn fires."""

    pass


class ToolExecutionError(StreamingMcpError):
    """Raised when a tool provider fails while executing a tool."""

    pass


class SessionCloseError(StreamingMcpError):
    """Raised after closing all sessions when one or more of them failed to close."""

    def __init__(self, errors: List[BaseException], message: Optional[str] = None):
        super().__init__(message or f"{len(errors)} provider session(s) failed to close: {errors}")
        self.errors = errors
