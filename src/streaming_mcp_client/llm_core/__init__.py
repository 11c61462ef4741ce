"""Public exports for the provider-agnostic turn engine."""

from .base import StreamingLLM
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
from .logger import get_logger, setup_logging
from .messages import (
    BaseMessage,
    UserMessage,
    AssistantMessage,
    AssistantToolCall,
    SystemMessage,
    ToolMessage,
    ConversationMessage,
)
from .cancellation import raise_if_canceled, run_cancellable
from .tools import (
    ToolDescriptor,
    PendingToolCall,
    ToolCallRequest,
    ToolSession,
    ToolProvider,
    SessionRegistry,
    SchemaValidator,
    ToolDispatcher,
    parse_tool_arguments,
)
from .streaming import (
    StreamChunk,
    StreamFragment,
    ToolResult,
    TurnEvent,
    StreamAggregator,
    MAX_RETRIES,
    TurnRetryController,
    ToolTurnRunner,
)

__all__ = [
    "StreamingLLM",
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
    "get_logger",
    "setup_logging",
    "BaseMessage",
    "UserMessage",
    "AssistantMessage",
    "AssistantToolCall",
    "SystemMessage",
    "ToolMessage",
    "ConversationMessage",
    "raise_if_canceled",
    "run_cancellable",
    "ToolDescriptor",
    "PendingToolCall",
    "ToolCallRequest",
    "ToolSession",
    "ToolProvider",
    "SessionRegistry",
    "SchemaValidator",
    "ToolDispatcher",
    "parse_tool_arguments",
    "StreamChunk",
    "StreamFragment",
    "ToolResult",
    "TurnEvent",
    "StreamAggregator",
    "MAX_RETRIES",
    "TurnRetryController",
    "ToolTurnRunner",
]
