from .models import ToolDescriptor, PendingToolCall, ToolCallRequest
from .session import ToolSession, ToolProvider
from .registry import SessionRegistry
from .schema import SchemaValidator
from .execution import ToolDispatcher, parse_tool_arguments

__all__ = [
    "ToolDescriptor",
    "PendingToolCall",
    "ToolCallRequest",
    "ToolSession",
    "ToolProvider",
    "SessionRegistry",
    "SchemaValidator",
    "ToolDispatcher",
    "parse_tool_arguments",
]
