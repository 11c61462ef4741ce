"""Tool-related data models."""

from .models import ToolDescriptor
from .tool_call import PendingToolCall, ToolCallRequest

__all__ = ["ToolDescriptor", "PendingToolCall", "ToolCallRequest"]
