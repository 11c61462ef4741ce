"""Expose provider-agnostic message model types shared by the turn engine."""

from .models import (
    BaseMessage,
    UserMessage,
    AssistantMessage,
    AssistantToolCall,
    SystemMessage,
    ToolMessage,
    ConversationMessage,
)

__all__ = [
    "BaseMessage",
    "UserMessage",
    "AssistantMessage",
    "AssistantToolCall",
    "SystemMessage",
    "ToolMessage",
    "ConversationMessage",
]
