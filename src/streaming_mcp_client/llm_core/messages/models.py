"""Provider-agnostic message models for the conversation transcript."""

from pydantic import BaseModel, Field
from abc import ABC
from typing import List, Literal, Union


class BaseMessage(ABC, BaseModel):
    """Base model for messages exchanged with an LLM.

    Attributes:
        role: Role associated with the message.
        content: Text payload of the message.
    """

    role: str
    content: str


class SystemMessage(BaseMessage):
    """Message authored by the system to steer behavior."""

    role: Literal["system"] = "system"


class UserMessage(BaseMessage):
    """Message authored by an end user."""

    role: Literal["user"] = "user"


class AssistantToolCall(BaseModel):
    """A tool call requested by the assistant, with its raw JSON arguments."""

    id: str
    name: str
    arguments: str = ""


class AssistantMessage(BaseMessage):
    """Message authored by the assistant, optionally containing tool calls."""

    role: Literal["assistant"] = "assistant"
    content: str = ""
    tool_calls: List[AssistantToolCall] = Field(default_factory=list)


class ToolMessage(BaseMessage):
    """Message carrying the result of one tool invocation."""

    role: Literal["tool"] = "tool"
    tool_call_id: str
    name: str


ConversationMessage = Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage]
