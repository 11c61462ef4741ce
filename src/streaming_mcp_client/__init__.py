"""Streaming MCP client - let a streamed LLM call tools from MCP servers, one turn at a time."""

from .llm_core import (
    BaseMessage,
    UserMessage,
    AssistantMessage,
    SystemMessage,
    ToolMessage,
    ToolDescriptor,
    SessionRegistry,
    StreamAggregator,
    StreamFragment,
    ToolResult,
    ToolTurnRunner,
    TurnEvent,
    MAX_RETRIES,
)
from .llm_impl.openai_api import McpClient, OpenAIStreamingLLM
from .mcp_wrapper import MCPServerProvider, MCPToolSession
from .agent import Agent
from .config import ClientSettings, ServerConfig

__all__ = [
    "BaseMessage",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ToolMessage",
    "ToolDescriptor",
    "SessionRegistry",
    "StreamAggregator",
    "StreamFragment",
    "ToolResult",
    "ToolTurnRunner",
    "TurnEvent",
    "MAX_RETRIES",
    "McpClient",
    "OpenAIStreamingLLM",
    "MCPServerProvider",
    "MCPToolSession",
    "Agent",
    "ClientSettings",
    "ServerConfig",
]
