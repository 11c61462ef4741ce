"""Expose the OpenAI-compatible streaming endpoint and the MCP client facade."""

from .adapter import OpenAIMessageAdapter
from .endpoint import OpenAIStreamingLLM
from .core import McpClient

__all__ = ["OpenAIMessageAdapter", "OpenAIStreamingLLM", "McpClient"]
