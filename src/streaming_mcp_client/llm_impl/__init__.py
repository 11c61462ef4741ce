"""Provider-specific implementations."""

from .openai_api import McpClient, OpenAIStreamingLLM, OpenAIMessageAdapter

__all__ = ["McpClient", "OpenAIStreamingLLM", "OpenAIMessageAdapter"]
