"""MCP-backed tool providers."""

from .wrapper import MCPServerProvider, MCPToolSession

__all__ = ["MCPServerProvider", "MCPToolSession"]
