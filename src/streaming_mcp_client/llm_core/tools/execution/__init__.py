"""Tool argument decoding and dispatch."""

from .argument_parser import parse_tool_arguments, is_truncated
from .dispatcher import ToolDispatcher, render_tool_content

__all__ = ["parse_tool_arguments", "is_truncated", "ToolDispatcher", "render_tool_content"]
