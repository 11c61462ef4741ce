"""Data models for tool calls reconstructed from a streamed response."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class PendingToolCall:
    """Accumulates the fragments of one tool call, keyed by its call-index.

    ``call_id`` and ``name`` are set once from the first fragment carrying them;
    ``arguments`` grows by concatenation in arrival order.
    """

    index: int
    call_id: Optional[str] = None
    name: Optional[str] = None
    arguments: str = ""

    def merge(self, call_id: Optional[str], name: Optional[str], arguments: Optional[str]) -> None:
        if call_id and self.call_id is None:
            self.call_id = call_id
        if name and self.name is None:
            self.name = name
        if arguments:
            self.arguments += arguments

    @property
    def tool_name(self) -> str:
        return self.name or "unknown"

    @property
    def resolved_id(self) -> str:
        return self.call_id or f"call_{self.index}"


@dataclass(frozen=True)
class ToolCallRequest:
    """A tool call whose arguments decoded successfully and is ready to dispatch."""

    index: int
    call_id: str
    name: str
    arguments: Dict[str, Any]
    raw_arguments: str = ""
