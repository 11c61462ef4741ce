"""Protocols describing tool providers and the sessions they open."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Protocol, Sequence

from .models import ToolDescriptor


class ToolResultLike(Protocol):
    """Result of a tool call: a sequence of typed content blocks."""

    content: Sequence[Any]


class ToolSession(Protocol):
    """
    A connected, long-lived session with one tool-provider process.
    """

    async def list_tools(self) -> Sequence[ToolDescriptor]:
        """Returns the descriptors of every tool the provider advertises."""
        ...

    async def call_tool(
        self, name: str, arguments: Dict[str, Any], cancel_event: Optional[asyncio.Event] = None
    ) -> ToolResultLike:
        """Executes a tool; the cancellation signal is passed through to the provider call."""
        ...

    async def close(self) -> None:
        """Terminates the session and the provider process."""
        ...


class ToolProvider(Protocol):
    """Something that can be connected to yield a ToolSession."""

    @property
    def name(self) -> str:
        """A label used in logs and errors."""
        ...

    async def connect(self) -> ToolSession:
        """Starts the provider and returns an initialized session."""
        ...
