"""Reconstruction of assistant content and tool calls from streamed chunks."""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Dict, List, Optional

from ..cancellation import raise_if_canceled
from ..logger import get_logger
from ..messages import AssistantMessage, AssistantToolCall
from ..tools.models import PendingToolCall, ToolCallRequest

logger = get_logger(__name__)


class StreamAggregator:
    """
    Folds the chunks of one response into assistant text and pending tool calls.

    Text deltas are appended to the content; tool-call fragments are grouped by
    their call-index, where the id and name are set once and argument fragments
    are concatenated exactly in arrival order. Chunks without a delta (heartbeats,
    usage-only chunks) are counted and otherwise ignored.

    Attributes:
        role: The first non-empty role marker seen, if any.
        content: The accumulated text.
        pending: The in-progress tool calls keyed by call-index.
        chunk_count: Number of chunks fed so far.
    """

    def __init__(self, exit_if_first_chunk_no_tool: bool = False) -> None:
        self.exit_if_first_chunk_no_tool = exit_if_first_chunk_no_tool
        self.role: Optional[str] = None
        self.content: str = ""
        self.pending: Dict[int, PendingToolCall] = {}
        self.chunk_count = 0
        self.exited_early = False

    async def consume(
        self, stream: AsyncIterator[Any], cancel_event: Optional[asyncio.Event] = None
    ) -> AsyncIterator[Any]:
        """Aggregate a stream while re-emitting every raw chunk unchanged.

        The cancellation signal is polled once per chunk arrival. With the fast path
        enabled, consumption stops as soon as the first chunks show no tool call.

        Args:
            stream: The lazy, non-restartable chunk sequence of one response.
            cancel_event: The turn's cancellation signal.

        Yields:
            Each chunk, before it is merged.

        Raises:
            TurnCanceledError: If the signal fired.
        """
        async for chunk in stream:
            raise_if_canceled(cancel_event)
            yield chunk
            logger.debug("Received chunk %d: %s", self.chunk_count + 1, chunk)
            self.feed(chunk)
            if self.should_exit_early():
                logger.debug("No tool call in the first chunk(s), leaving the stream early.")
                self.exited_early = True
                return

    def feed(self, chunk: Any) -> None:
        """Merge one chunk into the aggregate.

        Args:
            chunk: An OpenAI-shaped streaming chunk.
        """
        self.chunk_count += 1
        choices = getattr(chunk, "choices", None)
        if not choices:
            return
        delta = getattr(choices[0], "delta", None)
        if delta is None:
            return

        if delta.role and self.role is None:
            self.role = delta.role
        if delta.content:
            self.content += delta.content

        for fragment in delta.tool_calls or []:
            call = self.pending.get(fragment.index)
            if call is None:
                call = self.pending[fragment.index] = PendingToolCall(index=fragment.index)
            function = fragment.function
            call.merge(
                call_id=fragment.id,
                name=function.name if function else None,
                arguments=function.arguments if function else None,
            )

    def should_exit_early(self) -> bool:
        """Whether the fast path applies: one of the first two chunks seen and still no tool call."""
        return self.exit_if_first_chunk_no_tool and self.chunk_count <= 2 and not self.pending

    def build_message(self, requests: Optional[List[ToolCallRequest]] = None) -> AssistantMessage:
        """Build the assistant message for the transcript.

        Args:
            requests: The decoded calls to attach. Defaults to every pending call.

        Returns:
            The reconstructed assistant message.
        """
        if requests is None:
            tool_calls = [
                AssistantToolCall(id=call.resolved_id, name=call.tool_name, arguments=call.arguments)
                for _, call in sorted(self.pending.items())
            ]
        else:
            tool_calls = [
                AssistantToolCall(id=request.call_id, name=request.name, arguments=request.raw_arguments)
                for request in requests
            ]
        return AssistantMessage(content=self.content, tool_calls=tool_calls)
