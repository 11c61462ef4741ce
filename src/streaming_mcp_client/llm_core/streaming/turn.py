"""The single-turn tool orchestration engine."""

from __future__ import annotations

import asyncio
from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Set

from ..base import StreamingLLM
from ..logger import get_logger
from ..messages import BaseMessage
from ..tools.execution import ToolDispatcher
from ..tools.models import ToolDescriptor
from ..tools.registry import SessionRegistry
from .aggregator import StreamAggregator
from .events import StreamFragment, ToolResult, TurnEvent
from .retry import MAX_RETRIES, TurnRetryController

logger = get_logger(__name__)


class ToolTurnRunner:
    """
    Runs one conversation turn: stream the model response, then dispatch its tool calls.

    The caller receives a single lazy sequence of events: every raw chunk as it
    arrives (``StreamFragment``) followed by every tool message as it is recorded
    (``ToolResult``). The caller-owned transcript gains exactly one assistant message
    and the tool messages of the turn, or nothing when the turn exits early, fails
    or is canceled.
    """

    def __init__(
        self,
        endpoint: StreamingLLM,
        registry: SessionRegistry,
        *,
        max_retries: int = MAX_RETRIES,
        tool_timeout: float = 180.0,
        parallel_tool_calls: bool = True,
        base_retry_delay: float = 0.0,
    ) -> None:
        """Initialize the runner.

        Args:
            endpoint: The model streaming endpoint.
            registry: The registry owning the tool-provider sessions.
            max_retries: Attempts allowed when tool-call arguments come back truncated.
            tool_timeout: Timeout in seconds for a single tool call.
            parallel_tool_calls: Execute independent tool calls of one turn concurrently.
            base_retry_delay: Delay before the first retry, doubled on each further retry.
        """
        self.endpoint = endpoint
        self.registry = registry
        self._dispatcher = ToolDispatcher(registry, tool_timeout=tool_timeout, parallel=parallel_tool_calls)
        self._retry = TurnRetryController(max_retries=max_retries, base_retry_delay=base_retry_delay)

    def build_tools(self, exit_loop_tools: Iterable[ToolDescriptor] = ()) -> List[Dict[str, Any]]:
        """The tools advertised for a turn: exit-loop tools first, then the registry catalog."""
        return [tool.to_openai_tool() for tool in exit_loop_tools] + self.registry.tool_object

    async def process_single_turn_with_tools(
        self,
        messages: List[BaseMessage],
        *,
        exit_loop_tools: Optional[Iterable[ToolDescriptor]] = None,
        exit_if_first_chunk_no_tool: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[TurnEvent]:
        """
        Process a single turn, yielding stream and tool-result events.

        Args:
            messages: The transcript; mutated in place once the turn succeeds.
            exit_loop_tools: Tools that end the turn (and typically the agent loop) when called.
            exit_if_first_chunk_no_tool: Stop reading the stream when the first chunks
                carry no tool call.
            cancel_event: Cooperative cancellation signal for the turn.

        Yields:
            ``StreamFragment`` for each chunk, ``ToolResult`` for each tool message.

        Raises:
            IncompleteResponseError: If every attempt streamed truncated tool arguments.
            TurnCanceledError: If the signal fired; the transcript is left as it was.
            Exception: Any other endpoint or session failure propagates unchanged, and the
                transcript is left as it was.
        """
        logger.debug("start of single turn")
        exit_tools = list(exit_loop_tools or [])
        tools = self.build_tools(exit_tools)
        exit_names = {tool.name for tool in exit_tools}

        def attempt(number: int) -> AsyncIterator[TurnEvent]:
            logger.debug("Turn attempt %d", number)
            return self._run_attempt(messages, tools, exit_names, exit_if_first_chunk_no_tool, cancel_event)

        async for event in self._retry.run(attempt):
            yield event

    async def _run_attempt(
        self,
        messages: List[BaseMessage],
        tools: List[Dict[str, Any]],
        exit_names: Set[str],
        exit_if_first_chunk_no_tool: bool,
        cancel_event: Optional[asyncio.Event],
    ) -> AsyncIterator[TurnEvent]:
        aggregator = StreamAggregator(exit_if_first_chunk_no_tool=exit_if_first_chunk_no_tool)

        stream = self.endpoint.stream(messages, tools=tools or None, tool_choice="auto", cancel_event=cancel_event)
        async with aclosing(stream), aclosing(aggregator.consume(stream, cancel_event)) as chunks:
            async for chunk in chunks:
                yield StreamFragment(chunk)

        if aggregator.exited_early:
            return

        # Decode everything before touching the transcript, so a truncated
        # payload leaves no trace of this attempt.
        requests = self._dispatcher.prepare(aggregator.pending)
        # Calls after an exit-loop tool are never run, so they are not recorded either
        requests = self._dispatcher.until_exit(requests, exit_names)

        start = len(messages)
        messages.append(aggregator.build_message(requests))
        try:
            async for message in self._dispatcher.dispatch(
                requests, messages, exit_loop_tools=exit_names, cancel_event=cancel_event
            ):
                yield ToolResult(message)
        except BaseException:
            # A turn that did not finish dispatching leaves the transcript as it was
            del messages[start:]
            raise
