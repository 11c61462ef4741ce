"""Dispatch of reconstructed tool calls to the provider sessions that own them."""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Collection, List, Mapping, Optional, Sequence

from ...cancellation import raise_if_canceled, run_cancellable
from ...exceptions import InvalidArgumentsError, ToolExecutionError
from ...logger import get_logger
from ...messages import BaseMessage, ToolMessage
from ..models import PendingToolCall, ToolCallRequest
from ..registry import SessionRegistry
from .argument_parser import parse_tool_arguments

logger = get_logger(__name__)


def render_tool_content(blocks: Optional[Sequence[Any]]) -> str:
    """Turn the content blocks of a tool result into the tool message's content.

    The first text block wins. Without any text block, the blocks are described
    with short placeholders.

    Args:
        blocks: Typed content blocks (objects with a ``type`` attribute).

    Returns:
        The text used as tool message content.
    """
    if not blocks:
        return ""

    for block in blocks:
        if getattr(block, "type", None) == "text":
            return str(getattr(block, "text", ""))

    output = []
    for block in blocks:
        block_type = getattr(block, "type", None)
        if block_type == "image":
            output.append(f"[Image: {getattr(block, 'mimeType', 'unknown')}]")
        elif block_type == "resource":
            resource = getattr(block, "resource", None)
            output.append(f"[Resource: {getattr(resource, 'uri', 'unknown')}]")
        else:
            output.append(f"[Unknown content type: {block_type}]")
    return "\n".join(output)


class ToolDispatcher:
    """
    Resolves, executes and records the tool calls of one turn.

    ``prepare`` decodes every pending call before anything is written to the
    transcript; ``dispatch`` then executes the calls and appends their tool
    messages in call-index order.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        *,
        tool_timeout: float = 180.0,
        parallel: bool = True,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            registry: Registry used to resolve the owning session of each tool.
            tool_timeout: Timeout in seconds for a single provider call.
            parallel: Execute independent calls of one turn concurrently.
        """
        self._registry = registry
        self._tool_timeout = tool_timeout
        self._parallel = parallel

    def prepare(self, pending: Mapping[int, PendingToolCall]) -> List[ToolCallRequest]:
        """Decode the arguments of every pending call, in call-index order.

        Calls with malformed arguments are logged and skipped.

        Args:
            pending: The accumulated tool calls, keyed by call-index.

        Returns:
            The calls that are ready for dispatch.

        Raises:
            IncompleteArgumentsError: If any call's arguments were cut off; the
                attempt as a whole is then considered failed.
        """
        requests: List[ToolCallRequest] = []
        for index in sorted(pending):
            call = pending[index]
            try:
                arguments = parse_tool_arguments(call.arguments, call.tool_name)
            except InvalidArgumentsError:
                logger.error(
                    "Failed to parse JSON arguments for tool %s. Arguments: %s", call.tool_name, call.arguments
                )
                continue
            requests.append(
                ToolCallRequest(
                    index=index,
                    call_id=call.resolved_id,
                    name=call.tool_name,
                    arguments=arguments,
                    raw_arguments=call.arguments,
                )
            )
        return requests

    @staticmethod
    def until_exit(requests: Sequence[ToolCallRequest], exit_loop_tools: Collection[str]) -> List[ToolCallRequest]:
        """Drop the calls that follow the first exit-loop tool call.

        Those calls are never executed, so the assistant message must not announce them.

        Args:
            requests: Decoded calls, in call-index order.
            exit_loop_tools: Names of tools that end the turn when called.

        Returns:
            The calls up to and including the first exit-loop call.
        """
        for position, request in enumerate(requests):
            if request.name in exit_loop_tools:
                dropped = [r.name for r in requests[position + 1 :]]
                if dropped:
                    logger.debug("Ignoring tool calls after exit-loop tool '%s': %s", request.name, dropped)
                return list(requests[: position + 1])
        return list(requests)

    async def dispatch(
        self,
        requests: Sequence[ToolCallRequest],
        transcript: List[BaseMessage],
        *,
        exit_loop_tools: Collection[str] = (),
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[ToolMessage]:
        """Execute the calls and append their tool messages to the transcript.

        A call to an exit-loop tool is recorded with empty content and ends the
        dispatch; calls after it are not executed.

        Args:
            requests: Decoded calls, in call-index order.
            transcript: The live conversation, mutated in place.
            exit_loop_tools: Names of tools that end the turn when called.
            cancel_event: The turn's cancellation signal.

        Yields:
            Each tool message, right after it was appended.
        """
        exit_index = next((i for i, r in enumerate(requests) if r.name in exit_loop_tools), None)
        runnable = list(requests if exit_index is None else requests[:exit_index])

        if self._parallel and len(runnable) > 1:
            raise_if_canceled(cancel_event)
            tasks = [asyncio.ensure_future(self.execute(request, cancel_event)) for request in runnable]
            try:
                messages = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                raise
            for message in messages:
                transcript.append(message)
                yield message
        else:
            for request in runnable:
                raise_if_canceled(cancel_event)
                message = await self.execute(request, cancel_event)
                transcript.append(message)
                yield message

        if exit_index is not None:
            request = requests[exit_index]
            logger.debug("Exit-loop tool '%s' called, ending the turn.", request.name)
            message = ToolMessage(tool_call_id=request.call_id, name=request.name, content="")
            transcript.append(message)
            yield message

    async def execute(self, request: ToolCallRequest, cancel_event: Optional[asyncio.Event] = None) -> ToolMessage:
        """Run one call against its owning session.

        Missing sessions and provider failures become tool messages the model can read.

        Args:
            request: The decoded call.
            cancel_event: The turn's cancellation signal, passed to the provider.

        Returns:
            The tool message for the call.

        Raises:
            TurnCanceledError: If the signal fires while the provider call runs.
        """
        session = self._registry.resolve(request.name)
        if session is None:
            logger.warning("No session found for tool '%s'.", request.name)
            return ToolMessage(
                tool_call_id=request.call_id,
                name=request.name,
                content=f"Error: No session found for tool: {request.name}",
            )

        logger.info("Executing tool '%s'...", request.name)
        logger.debug("Tool arguments: %s", request.arguments)
        try:
            result = await asyncio.wait_for(
                run_cancellable(session.call_tool(request.name, request.arguments, cancel_event), cancel_event),
                timeout=self._tool_timeout,
            )
        except asyncio.TimeoutError:
            content = f"Error: Tool execution timed out after {self._tool_timeout} seconds."
            logger.warning("Tool '%s' timed out.", request.name)
        except ToolExecutionError as exc:
            content = f"Error: {exc}"
            logger.warning("Tool '%s' failed: %s", request.name, exc)
        else:
            content = render_tool_content(getattr(result, "content", None))
            if getattr(result, "isError", False):
                logger.warning("Tool '%s' reported an error: %s", request.name, content)

        return ToolMessage(tool_call_id=request.call_id, name=request.name, content=content)
