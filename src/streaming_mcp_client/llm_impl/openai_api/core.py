import asyncio
import logging
from types import TracebackType
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Type, Union

from openai import AsyncOpenAI
from mcp.client.stdio import StdioServerParameters

from streaming_mcp_client.llm_core import (
    BaseMessage,
    MAX_RETRIES,
    SessionRegistry,
    ToolDescriptor,
    ToolProvider,
    ToolTurnRunner,
    TurnEvent,
)
from streaming_mcp_client.mcp_wrapper import MCPServerProvider
from .endpoint import OpenAIStreamingLLM

logger = logging.getLogger(__name__)

ServerSpec = Union[StdioServerParameters, ToolProvider]


class McpClient:
    """
    Streams chat completions from an OpenAI-compatible model and executes the
    tools of connected MCP servers on its behalf, one turn at a time.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model_name: str,
        registry: Optional[SessionRegistry] = None,
        max_retries: int = MAX_RETRIES,
        tool_timeout: float = 180.0,
        parallel_tool_calls: bool = True,
        temp: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        """
        Initializes the client.

        Args:
            client: The initialized AsyncOpenAI client (set ``base_url`` for other providers).
            model_name: The model identifier.
            registry: An optional SessionRegistry; a fresh one is created otherwise.
            max_retries: Attempts per turn when tool-call arguments arrive truncated.
            tool_timeout: The maximum time in seconds to wait for a tool execution.
            parallel_tool_calls: Execute independent tool calls of a turn concurrently.
            temp: Optional sampling temperature.
            max_tokens: Optional cap on generated tokens per turn.
        """
        self.model = model_name
        self.registry = registry if registry is not None else SessionRegistry()
        self.endpoint = OpenAIStreamingLLM(client=client, model_name=model_name, temp=temp, max_tokens=max_tokens)
        self._runner = ToolTurnRunner(
            self.endpoint,
            self.registry,
            max_retries=max_retries,
            tool_timeout=tool_timeout,
            parallel_tool_calls=parallel_tool_calls,
        )

    @classmethod
    def from_credentials(
        cls, model_name: str, api_key: str, base_url: Optional[str] = None, **kwargs: Any
    ) -> "McpClient":
        """Builds the AsyncOpenAI client from an API key and optional endpoint URL."""
        return cls(AsyncOpenAI(api_key=api_key, base_url=base_url), model_name, **kwargs)

    @property
    def available_tools(self) -> List[Dict[str, Any]]:
        """The tool catalog in OpenAI ``tools`` format."""
        return self.registry.tool_object

    async def add_mcp_servers(self, servers: Iterable[ServerSpec]) -> None:
        """Connects several servers concurrently."""
        await self.registry.register_many(self._as_provider(s) for s in servers)

    async def add_mcp_server(self, server: ServerSpec) -> List[ToolDescriptor]:
        """Connects one server and publishes its tools.

        Raises:
            ProviderConnectionError: If the server cannot be started or listed.
        """
        return await self.registry.register(self._as_provider(server))

    def log_available_tools(self) -> None:
        logger.info("\n%s", self.registry.describe())

    def process_single_turn_with_tools(
        self,
        messages: List[BaseMessage],
        exit_loop_tools: Optional[Iterable[ToolDescriptor]] = None,
        exit_if_first_chunk_no_tool: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[TurnEvent]:
        """Runs one turn; see ``ToolTurnRunner.process_single_turn_with_tools``."""
        return self._runner.process_single_turn_with_tools(
            messages,
            exit_loop_tools=exit_loop_tools,
            exit_if_first_chunk_no_tool=exit_if_first_chunk_no_tool,
            cancel_event=cancel_event,
        )

    async def cleanup(self) -> None:
        """Closes every MCP session."""
        await self.registry.close_all()

    async def __aenter__(self) -> "McpClient":
        return self

    async def __aexit__(
        self, exc_type: Optional[Type[BaseException]], exc_val: Optional[BaseException], exc_tb: Optional[TracebackType]
    ) -> None:
        await self.cleanup()

    @staticmethod
    def _as_provider(server: ServerSpec) -> ToolProvider:
        if isinstance(server, StdioServerParameters):
            return MCPServerProvider.from_params(server)
        return server
