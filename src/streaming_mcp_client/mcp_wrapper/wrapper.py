"""Tool-provider sessions backed by MCP servers launched over stdio."""

import asyncio
import logging
import os
from contextlib import AsyncExitStack
from typing import Any, Dict, List, Optional

import anyio
from mcp import ClientSession
from mcp.client.stdio import stdio_client, StdioServerParameters
from mcp.shared.exceptions import McpError
from mcp.types import CallToolResult, Tool as MCPTool

from streaming_mcp_client.llm_core import ToolDescriptor, ToolExecutionError
from streaming_mcp_client.llm_core import run_cancellable

logger = logging.getLogger(__name__)

__all__ = ["MCPServerProvider", "MCPToolSession"]

# Raised by the stdio streams once the server process has gone away
TRANSPORT_ERRORS = (anyio.ClosedResourceError, anyio.BrokenResourceError, anyio.EndOfStream)


class MCPToolSession:
    """A connected MCP client session.

    The stdio transport and the ``ClientSession`` are entered and exited by one
    owner task, so the session can be opened and closed from different tasks.
    """

    def __init__(self, server_params: StdioServerParameters, name: str = "mcp"):
        self.name = name
        self._server_params = server_params
        self._session: Optional[ClientSession] = None
        self._ready: Optional["asyncio.Future[None]"] = None
        self._closing = asyncio.Event()
        self._task: Optional["asyncio.Task[None]"] = None

    @property
    def connected(self) -> bool:
        return self._session is not None

    async def start(self) -> "MCPToolSession":
        """Launches the server process and initializes the session.

        Returns:
            The initialized session.

        Raises:
            Exception: Whatever the transport or the MCP handshake raised.
        """
        logger.debug("Initializing MCP client session for '%s'...", self.name)
        self._ready = asyncio.get_running_loop().create_future()
        self._task = asyncio.create_task(self._run(), name=f"mcp-session-{self.name}")
        try:
            await self._ready
        except BaseException:
            self._closing.set()
            await asyncio.gather(self._task, return_exceptions=True)
            raise
        logger.info("MCP client session '%s' initialized successfully.", self.name)
        return self

    async def _run(self) -> None:
        assert self._ready is not None
        try:
            async with AsyncExitStack() as stack:
                read, write = await stack.enter_async_context(stdio_client(self._server_params))
                session = await stack.enter_async_context(ClientSession(read, write))
                await session.initialize()
                self._session = session
                if not self._ready.done():
                    self._ready.set_result(None)
                await self._closing.wait()
        except Exception as e:
            if not self._ready.done():
                self._ready.set_exception(e)
                return
            raise
        finally:
            self._session = None

    async def list_tools(self) -> List[ToolDescriptor]:
        """Fetches the server's tools as descriptors.

        Raises:
            RuntimeError: If the session is not connected.
        """
        session = self._require_session()
        logger.debug("Fetching tools from MCP server '%s'...", self.name)
        result = await session.list_tools()
        logger.info("Found %d tools from MCP server '%s'.", len(result.tools), self.name)
        return [self._to_descriptor(tool) for tool in result.tools]

    async def call_tool(
        self, name: str, arguments: Dict[str, Any], cancel_event: Optional[asyncio.Event] = None
    ) -> CallToolResult:
        """Executes a tool on the server.

        Args:
            name: Tool name.
            arguments: Decoded arguments object.
            cancel_event: Signal that aborts the pending request when set.

        Returns:
            The raw MCP result.

        Raises:
            ToolExecutionError: If the server answers with a protocol error, is not
                connected any more, or its transport broke.
            TurnCanceledError: If the signal fires first.
        """
        session = self._session
        if session is None:
            raise ToolExecutionError(f"MCP server '{self.name}' is not connected; tool '{name}' cannot run.")
        logger.info("Delegating tool '%s' to MCP Server '%s'...", name, self.name)
        try:
            return await run_cancellable(session.call_tool(name, arguments=arguments), cancel_event)
        except McpError as e:
            raise ToolExecutionError(f"MCP tool '{name}' failed: {e}") from e
        except TRANSPORT_ERRORS as e:
            logger.error("Lost connection to MCP server '%s' while running tool '%s'.", self.name, name)
            raise ToolExecutionError(
                f"MCP server '{self.name}' connection lost while running tool '{name}': {type(e).__name__}"
            ) from e

    async def close(self) -> None:
        """Cleanly closes the session and stops the server process."""
        if self._task is None:
            return
        logger.debug("Closing MCP client session '%s'...", self.name)
        self._closing.set()
        task, self._task = self._task, None
        await task
        logger.info("MCP client session '%s' closed.", self.name)

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError(f"MCP session '{self.name}' is not connected.")
        return self._session

    @staticmethod
    def _to_descriptor(tool: MCPTool) -> ToolDescriptor:
        # Ensure a description is present; some models reject empty ones.
        description = tool.description or f"Tool {tool.name} provided by MCP server."
        return ToolDescriptor(name=tool.name, description=description, parameters=dict(tool.inputSchema or {}))


class MCPServerProvider:
    """Launch parameters of one MCP server, connectable into a ``MCPToolSession``."""

    def __init__(
        self,
        command: str,
        args: Optional[List[str]] = None,
        env: Optional[Dict[str, str]] = None,
        name: Optional[str] = None,
    ):
        """Initializes the provider with parameters for the MCP server process.

        The parent's ``PATH`` is merged into ``env`` so commands like ``npx`` resolve.

        Args:
            command: The command to run the server.
            args: List of arguments for the command.
            env: Optional dictionary of environment variables.
            name: Label for logs; defaults to the command line.
        """
        args = list(args or [])
        merged_env = {**(env or {}), "PATH": os.environ.get("PATH", "")}
        self.server_params = StdioServerParameters(command=command, args=args, env=merged_env)
        self._name = name or " ".join([command, *args])

    @property
    def name(self) -> str:
        return self._name

    @classmethod
    def from_params(cls, params: StdioServerParameters, name: Optional[str] = None) -> "MCPServerProvider":
        return cls(command=params.command, args=list(params.args), env=params.env, name=name)

    async def connect(self) -> MCPToolSession:
        """Starts the server and returns the initialized session."""
        session = MCPToolSession(self.server_params, name=self.name)
        return await session.start()
