"""Session registry: routes tool names to the provider session that owns them."""

import asyncio
import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..models import ToolDescriptor
from ..session import ToolProvider, ToolSession
from ..schema import SchemaValidator
from ...exceptions import ProviderConnectionError, SessionCloseError, ToolRegistrationError
from ...logger import get_logger

logger = get_logger(__name__)


class SessionRegistry:
    """
    A central registry of connected tool-provider sessions.

    Sessions live in an arena keyed by an integer id; an index maps every advertised
    tool name to the id of the session that can execute it, and a catalog keeps the
    descriptor published for each name. Several tool names may share one session.

    Registration is safe to run concurrently for many providers: connecting and
    listing tools happens outside the lock, publishing a provider's tools is a single
    locked step, so a provider contributes all of its tools or none.
    """

    def __init__(self, reject_duplicates: bool = False) -> None:
        """Initialize the SessionRegistry.

        Args:
            reject_duplicates: Reject a provider whose tool names are already taken,
                instead of letting the latest registration win.
        """
        self.reject_duplicates = reject_duplicates
        self._sessions: Dict[int, ToolSession] = {}
        self._routes: Dict[str, int] = {}
        self._descriptors: Dict[str, ToolDescriptor] = {}
        self._next_id = 0
        self._lock = asyncio.Lock()

    async def register(self, provider: ToolProvider) -> List[ToolDescriptor]:
        """
        Connect a tool provider and publish its tools.

        Args:
            provider: The provider to connect.

        Returns:
            The descriptors contributed by the provider.

        Raises:
            ProviderConnectionError: If connecting or listing the provider's tools fails.
            ToolRegistrationError: If duplicates are rejected and a tool name is taken.
        """
        provider_name = getattr(provider, "name", repr(provider))
        try:
            session = await provider.connect()
        except ProviderConnectionError:
            raise
        except Exception as e:
            msg = f"Failed to connect to tool provider '{provider_name}': {e}"
            logger.error(msg)
            raise ProviderConnectionError(msg) from e

        try:
            raw_descriptors = list(await session.list_tools())
            descriptors = [
                d.model_copy(update={"parameters": SchemaValidator.prepare_parameters(d.parameters, d.name)})
                for d in raw_descriptors
            ]
        except Exception as e:
            await self._discard(session, provider_name)
            msg = f"Failed to list tools of provider '{provider_name}': {e}"
            logger.error(msg)
            raise ProviderConnectionError(msg) from e

        try:
            await self.add_session(session, descriptors)
        except ToolRegistrationError:
            await self._discard(session, provider_name)
            raise

        logger.info("Connected to server '%s' with tools: %s", provider_name, [d.name for d in descriptors])
        return descriptors

    async def register_many(self, providers: Iterable[ToolProvider]) -> List[ToolDescriptor]:
        """Register several providers concurrently.

        Args:
            providers: The providers to connect.

        Returns:
            All contributed descriptors, in provider order.

        Raises:
            ProviderConnectionError: The first registration failure; the other providers
                still complete their own registration.
        """
        results = await asyncio.gather(*(self.register(p) for p in providers), return_exceptions=True)
        descriptors: List[ToolDescriptor] = []
        first_error: Optional[BaseException] = None
        for result in results:
            if isinstance(result, BaseException):
                first_error = first_error or result
                continue
            descriptors.extend(result)
        if first_error is not None:
            raise first_error
        return descriptors

    async def add_session(self, session: ToolSession, descriptors: Iterable[ToolDescriptor]) -> int:
        """Publish an already connected session and its descriptors.

        Args:
            session: The connected session.
            descriptors: The tools routed to this session.

        Returns:
            The arena id of the session.

        Raises:
            ToolRegistrationError: If duplicates are rejected and a tool name is taken.
        """
        descriptors = list(descriptors)
        async with self._lock:
            taken = [d.name for d in descriptors if d.name in self._routes]
            if taken and self.reject_duplicates:
                msg = f"Tool name(s) already registered: {taken}"
                logger.error(msg)
                raise ToolRegistrationError(msg)

            session_id = self._next_id
            self._next_id += 1
            self._sessions[session_id] = session

            for descriptor in descriptors:
                if descriptor.name in self._routes:
                    logger.warning(
                        "Tool '%s' is already registered; routing it to the newest provider.", descriptor.name
                    )
                    # Keep the catalog ordered by the winning registration
                    self._descriptors.pop(descriptor.name, None)
                self._routes[descriptor.name] = session_id
                self._descriptors[descriptor.name] = descriptor
        return session_id

    def resolve(self, tool_name: str) -> Optional[ToolSession]:
        """Returns the session that owns ``tool_name``, or None."""
        session_id = self._routes.get(tool_name)
        if session_id is None:
            return None
        return self._sessions.get(session_id)

    def catalog(self) -> List[ToolDescriptor]:
        """Returns every published descriptor, in registration order."""
        return list(self._descriptors.values())

    @property
    def tool_object(self) -> List[Dict[str, Any]]:
        """The catalog in the OpenAI chat-completions ``tools`` format."""
        return [descriptor.to_openai_tool() for descriptor in self._descriptors.values()]

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self._routes

    def __len__(self) -> int:
        return len(self._descriptors)

    def describe(self) -> str:
        """Human-readable listing of the available tools."""
        lines = ["=== Available MCP Tools ==="]
        for tool in self._descriptors.values():
            lines.append(f"Tool: {tool.name}")
            lines.append(f"Description: {tool.description}")
            lines.append(f"Parameters: {json.dumps(tool.parameters, indent=2)}")
            lines.append("---")
        lines.append("=========================")
        return "\n".join(lines)

    async def close_all(self) -> None:
        """
        Close every distinct session exactly once.

        Every session is attempted even if some fail; failures are collected.

        Raises:
            SessionCloseError: If at least one session failed to close.
        """
        async with self._lock:
            sessions: List[Tuple[int, ToolSession]] = list(self._sessions.items())
            self._sessions.clear()
            self._routes.clear()
            self._descriptors.clear()

        results = await asyncio.gather(*(session.close() for _, session in sessions), return_exceptions=True)
        errors: List[BaseException] = []
        for (session_id, _), result in zip(sessions, results):
            if isinstance(result, BaseException):
                logger.error("Failed to close session %d: %s", session_id, result)
                errors.append(result)

        if errors:
            raise SessionCloseError(errors)
        logger.debug("Closed %d session(s).", len(sessions))

    @staticmethod
    async def _discard(session: ToolSession, provider_name: str) -> None:
        try:
            await session.close()
        except Exception as e:
            logger.error("Failed to close session of provider '%s' after a failed registration: %s", provider_name, e)
