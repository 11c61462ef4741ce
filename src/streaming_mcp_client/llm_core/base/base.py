"""Core abstraction for model streaming endpoints."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from ..messages import BaseMessage


class StreamingLLM(ABC):
    """Abstract base class for a model endpoint that streams chat completions.

    Implementations turn the provider-agnostic transcript into the provider's
    request format and return the response as a lazy sequence of chunks. Transport
    and authentication errors propagate unmodified.
    """

    model: str

    @abstractmethod
    def stream(
        self,
        messages: Sequence[BaseMessage],
        *,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: str = "auto",
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[Any]:
        """
        Opens a streamed completion for one turn.

        Args:
            messages: The conversation so far, in order.
            tools: The tool catalog in OpenAI ``tools`` format.
            tool_choice: The tool-choice mode sent to the model.
            cancel_event: The turn's cancellation signal. Waiting for the response and
                for each chunk stops with ``TurnCanceledError`` once it is set.

        Returns:
            An async generator of chunks; closing it releases the underlying response.
        """
        pass
