import asyncio
import inspect
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Iterable, cast

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionChunk

from streaming_mcp_client.llm_core import StreamingLLM, run_cancellable
from streaming_mcp_client.llm_core.messages import BaseMessage
from .adapter import OpenAIMessageAdapter

logger = logging.getLogger(__name__)


class OpenAIStreamingLLM(StreamingLLM):
    """
    Streams chat completions from an OpenAI-compatible endpoint.

    Any server speaking the chat-completions protocol works (OpenAI, vLLM,
    Hugging Face inference endpoints) through ``AsyncOpenAI(base_url=...)``.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model_name: str,
        temp: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        """
        Args:
            client: The initialized AsyncOpenAI client.
            model_name: The model identifier sent with every request.
            temp: Optional sampling temperature.
            max_tokens: Optional cap on generated tokens.
        """
        self.client = client
        self.model = model_name
        self.temperature = temp
        self.max_tokens = max_tokens

    async def stream(
        self,
        messages: Sequence[BaseMessage],
        *,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: str = "auto",
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[ChatCompletionChunk]:
        """Open a streamed completion and yield its chunks.

        The request and every wait for the next chunk are raced against ``cancel_event``.
        The response is closed when the generator is closed, including on early exit
        and cancellation.

        Raises:
            TurnCanceledError: If the signal fires while waiting on the model.
        """
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": cast(Iterable[Any], OpenAIMessageAdapter.to_openai_messages(messages)),
            "stream": True,
        }
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = tool_choice
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        if self.max_tokens is not None:
            kwargs["max_tokens"] = self.max_tokens

        logger.debug("Opening stream for model '%s' with %d message(s).", self.model, len(messages))
        response = await run_cancellable(self.client.chat.completions.create(**kwargs), cancel_event, "request")
        try:
            chunks = response.__aiter__()
            while True:
                try:
                    chunk = await run_cancellable(chunks.__anext__(), cancel_event, "stream")
                except StopAsyncIteration:
                    break
                yield chunk
        finally:
            close = getattr(response, "close", None)
            if close is not None:
                result = close()
                if inspect.isawaitable(result):
                    await result
