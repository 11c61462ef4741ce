"""Events yielded to the caller while a turn is processed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

from openai.types.chat import ChatCompletionChunk

from ..messages import ToolMessage

# Chunks follow the OpenAI chat-completions streaming shape.
StreamChunk = ChatCompletionChunk


@dataclass(frozen=True)
class StreamFragment:
    """A raw chunk of the model response, forwarded unchanged for live display."""

    chunk: StreamChunk
    kind: Literal["stream_fragment"] = field(default="stream_fragment", init=False)


@dataclass(frozen=True)
class ToolResult:
    """A tool message that was just appended to the transcript."""

    message: ToolMessage
    kind: Literal["tool_result"] = field(default="tool_result", init=False)


TurnEvent = Union[StreamFragment, ToolResult]
