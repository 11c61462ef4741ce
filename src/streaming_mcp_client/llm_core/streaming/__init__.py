"""Streaming turn processing: aggregation, retry and the turn runner."""

from .events import StreamChunk, StreamFragment, ToolResult, TurnEvent
from .aggregator import StreamAggregator
from .retry import MAX_RETRIES, TurnRetryController
from .turn import ToolTurnRunner

__all__ = [
    "StreamChunk",
    "StreamFragment",
    "ToolResult",
    "TurnEvent",
    "StreamAggregator",
    "MAX_RETRIES",
    "TurnRetryController",
    "ToolTurnRunner",
]
