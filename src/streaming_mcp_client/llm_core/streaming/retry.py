"""Bounded retry of whole turns whose tool-call arguments were truncated."""

import asyncio
from typing import AsyncIterator, Callable, TypeVar

from ..exceptions import IncompleteArgumentsError, IncompleteResponseError
from ..logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3


class TurnRetryController:
    """
    Re-runs a turn attempt when the model streamed a tool call whose arguments never closed.

    Only ``IncompleteArgumentsError`` is retried. Every other error, cancellation
    included, propagates from the attempt that raised it. Each retry starts a fresh
    attempt; an attempt is expected to leave no trace in the transcript when it fails.
    """

    def __init__(self, max_retries: int = MAX_RETRIES, base_retry_delay: float = 0.0) -> None:
        """
        Args:
            max_retries: Total number of attempts before giving up.
            base_retry_delay: Initial delay in seconds between attempts, doubled each time.
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1.")
        self.max_retries = max_retries
        self.base_retry_delay = base_retry_delay

    async def run(self, attempt_factory: Callable[[int], AsyncIterator[T]]) -> AsyncIterator[T]:
        """
        Drive attempts until one completes.

        Args:
            attempt_factory: Builds the event stream of attempt ``n`` (1-based).

        Yields:
            The events of every attempt, as they are produced.

        Raises:
            IncompleteResponseError: If all attempts ended with truncated arguments.
        """
        delay = self.base_retry_delay
        for attempt in range(1, self.max_retries + 1):
            try:
                async for event in attempt_factory(attempt):
                    yield event
                return
            except IncompleteArgumentsError as e:
                logger.error(
                    "Attempt %d/%d: Received incomplete JSON response from the model (tool '%s').",
                    attempt,
                    self.max_retries,
                    e.tool_name,
                )
                if attempt >= self.max_retries:
                    raise IncompleteResponseError(attempt) from e

            logger.info("Retrying...")
            if delay > 0:
                await asyncio.sleep(delay)
                delay *= 2  # Exponential backoff
