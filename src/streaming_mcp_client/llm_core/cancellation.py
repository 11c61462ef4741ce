"""Cooperative cancellation shared by stream consumption and tool invocation."""

import asyncio
import inspect
from typing import Awaitable, Optional, TypeVar

from .exceptions import TurnCanceledError

T = TypeVar("T")


def raise_if_canceled(cancel_event: Optional[asyncio.Event], what: str = "turn") -> None:
    """Poll the cancellation signal and fail if it fired.

    Args:
        cancel_event: The shared signal, or None when the caller cannot cancel.
        what: Short label used in the error message.

    Raises:
        TurnCanceledError: If the signal is set.
    """
    if cancel_event is not None and cancel_event.is_set():
        raise TurnCanceledError(f"The {what} was canceled.")


async def run_cancellable(
    awaitable: Awaitable[T], cancel_event: Optional[asyncio.Event], what: str = "tool call"
) -> T:
    """Await ``awaitable`` unless the cancellation signal fires first.

    The awaited work runs as its own task; when the signal wins the race the task
    is cancelled and awaited before ``TurnCanceledError`` is raised.

    Args:
        awaitable: The operation to run (e.g. a provider call).
        cancel_event: The shared signal, or None to simply await the operation.
        what: Short label used in the error message.

    Returns:
        The result of the operation.

    Raises:
        TurnCanceledError: If the signal fires before the operation completes.
    """
    if cancel_event is None:
        return await awaitable

    if cancel_event.is_set():
        # Never started, close it so it is not reported as un-awaited
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        raise_if_canceled(cancel_event, what)
    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except BaseException:
        work.cancel()
        raise
    finally:
        waiter.cancel()

    if work.done():
        return work.result()

    work.cancel()
    try:
        await work
    except asyncio.CancelledError:
        pass
    raise TurnCanceledError(f"The {what} was canceled.")
