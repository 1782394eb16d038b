"""
Bounded single-producer/single-consumer event channel.

The Response Collector owns the sending end and the Test Driver owns the
receiving end. Both ends are plain values handed to their owners; there is
no module-level queue.

Key behaviors:
- send() suspends while the channel is full (the only backpressure in a run)
- recv() returns events in the order they were sent
- closing the sender lets the receiver drain what is left, then recv() raises
- closing the receiver makes any pending or future send() raise
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from lotus.core.errors import ChannelClosedError

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 32


@dataclass
class _ChannelState:
    queue: asyncio.Queue[Any]
    sender_closed: asyncio.Event = field(default_factory=asyncio.Event)
    receiver_closed: asyncio.Event = field(default_factory=asyncio.Event)


async def _race(
    operation: asyncio.Future[Any], closed: asyncio.Event, timeout: float | None
) -> bool:
    """Wait for operation or closed. Returns True if the operation finished."""
    closed_waiter = asyncio.ensure_future(closed.wait())
    try:
        done, _ = await asyncio.wait(
            {operation, closed_waiter},
            timeout=timeout,
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        closed_waiter.cancel()
    if operation in done:
        return True
    operation.cancel()
    if not done:
        raise TimeoutError(f"No event within {timeout} seconds")
    return False


class EventSender:
    """Sending end of the channel."""

    def __init__(self, state: _ChannelState) -> None:
        self._state = state

    @property
    def closed(self) -> bool:
        return self._state.sender_closed.is_set()

    async def send(self, event: Any) -> None:
        """Enqueue an event, suspending while the channel is full."""
        if self._state.receiver_closed.is_set():
            raise ChannelClosedError("The receiving end of the event channel is closed")
        if self.closed:
            raise ChannelClosedError("The sending end of the event channel is closed")

        put = asyncio.ensure_future(self._state.queue.put(event))
        if not await _race(put, self._state.receiver_closed, None):
            raise ChannelClosedError("The receiving end of the event channel is closed")
        logger.debug("Queued event (%d pending)", self._state.queue.qsize())

    def close(self) -> None:
        self._state.sender_closed.set()


class EventReceiver:
    """Receiving end of the channel."""

    def __init__(self, state: _ChannelState) -> None:
        self._state = state

    @property
    def closed(self) -> bool:
        return self._state.receiver_closed.is_set()

    async def recv(self, timeout: float | None = None) -> Any:
        """
        Return the next event.

        Raises:
            ChannelClosedError: the sender closed and no events are left,
                or this end was closed.
            TimeoutError: timeout elapsed before an event arrived.
        """
        if self.closed:
            raise ChannelClosedError("The receiving end of the event channel is closed")

        queue = self._state.queue
        if not queue.empty():
            return queue.get_nowait()
        if self._state.sender_closed.is_set():
            raise ChannelClosedError("The sending end of the event channel is closed")

        get = asyncio.ensure_future(queue.get())
        if await _race(get, self._state.sender_closed, timeout):
            return get.result()

        # The sender closed while we were waiting; hand out anything that
        # slipped in before the close.
        if not queue.empty():
            return queue.get_nowait()
        raise ChannelClosedError("The sending end of the event channel is closed")

    def close(self) -> None:
        self._state.receiver_closed.set()


def open_channel(capacity: int = DEFAULT_CAPACITY) -> tuple[EventSender, EventReceiver]:
    """Create a bounded channel and return its two ends."""
    if capacity < 1:
        raise ValueError("Channel capacity must be at least 1")
    state = _ChannelState(queue=asyncio.Queue(maxsize=capacity))
    return EventSender(state), EventReceiver(state)
