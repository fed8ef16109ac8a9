import asyncio
import logging

from enum import Enum

from a2a_runtime.types import (
    JSONRPCError,
    TaskArtifactUpdateEvent,
    TaskStatusUpdateEvent,
)
from a2a_runtime.utils.telemetry import SpanKind, trace_class


logger = logging.getLogger(__name__)


Event = TaskStatusUpdateEvent | TaskArtifactUpdateEvent | JSONRPCError
"""Type alias for events delivered to task subscribers."""


class OverflowPolicy(str, Enum):
    """What a bounded queue does with an event that does not fit."""

    DROP = 'drop'
    DISCONNECT = 'disconnect'


@trace_class(kind=SpanKind.SERVER)
class EventQueue:
    """Channel delivering one task's events to a single subscriber.

    Producers never wait on it: `enqueue_event` is synchronous. By default the
    queue is unbounded. With ``max_size > 0`` a full queue either drops the
    new event or, under `OverflowPolicy.DISCONNECT`, closes itself and is
    flagged as overflowed so its consumer can report the lost events.
    """

    def __init__(
        self,
        max_size: int = 0,
        overflow: OverflowPolicy = OverflowPolicy.DROP,
    ) -> None:
        self.queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=max_size)
        self.overflow = overflow
        self._is_closed = False
        self._overflowed = False
        logger.debug('EventQueue initialized.')

    def enqueue_event(self, event: Event) -> None:
        if self._is_closed:
            logger.warning('Queue is closed. Event will not be enqueued.')
            return
        logger.debug(f'Enqueuing event of type: {type(event)}')
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            if self.overflow is OverflowPolicy.DISCONNECT:
                logger.warning(
                    'Subscriber queue full (%d events), disconnecting.',
                    self.queue.maxsize,
                )
                self._overflowed = True
                self.close()
            else:
                logger.warning(
                    'Subscriber queue full (%d events), dropping %s.',
                    self.queue.maxsize,
                    type(event).__name__,
                )

    async def dequeue_event(self, no_wait: bool = False) -> Event:
        """Dequeues the next event.

        Args:
            no_wait: If True, raise `asyncio.QueueEmpty` instead of waiting
                when no event is available.
        """
        if no_wait:
            return self.queue.get_nowait()
        return await self.queue.get()

    def task_done(self) -> None:
        self.queue.task_done()

    def close(self) -> None:
        """Stops accepting events. Already queued events remain readable."""
        if not self._is_closed:
            logger.debug('Closing EventQueue.')
        self._is_closed = True

    def is_closed(self) -> bool:
        return self._is_closed

    def is_overflowed(self) -> bool:
        return self._overflowed
