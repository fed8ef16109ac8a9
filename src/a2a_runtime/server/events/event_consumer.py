import asyncio
import logging

from collections.abc import AsyncGenerator

from a2a_runtime.server.events.event_queue import Event, EventQueue
from a2a_runtime.types import (
    InternalError,
    JSONRPCError,
    TaskStatusUpdateEvent,
)
from a2a_runtime.utils.telemetry import SpanKind, trace_class


logger = logging.getLogger(__name__)


def is_final_event(event: Event) -> bool:
    """True for events that end a stream: final status updates and errors."""
    return isinstance(event, JSONRPCError) or (
        isinstance(event, TaskStatusUpdateEvent) and event.final
    )


@trace_class(kind=SpanKind.SERVER)
class EventConsumer:
    """Reads the events of one subscriber queue as an async stream."""

    def __init__(self, queue: EventQueue, poll_interval: float = 0.5):
        """Initializes the EventConsumer.

        Args:
            queue: The `EventQueue` to consume.
            poll_interval: Seconds between checks for a closed queue while
                waiting for the next event.
        """
        self.queue = queue
        self._timeout = poll_interval
        logger.debug('EventConsumer initialized')

    async def consume_all(self) -> AsyncGenerator[Event]:
        """Yields events until a final one, or until the queue is closed.

        The final status update or error event is yielded before the stream
        ends. A queue disconnected for overflowing ends with an
        `InternalError` event once its buffered events are drained.
        """
        logger.debug('Starting to consume all events from the queue.')
        while True:
            if self.queue.is_closed() and self.queue.queue.empty():
                if self.queue.is_overflowed():
                    yield InternalError(
                        message='Subscriber fell behind and was disconnected'
                    )
                logger.debug('Queue closed, stopping consumption.')
                break
            try:
                # The timeout lets the loop notice a queue closed while empty.
                event = await asyncio.wait_for(
                    self.queue.dequeue_event(), timeout=self._timeout
                )
            except TimeoutError:
                continue

            logger.debug(f'Dequeued event of type: {type(event)} in consume_all.')
            yield event
            self.queue.task_done()

            if is_final_event(event):
                logger.debug('Stopping event consumption in consume_all.')
                self.queue.close()
                break
