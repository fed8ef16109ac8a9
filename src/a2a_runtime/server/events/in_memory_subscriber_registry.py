import logging

from a2a_runtime.server.events.event_queue import (
    Event,
    EventQueue,
    OverflowPolicy,
)
from a2a_runtime.server.events.subscriber_registry import SubscriberRegistry
from a2a_runtime.utils.locks import KeyedLock


logger = logging.getLogger(__name__)


class InMemorySubscriberRegistry(SubscriberRegistry):
    """SubscriberRegistry for a single server process.

    Streams can only be attached on the process that runs the task. Each task
    id has its own lock, so traffic on one task never waits for another.
    """

    def __init__(
        self,
        max_queue_size: int = 0,
        overflow: OverflowPolicy = OverflowPolicy.DROP,
    ) -> None:
        """Initializes the InMemorySubscriberRegistry.

        Args:
            max_queue_size: Capacity of each subscriber queue, 0 for unbounded.
            overflow: Policy applied when a bounded queue is full.
        """
        self._subscribers: dict[str, list[EventQueue]] = {}
        self._locks = KeyedLock()
        self._max_queue_size = max_queue_size
        self._overflow = overflow

    def create_queue(self) -> EventQueue:
        return EventQueue(max_size=self._max_queue_size, overflow=self._overflow)

    async def subscribe(
        self, task_id: str, queue: EventQueue | None = None
    ) -> EventQueue:
        if queue is None:
            queue = self.create_queue()
        async with self._locks.hold(task_id):
            # unsubscribe closes the queue before taking the lock
            if queue.is_closed():
                logger.debug(
                    'Not attaching a closed queue to task %s', task_id
                )
                return queue
            self._subscribers.setdefault(task_id, []).append(queue)
        logger.debug('New subscriber for task %s', task_id)
        return queue

    async def publish(self, task_id: str, event: Event) -> None:
        async with self._locks.hold(task_id):
            queues = list(self._subscribers.get(task_id, ()))

        for queue in queues:
            try:
                queue.enqueue_event(event)
            except Exception as e:
                logger.warning(
                    'Failed to deliver event to a subscriber of task %s: %s',
                    task_id,
                    e,
                )

    async def unsubscribe(self, task_id: str, queue: EventQueue) -> None:
        queue.close()
        async with self._locks.hold(task_id):
            queues = self._subscribers.get(task_id)
            if not queues or queue not in queues:
                return
            queues.remove(queue)
            if not queues:
                del self._subscribers[task_id]
        logger.debug('Subscriber removed from task %s', task_id)

    async def subscriber_count(self, task_id: str) -> int:
        async with self._locks.hold(task_id):
            return len(self._subscribers.get(task_id, ()))
