from abc import ABC, abstractmethod

from a2a_runtime.server.events.event_queue import Event, EventQueue


class SubscriberRegistry(ABC):
    """Tracks the live event streams attached to each task."""

    def create_queue(self) -> EventQueue:
        """Builds a channel that is not yet attached to any task."""
        return EventQueue()

    @abstractmethod
    async def subscribe(
        self, task_id: str, queue: EventQueue | None = None
    ) -> EventQueue:
        """Attaches a channel that receives every event published for a task.

        A new channel is created when ``queue`` is None. A queue that was
        already closed is returned without being attached.
        """

    @abstractmethod
    async def publish(self, task_id: str, event: Event) -> None:
        """Forwards an event to all channels of a task, in subscription order.

        Never waits for consumers; a failing channel does not prevent
        delivery to the others.
        """

    @abstractmethod
    async def unsubscribe(self, task_id: str, queue: EventQueue) -> None:
        """Detaches a channel. Unknown channels are ignored."""

    @abstractmethod
    async def subscriber_count(self, task_id: str) -> int:
        """Number of channels currently attached to a task."""
