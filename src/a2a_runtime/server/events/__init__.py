from a2a_runtime.server.events.event_consumer import (
    EventConsumer,
    is_final_event,
)
from a2a_runtime.server.events.event_queue import (
    Event,
    EventQueue,
    OverflowPolicy,
)
from a2a_runtime.server.events.in_memory_subscriber_registry import (
    InMemorySubscriberRegistry,
)
from a2a_runtime.server.events.subscriber_registry import SubscriberRegistry


__all__ = [
    'Event',
    'EventConsumer',
    'EventQueue',
    'InMemorySubscriberRegistry',
    'OverflowPolicy',
    'SubscriberRegistry',
    'is_final_event',
]
