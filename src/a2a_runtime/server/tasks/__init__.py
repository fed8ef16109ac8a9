"""Task persistence and notification delivery."""

from a2a_runtime.server.tasks.http_notification_publisher import (
    HttpNotificationPublisher,
)
from a2a_runtime.server.tasks.inmemory_task_store import InMemoryTaskStore
from a2a_runtime.server.tasks.notification_publisher import (
    NotificationPublisher,
)
from a2a_runtime.server.tasks.redis_task_store import RedisTaskStore
from a2a_runtime.server.tasks.task_store import TaskStore
from a2a_runtime.server.tasks.task_store_factory import create_task_store


__all__ = [
    'HttpNotificationPublisher',
    'InMemoryTaskStore',
    'NotificationPublisher',
    'RedisTaskStore',
    'TaskStore',
    'create_task_store',
]
