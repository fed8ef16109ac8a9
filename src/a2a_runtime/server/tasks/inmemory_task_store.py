import asyncio
import logging

from a2a_runtime.server.tasks.task_store import TaskStore
from a2a_runtime.types import PushNotificationConfig, Task


logger = logging.getLogger(__name__)


class InMemoryTaskStore(TaskStore):
    """In-memory implementation of TaskStore.

    Tasks are copied on the way in and out, so callers never share mutable
    state with the store.
    """

    def __init__(self) -> None:
        logger.debug('Initializing InMemoryTaskStore')
        self.tasks: dict[str, Task] = {}
        self.notification_configs: dict[str, PushNotificationConfig] = {}
        self.lock = asyncio.Lock()

    async def save(self, task: Task) -> None:
        async with self.lock:
            self.tasks[task.id] = task.model_copy(deep=True)
            logger.info('Task %s saved successfully.', task.id)

    async def get(self, task_id: str) -> Task | None:
        async with self.lock:
            logger.debug('Attempting to get task with id: %s', task_id)
            task = self.tasks.get(task_id)
            if task is None:
                logger.debug('Task %s not found in store.', task_id)
                return None
            logger.debug('Task %s retrieved successfully.', task_id)
            return task.model_copy(deep=True)

    async def delete(self, task_id: str) -> None:
        async with self.lock:
            logger.debug('Attempting to delete task with id: %s', task_id)
            self.notification_configs.pop(task_id, None)
            if self.tasks.pop(task_id, None) is not None:
                logger.info('Task %s deleted successfully.', task_id)
            else:
                logger.warning(
                    'Attempted to delete nonexistent task with id: %s', task_id
                )

    async def save_notification_config(
        self, task_id: str, config: PushNotificationConfig
    ) -> None:
        async with self.lock:
            if task_id not in self.tasks:
                raise ValueError(f'Task {task_id} not found')
            self.notification_configs[task_id] = config.model_copy(deep=True)
            logger.info('Notification config for task %s saved.', task_id)

    async def get_notification_config(
        self, task_id: str
    ) -> PushNotificationConfig | None:
        async with self.lock:
            config = self.notification_configs.get(task_id)
            return config.model_copy(deep=True) if config else None
