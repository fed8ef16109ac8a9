import logging

import redis.asyncio as redis

from a2a_runtime.server.tasks.task_store import TaskStore
from a2a_runtime.types import PushNotificationConfig, Task


logger = logging.getLogger(__name__)


class RedisTaskStore(TaskStore):
    """Redis implementation of TaskStore.

    Each task is stored as its JSON document under ``task:<id>`` and its push
    notification config under ``notification:<id>``.
    """

    def __init__(
        self,
        host: str = 'localhost',
        port: int = 6379,
        username: str | None = None,
        password: str | None = None,
        ssl: bool = False,
        db: int = 0,
        client: redis.Redis | None = None,
        task_prefix: str = 'task:',
        notification_prefix: str = 'notification:',
    ) -> None:
        """Initializes the RedisTaskStore.

        Args:
            host: Redis server host name.
            port: Redis server port.
            username: Optional ACL user name.
            password: Optional password.
            ssl: Whether to connect over TLS.
            db: Database number.
            client: An already configured client. When given, the connection
                parameters are ignored and the store does not close it.
            task_prefix: Key prefix for task documents.
            notification_prefix: Key prefix for notification configs.
        """
        logger.debug('Initializing RedisTaskStore')
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.ssl = ssl
        self.db = db
        self.task_prefix = task_prefix
        self.notification_prefix = notification_prefix

        self.client: redis.Redis | None = client
        self._owns_client = client is None

    async def initialize(self) -> None:
        """Creates the Redis client if none was supplied."""
        if self.client is not None:
            return

        logger.debug('Connecting to Redis at %s:%s', self.host, self.port)
        self.client = redis.Redis(
            host=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            ssl=self.ssl,
            db=self.db,
            decode_responses=True,
        )

    async def close(self) -> None:
        """Closes the Redis client if this store created it."""
        if self.client is not None and self._owns_client:
            await self.client.aclose()
            self.client = None

    async def save(self, task: Task) -> None:
        client = await self._ensure_initialized()
        await client.set(
            self._task_key(task.id), task.model_dump_json(exclude_none=True)
        )
        logger.info('Task %s saved successfully.', task.id)

    async def get(self, task_id: str) -> Task | None:
        client = await self._ensure_initialized()
        logger.debug('Attempting to get task with id: %s', task_id)
        data = await client.get(self._task_key(task_id))
        if data is None:
            logger.debug('Task %s not found in store.', task_id)
            return None
        logger.debug('Task %s retrieved successfully.', task_id)
        return Task.model_validate_json(data)

    async def delete(self, task_id: str) -> None:
        client = await self._ensure_initialized()
        logger.debug('Attempting to delete task with id: %s', task_id)
        deleted = await client.delete(
            self._task_key(task_id), self._notification_key(task_id)
        )
        if deleted:
            logger.info('Task %s deleted successfully.', task_id)
        else:
            logger.warning(
                'Attempted to delete nonexistent task with id: %s', task_id
            )

    async def save_notification_config(
        self, task_id: str, config: PushNotificationConfig
    ) -> None:
        client = await self._ensure_initialized()
        if not await client.exists(self._task_key(task_id)):
            raise ValueError(f'Task {task_id} not found')
        await client.set(
            self._notification_key(task_id),
            config.model_dump_json(exclude_none=True),
        )
        logger.info('Notification config for task %s saved.', task_id)

    async def get_notification_config(
        self, task_id: str
    ) -> PushNotificationConfig | None:
        client = await self._ensure_initialized()
        data = await client.get(self._notification_key(task_id))
        if data is None:
            return None
        return PushNotificationConfig.model_validate_json(data)

    def _task_key(self, task_id: str) -> str:
        return f'{self.task_prefix}{task_id}'

    def _notification_key(self, task_id: str) -> str:
        return f'{self.notification_prefix}{task_id}'

    async def _ensure_initialized(self) -> redis.Redis:
        if self.client is None:
            await self.initialize()
        assert self.client is not None
        return self.client
