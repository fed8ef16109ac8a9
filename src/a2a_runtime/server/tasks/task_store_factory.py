import logging

from a2a_runtime.server.config import A2AServerSettings
from a2a_runtime.server.tasks.inmemory_task_store import InMemoryTaskStore
from a2a_runtime.server.tasks.redis_task_store import RedisTaskStore
from a2a_runtime.server.tasks.task_store import TaskStore


logger = logging.getLogger(__name__)


def create_task_store(settings: A2AServerSettings) -> TaskStore:
    """Builds the task store selected by the settings.

    A configured ``redis_host`` selects `RedisTaskStore`; otherwise tasks are
    kept in memory and lost on restart.
    """
    if settings.redis_host:
        logger.info(
            'Using Redis task store at %s:%s',
            settings.redis_host,
            settings.redis_port,
        )
        return RedisTaskStore(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password,
            ssl=settings.redis_ssl,
            db=settings.redis_db,
        )

    logger.info('Using in-memory task store')
    return InMemoryTaskStore()
