from a2a_runtime.server.config import A2AServerSettings
from a2a_runtime.server.tasks import (
    InMemoryTaskStore,
    RedisTaskStore,
    create_task_store,
)


def test_defaults_to_in_memory_store():
    store = create_task_store(A2AServerSettings(_env_file=None))
    assert isinstance(store, InMemoryTaskStore)


def test_redis_host_selects_redis_store():
    settings = A2AServerSettings(
        _env_file=None,
        redis_host='redis.internal',
        redis_port=6380,
        redis_username='agent',
        redis_password='secret',
        redis_ssl=True,
    )

    store = create_task_store(settings)

    assert isinstance(store, RedisTaskStore)
    assert store.host == 'redis.internal'
    assert store.port == 6380
    assert store.username == 'agent'
    assert store.password == 'secret'
    assert store.ssl is True
    assert store.client is None
