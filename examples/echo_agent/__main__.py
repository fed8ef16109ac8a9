import contextlib
import logging

import click
import httpx
import uvicorn

from dotenv import load_dotenv

from a2a_runtime.server.agent_execution import CallableTaskHandler
from a2a_runtime.server.apps import A2AStarletteApplication
from a2a_runtime.server.config import A2AServerSettings
from a2a_runtime.server.events import InMemorySubscriberRegistry
from a2a_runtime.server.request_handlers import DefaultTaskManager
from a2a_runtime.server.tasks import (
    HttpNotificationPublisher,
    RedisTaskStore,
    create_task_store,
)
from a2a_runtime.types import (
    AgentCapabilities,
    AgentCard,
    AgentSkill,
    Message,
)
from a2a_runtime.utils import get_message_text


load_dotenv()

logging.basicConfig(level=logging.INFO)


async def echo(message: Message) -> str:
    return f'You said: {get_message_text(message)}'


@click.command()
@click.option('--host', 'host', default=None)
@click.option('--port', 'port', default=None, type=int)
def main(host: str | None, port: int | None):
    settings = A2AServerSettings()
    host = host or settings.host
    port = port or settings.port

    skill = AgentSkill(
        id='echo',
        name='Echo',
        description='Repeats the last message back',
        tags=['echo'],
        examples=['hi', 'hello world'],
    )

    agent_card = AgentCard(
        name='Echo Agent',
        description='Answers every message with its own text',
        url=f'http://{host}:{port}/',
        version='1.0.0',
        defaultInputModes=['text'],
        defaultOutputModes=['text'],
        capabilities=AgentCapabilities(
            streaming=True, pushNotifications=True
        ),
        skills=[skill],
    )

    task_store = create_task_store(settings)
    httpx_client = httpx.AsyncClient(
        timeout=httpx.Timeout(
            settings.notification_timeout,
            connect=settings.notification_connect_timeout,
        )
    )
    task_manager = DefaultTaskManager(
        task_handler=CallableTaskHandler(echo),
        task_store=task_store,
        subscriber_registry=InMemorySubscriberRegistry(
            max_queue_size=settings.subscriber_queue_size,
            overflow=settings.subscriber_overflow,
        ),
        notification_publisher=HttpNotificationPublisher(httpx_client),
    )

    @contextlib.asynccontextmanager
    async def lifespan(app):
        if isinstance(task_store, RedisTaskStore):
            await task_store.initialize()
        yield
        await task_manager.wait_for_background_tasks()
        await httpx_client.aclose()
        if isinstance(task_store, RedisTaskStore):
            await task_store.close()

    server = A2AStarletteApplication(
        agent_card=agent_card, task_manager=task_manager
    )
    uvicorn.run(
        server.build(
            agent_card_url=settings.agent_card_url,
            rpc_url=settings.rpc_url,
            lifespan=lifespan,
        ),
        host=host,
        port=port,
    )


if __name__ == '__main__':
    main()
