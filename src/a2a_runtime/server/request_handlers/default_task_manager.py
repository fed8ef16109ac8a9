import asyncio
import logging

from collections.abc import AsyncGenerator, Coroutine
from typing import Any

from a2a_runtime.server.agent_execution import TaskHandler
from a2a_runtime.server.events import (
    Event,
    EventConsumer,
    EventQueue,
    InMemorySubscriberRegistry,
    SubscriberRegistry,
)
from a2a_runtime.server.request_handlers.task_manager import TaskManager
from a2a_runtime.server.tasks import (
    InMemoryTaskStore,
    NotificationPublisher,
    TaskStore,
)
from a2a_runtime.types import (
    ArtifactUpdate,
    InternalError,
    PushNotificationConfig,
    Task,
    TaskArtifactUpdateEvent,
    TaskIdParams,
    TaskNotCancelableError,
    TaskNotFoundError,
    TaskPushNotificationConfig,
    TaskQueryParams,
    TaskSendParams,
    TaskState,
    TaskStatus,
    TaskStatusUpdateEvent,
)
from a2a_runtime.utils.errors import ServerError
from a2a_runtime.utils.helpers import (
    append_artifact_to_task,
    append_message_to_task,
    create_task_obj,
    limit_history,
)
from a2a_runtime.utils.locks import KeyedLock
from a2a_runtime.utils.task import is_terminal, status_event, with_state
from a2a_runtime.utils.telemetry import SpanKind, trace_class


logger = logging.getLogger(__name__)


@trace_class(kind=SpanKind.SERVER)
class DefaultTaskManager(TaskManager):
    """Default task manager.

    Coordinates the `TaskStore`, the `SubscriberRegistry`, the optional
    `NotificationPublisher` and the agent's `TaskHandler`. Messages sent to the
    same task id are processed one at a time, in arrival order; different
    tasks run concurrently.

    Streaming runs execute in background asyncio tasks, so a client dropping
    its stream never interrupts the handler.
    """

    def __init__(
        self,
        task_handler: TaskHandler,
        task_store: TaskStore | None = None,
        subscriber_registry: SubscriberRegistry | None = None,
        notification_publisher: NotificationPublisher | None = None,
    ) -> None:
        """Initializes the DefaultTaskManager.

        Args:
            task_handler: The agent logic run for every message.
            task_store: Task persistence. Defaults to `InMemoryTaskStore`.
            subscriber_registry: Live stream registry. Defaults to
                `InMemorySubscriberRegistry`.
            notification_publisher: Webhook sender. Without one, push
                notification configs are stored but nothing is sent.
        """
        self.task_handler = task_handler
        self.task_store = task_store or InMemoryTaskStore()
        self._subscribers = subscriber_registry or InMemorySubscriberRegistry()
        self._notification_publisher = notification_publisher
        self._task_locks = KeyedLock()
        self._background_tasks: set[asyncio.Task] = set()

    async def on_get_task(self, params: TaskQueryParams) -> Task:
        task = await self._load_task(params.id)
        if not task:
            raise ServerError(error=TaskNotFoundError())
        return limit_history(task, params.historyLength)

    async def on_cancel_task(self, params: TaskIdParams) -> Task:
        task = await self._load_task(params.id)
        if not task:
            raise ServerError(error=TaskNotFoundError())
        logger.info('Cancel requested for task %s, refusing.', params.id)
        raise ServerError(error=TaskNotCancelableError())

    async def on_send_task(self, params: TaskSendParams) -> Task:
        try:
            async with self._task_locks.hold(params.id):
                task = await self._run_task(params)
        except Exception as e:
            logger.error(f'Error while processing task {params.id}: {e}')
            raise ServerError(error=InternalError()) from e
        return limit_history(task, params.historyLength)

    async def on_send_task_subscribe(
        self, params: TaskSendParams
    ) -> AsyncGenerator[Event]:
        # Attached by the run itself once it holds the task lock, so the
        # stream only carries events of the run it started.
        queue = self._subscribers.create_queue()
        try:
            self._run_in_background(self._run_streaming_task(params, queue))
            async for event in EventConsumer(queue).consume_all():
                yield event
        finally:
            await self._subscribers.unsubscribe(params.id, queue)

    async def on_set_task_push_notification(
        self, params: TaskPushNotificationConfig
    ) -> TaskPushNotificationConfig:
        try:
            await self.task_store.save_notification_config(
                params.id, params.pushNotificationConfig
            )
        except Exception as e:
            logger.error(
                f'Failed to store push notification config for {params.id}: {e}'
            )
            raise ServerError(
                error=InternalError(
                    message='An error occurred while setting push notification info'
                )
            ) from e
        return params

    async def on_get_task_push_notification(
        self, params: TaskIdParams
    ) -> TaskPushNotificationConfig:
        try:
            config = await self.task_store.get_notification_config(params.id)
        except Exception as e:
            logger.error(
                f'Failed to read push notification config for {params.id}: {e}'
            )
            raise ServerError(error=InternalError()) from e
        if config is None:
            raise ServerError(
                error=InternalError(
                    message='No push notification info found for task'
                )
            )
        return TaskPushNotificationConfig(
            id=params.id, pushNotificationConfig=config
        )

    async def on_resubscribe_to_task(
        self, params: TaskQueryParams
    ) -> AsyncGenerator[Event]:
        """Streams the task's current status, then its later events.

        The channel is attached before the task is read, so an event
        published meanwhile is never lost. A task that is already terminal
        with no run in flight gets its status replayed and the stream ends.
        """
        queue = await self._subscribers.subscribe(params.id)
        try:
            try:
                task = await self.task_store.get(params.id)
            except Exception as e:
                logger.error(f'Failed to load task {params.id}: {e}')
                yield InternalError()
                return
            if not task:
                yield TaskNotFoundError()
                return

            yield status_event(task)
            if is_terminal(task) and task.id not in self._task_locks:
                logger.debug(
                    'Task %s is %s with no run in flight, closing stream.',
                    task.id,
                    task.status.state.value,
                )
                return

            async for event in EventConsumer(queue).consume_all():
                yield event
        finally:
            await self._subscribers.unsubscribe(params.id, queue)

    async def wait_for_background_tasks(self) -> None:
        """Waits until every streaming run started so far has finished."""
        while pending := [t for t in self._background_tasks if not t.done()]:
            await asyncio.gather(*pending, return_exceptions=True)

    def _run_in_background(self, coro: Coroutine[Any, Any, None]) -> None:
        background_task = asyncio.create_task(coro)
        self._background_tasks.add(background_task)
        background_task.add_done_callback(self._background_tasks.discard)

    async def _run_streaming_task(
        self, params: TaskSendParams, queue: EventQueue
    ) -> None:
        attached = False
        try:
            async with self._task_locks.hold(params.id):
                await self._subscribers.subscribe(params.id, queue)
                attached = True
                await self._run_task(params)
        except Exception as e:
            logger.error(f'Error while processing task {params.id}: {e}')
            if attached:
                await self._subscribers.publish(params.id, InternalError())
            else:
                queue.enqueue_event(InternalError())

    async def _run_task(self, params: TaskSendParams) -> Task:
        """Processes one message. Callers hold the task's lock."""
        task = await self._upsert_task(params)
        config = await self._resolve_notification_config(params)

        task = with_state(task, TaskState.working)
        await self.task_store.save(task)
        await self._notify(task, config)
        await self._subscribers.publish(task.id, status_event(task))

        final_update_seen = False
        updates = self.task_handler.handle(task.model_copy(deep=True))
        try:
            async for update in updates:
                if isinstance(update, ArtifactUpdate):
                    for artifact in update.artifacts:
                        append_artifact_to_task(task, artifact)
                        await self._subscribers.publish(
                            task.id,
                            TaskArtifactUpdateEvent(
                                id=task.id, artifact=artifact
                            ),
                        )
                    continue

                task.status = update.status
                if update.final:
                    final_update_seen = True
                    break
                await self._subscribers.publish(
                    task.id,
                    TaskStatusUpdateEvent(id=task.id, status=update.status),
                )
        finally:
            aclose = getattr(updates, 'aclose', None)
            if aclose is not None:
                await aclose()

        if not final_update_seen:
            logger.error(
                'Handler for task %s ended without a final status update, '
                'marking the task failed.',
                task.id,
            )
            task.status = TaskStatus(state=TaskState.failed)

        await self.task_store.save(task)
        await self._subscribers.publish(task.id, status_event(task, final=True))
        await self._notify(task, config)
        logger.info(
            'Task %s finished in state %s.', task.id, task.status.state.value
        )
        return task

    async def _upsert_task(self, params: TaskSendParams) -> Task:
        task = await self.task_store.get(params.id)
        if task is None:
            task = create_task_obj(params)
            logger.info('Task %s created.', task.id)
        else:
            task = append_message_to_task(task, params)
        await self.task_store.save(task)
        return task

    async def _resolve_notification_config(
        self, params: TaskSendParams
    ) -> PushNotificationConfig | None:
        if params.pushNotification:
            await self.task_store.save_notification_config(
                params.id, params.pushNotification
            )
            return params.pushNotification
        return await self.task_store.get_notification_config(params.id)

    async def _notify(
        self, task: Task, config: PushNotificationConfig | None
    ) -> None:
        if config is None or self._notification_publisher is None:
            return
        await self._notification_publisher.publish(
            task.model_copy(deep=True), config
        )

    async def _load_task(self, task_id: str) -> Task | None:
        try:
            return await self.task_store.get(task_id)
        except Exception as e:
            logger.error(f'Failed to load task {task_id}: {e}')
            raise ServerError(error=InternalError()) from e
