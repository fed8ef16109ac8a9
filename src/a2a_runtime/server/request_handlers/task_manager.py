from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator

from a2a_runtime.server.events.event_queue import Event
from a2a_runtime.types import (
    Task,
    TaskIdParams,
    TaskPushNotificationConfig,
    TaskQueryParams,
    TaskSendParams,
)


class TaskManager(ABC):
    """A2A task manager interface.

    One method per JSON-RPC method of the protocol. Request/response methods
    raise `ServerError` for protocol errors; streaming methods yield their
    errors as events instead and never raise.
    """

    @abstractmethod
    async def on_get_task(self, params: TaskQueryParams) -> Task:
        """Handles the 'tasks/get' method.

        Args:
            params: The task id and the number of history messages to return.

        Returns:
            The task, with history cut to the last ``historyLength`` messages.

        Raises:
            ServerError: `TaskNotFoundError` when no such task exists.
        """

    @abstractmethod
    async def on_cancel_task(self, params: TaskIdParams) -> Task:
        """Handles the 'tasks/cancel' method.

        Raises:
            ServerError: `TaskNotFoundError` for an unknown task, otherwise
                `TaskNotCancelableError`.
        """

    @abstractmethod
    async def on_send_task(self, params: TaskSendParams) -> Task:
        """Handles the 'tasks/send' method (non-streaming).

        Creates the task or adds the message to it, runs the task handler to
        its final update and returns the resulting task.

        Raises:
            ServerError: `InternalError` if processing fails.
        """

    @abstractmethod
    def on_send_task_subscribe(
        self, params: TaskSendParams
    ) -> AsyncGenerator[Event]:
        """Handles the 'tasks/sendSubscribe' method (streaming).

        Same processing as `on_send_task`, streamed as status and artifact
        events. The stream ends after the final status event or an error
        event.
        """

    @abstractmethod
    async def on_set_task_push_notification(
        self, params: TaskPushNotificationConfig
    ) -> TaskPushNotificationConfig:
        """Handles the 'tasks/pushNotification/set' method.

        Raises:
            ServerError: `InternalError` if the config cannot be stored,
                including when the task does not exist.
        """

    @abstractmethod
    async def on_get_task_push_notification(
        self, params: TaskIdParams
    ) -> TaskPushNotificationConfig:
        """Handles the 'tasks/pushNotification/get' method.

        Raises:
            ServerError: `InternalError` when no config is stored for the task.
        """

    @abstractmethod
    def on_resubscribe_to_task(
        self, params: TaskQueryParams
    ) -> AsyncGenerator[Event]:
        """Handles the 'tasks/resubscribe' method (streaming).

        Streams the current status of the task followed by its later events.
        An unknown task yields a single `TaskNotFoundError` event.
        """
