from abc import ABC, abstractmethod

from a2a_runtime.types import PushNotificationConfig, Task


class TaskStore(ABC):
    """Agent Task Store interface.

    Persists tasks and the push notification configuration attached to each
    of them. A store never raises for a missing task id on reads.
    """

    @abstractmethod
    async def save(self, task: Task) -> None:
        """Saves or replaces a task (last write wins)."""

    @abstractmethod
    async def get(self, task_id: str) -> Task | None:
        """Retrieves a task by id, or None when it does not exist."""

    @abstractmethod
    async def delete(self, task_id: str) -> None:
        """Deletes a task and its notification configuration."""

    @abstractmethod
    async def save_notification_config(
        self, task_id: str, config: PushNotificationConfig
    ) -> None:
        """Sets or overwrites the push notification config of a task.

        Raises:
            ValueError: If no task with ``task_id`` exists.
        """

    @abstractmethod
    async def get_notification_config(
        self, task_id: str
    ) -> PushNotificationConfig | None:
        """Retrieves the push notification config of a task, if any."""
