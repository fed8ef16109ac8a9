from abc import ABC, abstractmethod

from a2a_runtime.types import PushNotificationConfig, Task


class NotificationPublisher(ABC):
    """Delivers task state notifications to a client webhook."""

    @abstractmethod
    async def publish(self, task: Task, config: PushNotificationConfig) -> None:
        """Sends the current task state to the configured webhook.

        Delivery is best effort: implementations log failures and never raise.
        """
