import logging

import httpx

from a2a_runtime.server.tasks.notification_publisher import (
    NotificationPublisher,
)
from a2a_runtime.types import PushNotificationConfig, Task


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=15.0)


class HttpNotificationPublisher(NotificationPublisher):
    """Posts the task JSON to the webhook URL with an httpx client.

    A configured token is sent as ``Authorization: Bearer <token>``. Failed
    deliveries are logged and dropped; there is no retry.
    """

    def __init__(
        self,
        httpx_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initializes the HttpNotificationPublisher.

        Args:
            httpx_client: Shared async HTTP client. When omitted the publisher
                creates one and closes it in `close`.
            timeout: Timeout of the client created when none is supplied.
        """
        self._owns_client = httpx_client is None
        self._client = (
            httpx_client
            if httpx_client is not None
            else httpx.AsyncClient(timeout=timeout)
        )

    async def publish(self, task: Task, config: PushNotificationConfig) -> None:
        headers = {}
        if config.token:
            headers['Authorization'] = f'Bearer {config.token}'

        try:
            response = await self._client.post(
                config.url,
                json=task.model_dump(mode='json', exclude_none=True),
                headers=headers,
            )
            response.raise_for_status()
            logger.info(f'Push-notification sent for URL: {config.url}')
        except httpx.HTTPStatusError as e:
            logger.warning(
                'Push-notification for task %s rejected by %s: %s',
                task.id,
                config.url,
                e.response.status_code,
            )
        except Exception as e:
            logger.error(f'Error sending push-notification: {e}')

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
