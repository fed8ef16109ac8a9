import logging

from collections.abc import AsyncIterable

from a2a_runtime.server.request_handlers.response_helpers import (
    build_error_response,
    prepare_response_object,
)
from a2a_runtime.server.request_handlers.task_manager import TaskManager
from a2a_runtime.types import (
    AgentCard,
    CancelTaskRequest,
    CancelTaskResponse,
    CancelTaskSuccessResponse,
    GetTaskPushNotificationRequest,
    GetTaskPushNotificationResponse,
    GetTaskPushNotificationSuccessResponse,
    GetTaskRequest,
    GetTaskResponse,
    GetTaskSuccessResponse,
    PushNotificationNotSupportedError,
    SendTaskRequest,
    SendTaskResponse,
    SendTaskStreamingRequest,
    SendTaskStreamingResponse,
    SendTaskStreamingSuccessResponse,
    SendTaskSuccessResponse,
    SetTaskPushNotificationRequest,
    SetTaskPushNotificationResponse,
    SetTaskPushNotificationSuccessResponse,
    Task,
    TaskArtifactUpdateEvent,
    TaskPushNotificationConfig,
    TaskResubscriptionRequest,
    TaskStatusUpdateEvent,
)
from a2a_runtime.utils.errors import ServerError
from a2a_runtime.utils.helpers import validate
from a2a_runtime.utils.telemetry import SpanKind, trace_class


logger = logging.getLogger(__name__)

STREAM_EVENT_TYPES = (TaskStatusUpdateEvent, TaskArtifactUpdateEvent)


@trace_class(kind=SpanKind.SERVER)
class JSONRPCHandler:
    """Maps decoded JSON-RPC requests onto a `TaskManager`.

    Every method returns (or, for streams, yields) the full response
    envelope; `ServerError` raised by the task manager becomes the
    ``error`` member of the response.
    """

    def __init__(self, agent_card: AgentCard, task_manager: TaskManager):
        """Initializes the JSONRPCHandler.

        Args:
            agent_card: The AgentCard whose capabilities gate optional methods.
            task_manager: The `TaskManager` requests are delegated to.
        """
        self.agent_card = agent_card
        self.task_manager = task_manager

    async def on_get_task(self, request: GetTaskRequest) -> GetTaskResponse:
        try:
            task = await self.task_manager.on_get_task(request.params)
            return prepare_response_object(
                request.id,
                task,
                (Task,),
                GetTaskSuccessResponse,
                GetTaskResponse,
            )
        except ServerError as e:
            return build_error_response(
                request.id, e.to_error(), GetTaskResponse
            )

    async def on_cancel_task(
        self, request: CancelTaskRequest
    ) -> CancelTaskResponse:
        try:
            task = await self.task_manager.on_cancel_task(request.params)
            return prepare_response_object(
                request.id,
                task,
                (Task,),
                CancelTaskSuccessResponse,
                CancelTaskResponse,
            )
        except ServerError as e:
            return build_error_response(
                request.id, e.to_error(), CancelTaskResponse
            )

    async def on_send_task(self, request: SendTaskRequest) -> SendTaskResponse:
        try:
            task = await self.task_manager.on_send_task(request.params)
            return prepare_response_object(
                request.id,
                task,
                (Task,),
                SendTaskSuccessResponse,
                SendTaskResponse,
            )
        except ServerError as e:
            return build_error_response(
                request.id, e.to_error(), SendTaskResponse
            )

    @validate(
        lambda self: self.agent_card.capabilities.streaming,
        'Streaming is not supported by the agent',
    )
    async def on_send_task_subscribe(
        self, request: SendTaskStreamingRequest
    ) -> AsyncIterable[SendTaskStreamingResponse]:
        """Handles 'tasks/sendSubscribe', yielding one envelope per event.

        Raises:
            ServerError: When the agent does not support streaming (raised
                on call, before any event is produced).
        """
        async for event in self.task_manager.on_send_task_subscribe(
            request.params
        ):
            yield prepare_response_object(
                request.id,
                event,
                STREAM_EVENT_TYPES,
                SendTaskStreamingSuccessResponse,
                SendTaskStreamingResponse,
            )

    @validate(
        lambda self: self.agent_card.capabilities.streaming,
        'Streaming is not supported by the agent',
    )
    async def on_resubscribe_to_task(
        self, request: TaskResubscriptionRequest
    ) -> AsyncIterable[SendTaskStreamingResponse]:
        async for event in self.task_manager.on_resubscribe_to_task(
            request.params
        ):
            yield prepare_response_object(
                request.id,
                event,
                STREAM_EVENT_TYPES,
                SendTaskStreamingSuccessResponse,
                SendTaskStreamingResponse,
            )

    @validate(
        lambda self: self.agent_card.capabilities.pushNotifications,
        'Push notifications are not supported by the agent',
        error_type=PushNotificationNotSupportedError,
    )
    async def set_push_notification(
        self, request: SetTaskPushNotificationRequest
    ) -> SetTaskPushNotificationResponse:
        try:
            config = await self.task_manager.on_set_task_push_notification(
                request.params
            )
            return prepare_response_object(
                request.id,
                config,
                (TaskPushNotificationConfig,),
                SetTaskPushNotificationSuccessResponse,
                SetTaskPushNotificationResponse,
            )
        except ServerError as e:
            return build_error_response(
                request.id, e.to_error(), SetTaskPushNotificationResponse
            )

    async def get_push_notification(
        self, request: GetTaskPushNotificationRequest
    ) -> GetTaskPushNotificationResponse:
        try:
            config = await self.task_manager.on_get_task_push_notification(
                request.params
            )
            return prepare_response_object(
                request.id,
                config,
                (TaskPushNotificationConfig,),
                GetTaskPushNotificationSuccessResponse,
                GetTaskPushNotificationResponse,
            )
        except ServerError as e:
            return build_error_response(
                request.id, e.to_error(), GetTaskPushNotificationResponse
            )
