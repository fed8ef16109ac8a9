from typing import TypeVar

from a2a_runtime.types import (
    CancelTaskResponse,
    CancelTaskSuccessResponse,
    GetTaskPushNotificationResponse,
    GetTaskPushNotificationSuccessResponse,
    GetTaskResponse,
    GetTaskSuccessResponse,
    InternalError,
    JSONRPCError,
    JSONRPCErrorResponse,
    SendTaskResponse,
    SendTaskStreamingResponse,
    SendTaskStreamingSuccessResponse,
    SendTaskSuccessResponse,
    SetTaskPushNotificationResponse,
    SetTaskPushNotificationSuccessResponse,
    Task,
    TaskArtifactUpdateEvent,
    TaskPushNotificationConfig,
    TaskStatusUpdateEvent,
)


# response types
RT = TypeVar(
    'RT',
    GetTaskResponse,
    CancelTaskResponse,
    SendTaskResponse,
    SendTaskStreamingResponse,
    SetTaskPushNotificationResponse,
    GetTaskPushNotificationResponse,
)

# success types
SPT = TypeVar(
    'SPT',
    GetTaskSuccessResponse,
    CancelTaskSuccessResponse,
    SendTaskSuccessResponse,
    SendTaskStreamingSuccessResponse,
    SetTaskPushNotificationSuccessResponse,
    GetTaskPushNotificationSuccessResponse,
)

# result types
EventTypes = (
    Task
    | TaskArtifactUpdateEvent
    | TaskStatusUpdateEvent
    | TaskPushNotificationConfig
    | JSONRPCError
)


def build_error_response(
    request_id: str | int | None,
    error: JSONRPCError,
    response_wrapper_type: type[RT],
) -> RT:
    """Wraps a protocol error into the response type of a method."""
    return response_wrapper_type(
        root=JSONRPCErrorResponse(id=request_id, error=error)
    )


def prepare_response_object(
    request_id: str | int | None,
    response: EventTypes,
    success_response_types: tuple[type, ...],
    success_payload_type: type[SPT],
    response_type: type[RT],
) -> RT:
    """Builds the JSON-RPC response for a handler result or error event."""
    if isinstance(response, success_response_types):
        return response_type(
            root=success_payload_type(id=request_id, result=response)  # type:ignore
        )

    if isinstance(response, JSONRPCError):
        return build_error_response(request_id, response, response_type)

    return build_error_response(
        request_id,
        InternalError(
            message=f'Unexpected result type {type(response).__name__}'
        ),
        response_type,
    )
