"""Pydantic models for the A2A task protocol.

Field names follow the JSON wire schema (camelCase), so models can be dumped
with ``model_dump(mode='json', exclude_none=True)`` and sent as-is.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    RootModel,
    Tag,
    model_validator,
)


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()


class Role(str, Enum):
    """Sender of a message."""

    user = 'user'
    agent = 'agent'


class TaskState(str, Enum):
    """Represents the possible states of a Task."""

    submitted = 'submitted'
    working = 'working'
    input_required = 'input-required'
    completed = 'completed'
    canceled = 'canceled'
    failed = 'failed'
    unknown = 'unknown'


TERMINAL_TASK_STATES = (
    TaskState.completed,
    TaskState.canceled,
    TaskState.failed,
)


# --- Content parts ---------------------------------------------------------


class FileContent(BaseModel):
    """File payload carried either inline (base64 bytes) or by reference."""

    name: str | None = None
    mimeType: str | None = None
    bytes: str | None = None
    uri: str | None = None

    @model_validator(mode='after')
    def _check_content(self) -> 'FileContent':
        if (self.bytes is None) == (self.uri is None):
            raise ValueError("Exactly one of 'bytes' or 'uri' must be set")
        return self


class TextPart(BaseModel):
    type: Literal['text'] = 'text'
    text: str
    metadata: dict[str, Any] | None = None


class FilePart(BaseModel):
    type: Literal['file'] = 'file'
    file: FileContent
    metadata: dict[str, Any] | None = None


class DataPart(BaseModel):
    type: Literal['data'] = 'data'
    data: dict[str, Any]
    metadata: dict[str, Any] | None = None


class Part(RootModel[TextPart | FilePart | DataPart]):
    root: TextPart | FilePart | DataPart


# --- Core objects ----------------------------------------------------------


class Message(BaseModel):
    role: Role
    parts: list[Part]
    metadata: dict[str, Any] | None = None


class TaskStatus(BaseModel):
    """Snapshot of a task's state, optionally carrying the agent's reply."""

    state: TaskState
    message: Message | None = None
    timestamp: str = Field(default_factory=_utc_now)


class Artifact(BaseModel):
    """Output produced by an agent while processing a task.

    ``index``, ``append`` and ``lastChunk`` let an agent stream a single
    artifact in several chunks.
    """

    name: str | None = None
    description: str | None = None
    parts: list[Part]
    index: int = 0
    append: bool | None = None
    lastChunk: bool | None = None
    metadata: dict[str, Any] | None = None


class Task(BaseModel):
    id: str
    sessionId: str | None = None
    status: TaskStatus
    history: list[Message] | None = None
    artifacts: list[Artifact] | None = None
    metadata: dict[str, str] | None = None


class TaskStatusUpdateEvent(BaseModel):
    """Streamed when the status of a task changes."""

    id: str
    status: TaskStatus
    final: bool = False
    metadata: dict[str, Any] | None = None


class TaskArtifactUpdateEvent(BaseModel):
    """Streamed when a task produces an artifact."""

    id: str
    artifact: Artifact
    metadata: dict[str, Any] | None = None


# --- Push notifications ----------------------------------------------------


class AuthenticationInfo(BaseModel):
    model_config = ConfigDict(extra='allow')

    schemes: list[str]
    credentials: str | None = None


class PushNotificationConfig(BaseModel):
    """Webhook target notified when a task changes state."""

    url: str
    token: str | None = None
    authentication: AuthenticationInfo | None = None


class TaskPushNotificationConfig(BaseModel):
    id: str
    pushNotificationConfig: PushNotificationConfig


# --- Handler updates -------------------------------------------------------


class ArtifactUpdate(BaseModel):
    """New artifacts produced by a task handler."""

    artifacts: list[Artifact]


class StatusUpdate(BaseModel):
    """Status change reported by a task handler.

    Exactly one update per handler run carries ``final=True``; it ends both
    the run and any live stream for the task.
    """

    status: TaskStatus
    final: bool = False


TaskUpdate = ArtifactUpdate | StatusUpdate


# --- Request parameters ----------------------------------------------------


class TaskIdParams(BaseModel):
    id: str
    metadata: dict[str, Any] | None = None


class TaskQueryParams(TaskIdParams):
    historyLength: int | None = None


class TaskSendParams(BaseModel):
    id: str
    sessionId: str | None = None
    message: Message
    acceptedOutputModes: list[str] | None = None
    historyLength: int | None = None
    pushNotification: PushNotificationConfig | None = None
    metadata: dict[str, str] | None = None


# --- Errors ----------------------------------------------------------------


class JSONRPCError(BaseModel):
    """Error object of a JSON-RPC 2.0 response.

    Every protocol error below is a subclass pinning its own code and default
    message, so ``isinstance(x, JSONRPCError)`` identifies any error event.
    """

    code: int
    message: str
    data: Any | None = None


class JSONParseError(JSONRPCError):
    code: Literal[-32700] = -32700
    message: str = 'Invalid JSON payload'


class InvalidRequestError(JSONRPCError):
    code: Literal[-32600] = -32600
    message: str = 'Request payload validation error'


class MethodNotFoundError(JSONRPCError):
    code: Literal[-32601] = -32601
    message: str = 'Method not found'


class InvalidParamsError(JSONRPCError):
    code: Literal[-32602] = -32602
    message: str = 'Invalid parameters'


class InternalError(JSONRPCError):
    code: Literal[-32603] = -32603
    message: str = 'Internal error'


class TaskNotFoundError(JSONRPCError):
    code: Literal[-32001] = -32001
    message: str = 'Task not found'


class TaskNotCancelableError(JSONRPCError):
    code: Literal[-32002] = -32002
    message: str = 'Task cannot be canceled'


class PushNotificationNotSupportedError(JSONRPCError):
    code: Literal[-32003] = -32003
    message: str = 'Push Notification is not supported'


class UnsupportedOperationError(JSONRPCError):
    code: Literal[-32004] = -32004
    message: str = 'This operation is not supported'


# --- Requests --------------------------------------------------------------


class JSONRPCMessage(BaseModel):
    id: str | int | None = None
    jsonrpc: Literal['2.0'] = '2.0'


class JSONRPCRequest(JSONRPCMessage):
    method: str
    params: dict[str, Any] | None = None


class GetTaskRequest(JSONRPCMessage):
    method: Literal['tasks/get'] = 'tasks/get'
    params: TaskQueryParams


class CancelTaskRequest(JSONRPCMessage):
    method: Literal['tasks/cancel'] = 'tasks/cancel'
    params: TaskIdParams


class SendTaskRequest(JSONRPCMessage):
    method: Literal['tasks/send'] = 'tasks/send'
    params: TaskSendParams


class SendTaskStreamingRequest(JSONRPCMessage):
    method: Literal['tasks/sendSubscribe'] = 'tasks/sendSubscribe'
    params: TaskSendParams


class SetTaskPushNotificationRequest(JSONRPCMessage):
    method: Literal['tasks/pushNotification/set'] = (
        'tasks/pushNotification/set'
    )
    params: TaskPushNotificationConfig


class GetTaskPushNotificationRequest(JSONRPCMessage):
    method: Literal['tasks/pushNotification/get'] = (
        'tasks/pushNotification/get'
    )
    params: TaskIdParams


class TaskResubscriptionRequest(JSONRPCMessage):
    method: Literal['tasks/resubscribe'] = 'tasks/resubscribe'
    params: TaskQueryParams


class UnknownMethodRequest(JSONRPCMessage):
    """Any well-formed request whose method is not part of the protocol."""

    method: str
    params: Any | None = None


KNOWN_METHODS = frozenset(
    {
        'tasks/get',
        'tasks/cancel',
        'tasks/send',
        'tasks/sendSubscribe',
        'tasks/pushNotification/set',
        'tasks/pushNotification/get',
        'tasks/resubscribe',
    }
)


def _request_tag(value: Any) -> str | None:
    method = (
        value.get('method')
        if isinstance(value, dict)
        else getattr(value, 'method', None)
    )
    if method is None:
        return None
    return method if method in KNOWN_METHODS else 'unknown'


class A2ARequest(
    RootModel[
        Annotated[
            Annotated[GetTaskRequest, Tag('tasks/get')]
            | Annotated[CancelTaskRequest, Tag('tasks/cancel')]
            | Annotated[SendTaskRequest, Tag('tasks/send')]
            | Annotated[SendTaskStreamingRequest, Tag('tasks/sendSubscribe')]
            | Annotated[
                SetTaskPushNotificationRequest,
                Tag('tasks/pushNotification/set'),
            ]
            | Annotated[
                GetTaskPushNotificationRequest,
                Tag('tasks/pushNotification/get'),
            ]
            | Annotated[TaskResubscriptionRequest, Tag('tasks/resubscribe')]
            | Annotated[UnknownMethodRequest, Tag('unknown')],
            Discriminator(_request_tag),
        ]
    ]
):
    """A2A request, decoded into one of the fixed method variants.

    Unrecognised methods decode to ``UnknownMethodRequest`` instead of
    failing validation, so the dispatcher can answer with MethodNotFound.
    The ``jsonrpc`` member is mandatory on the wire even though the request
    models default it when built in code.
    """

    @model_validator(mode='before')
    @classmethod
    def _require_jsonrpc_member(cls, data: Any) -> Any:
        if isinstance(data, dict) and 'jsonrpc' not in data:
            raise ValueError("Request is missing the 'jsonrpc' member")
        return data


# --- Responses -------------------------------------------------------------


class JSONRPCErrorResponse(JSONRPCMessage):
    error: JSONRPCError


class JSONRPCSuccessResponse(JSONRPCMessage):
    result: Any


class GetTaskSuccessResponse(JSONRPCMessage):
    result: Task


class GetTaskResponse(RootModel[JSONRPCErrorResponse | GetTaskSuccessResponse]):
    root: JSONRPCErrorResponse | GetTaskSuccessResponse


class CancelTaskSuccessResponse(JSONRPCMessage):
    result: Task


class CancelTaskResponse(
    RootModel[JSONRPCErrorResponse | CancelTaskSuccessResponse]
):
    root: JSONRPCErrorResponse | CancelTaskSuccessResponse


class SendTaskSuccessResponse(JSONRPCMessage):
    result: Task


class SendTaskResponse(
    RootModel[JSONRPCErrorResponse | SendTaskSuccessResponse]
):
    root: JSONRPCErrorResponse | SendTaskSuccessResponse


class SendTaskStreamingSuccessResponse(JSONRPCMessage):
    result: TaskStatusUpdateEvent | TaskArtifactUpdateEvent


class SendTaskStreamingResponse(
    RootModel[JSONRPCErrorResponse | SendTaskStreamingSuccessResponse]
):
    root: JSONRPCErrorResponse | SendTaskStreamingSuccessResponse


class SetTaskPushNotificationSuccessResponse(JSONRPCMessage):
    result: TaskPushNotificationConfig


class SetTaskPushNotificationResponse(
    RootModel[JSONRPCErrorResponse | SetTaskPushNotificationSuccessResponse]
):
    root: JSONRPCErrorResponse | SetTaskPushNotificationSuccessResponse


class GetTaskPushNotificationSuccessResponse(JSONRPCMessage):
    result: TaskPushNotificationConfig


class GetTaskPushNotificationResponse(
    RootModel[JSONRPCErrorResponse | GetTaskPushNotificationSuccessResponse]
):
    root: JSONRPCErrorResponse | GetTaskPushNotificationSuccessResponse


JSONRPCResponse = (
    GetTaskResponse
    | CancelTaskResponse
    | SendTaskResponse
    | SendTaskStreamingResponse
    | SetTaskPushNotificationResponse
    | GetTaskPushNotificationResponse
)


# --- Agent card ------------------------------------------------------------


class AgentProvider(BaseModel):
    organization: str
    url: str | None = None


class AgentCapabilities(BaseModel):
    streaming: bool | None = None
    pushNotifications: bool | None = None
    stateTransitionHistory: bool | None = None


class AgentAuthentication(BaseModel):
    schemes: list[str]
    credentials: str | None = None


class AgentSkill(BaseModel):
    id: str
    name: str
    description: str | None = None
    tags: list[str] | None = None
    examples: list[str] | None = None
    inputModes: list[str] | None = None
    outputModes: list[str] | None = None


class AgentCard(BaseModel):
    """Static description of an agent, served at the well-known endpoint."""

    name: str
    description: str | None = None
    url: str
    provider: AgentProvider | None = None
    version: str
    documentationUrl: str | None = None
    capabilities: AgentCapabilities
    authentication: AgentAuthentication | None = None
    defaultInputModes: list[str] = ['text']
    defaultOutputModes: list[str] = ['text']
    skills: list[AgentSkill]
