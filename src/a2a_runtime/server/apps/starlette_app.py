import json
import logging

from collections.abc import AsyncGenerator, AsyncIterable
from typing import Any

from pydantic import ValidationError
from sse_starlette.sse import EventSourceResponse
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from a2a_runtime.server.request_handlers.jsonrpc_handler import JSONRPCHandler
from a2a_runtime.server.request_handlers.task_manager import TaskManager
from a2a_runtime.types import (
    A2ARequest,
    AgentCard,
    CancelTaskRequest,
    GetTaskPushNotificationRequest,
    GetTaskRequest,
    InternalError,
    InvalidRequestError,
    JSONParseError,
    JSONRPCError,
    JSONRPCErrorResponse,
    JSONRPCResponse,
    MethodNotFoundError,
    SendTaskRequest,
    SendTaskStreamingRequest,
    SendTaskStreamingResponse,
    SetTaskPushNotificationRequest,
    TaskResubscriptionRequest,
    UnknownMethodRequest,
    UnsupportedOperationError,
)
from a2a_runtime.utils.errors import MethodNotImplementedError, ServerError


logger = logging.getLogger(__name__)

CLIENT_ERROR_TYPES = (
    JSONParseError,
    InvalidRequestError,
    MethodNotFoundError,
)


class A2AStarletteApplication:
    """Starlette application serving the A2A protocol endpoints.

    Decodes JSON-RPC requests, dispatches them to a `JSONRPCHandler` and
    writes plain JSON responses or, for streaming methods, Server-Sent Events
    whose ``data`` is one JSON-RPC response envelope per event.
    """

    def __init__(self, agent_card: AgentCard, task_manager: TaskManager):
        """Initializes the A2AStarletteApplication.

        Args:
            agent_card: The AgentCard describing the agent's capabilities.
            task_manager: The `TaskManager` processing the requests.
        """
        self.agent_card = agent_card
        self.handler = JSONRPCHandler(
            agent_card=agent_card, task_manager=task_manager
        )

    def _generate_error_response(
        self, request_id: str | int | None, error: JSONRPCError
    ) -> JSONResponse:
        """Creates the JSON-RPC error response for a failed request.

        Client mistakes are logged as warnings, everything else as errors.
        """
        error_resp = JSONRPCErrorResponse(id=request_id, error=error)

        log_level = (
            logging.WARNING
            if isinstance(error, CLIENT_ERROR_TYPES)
            else logging.ERROR
        )
        logger.log(
            log_level,
            f'Request Error (ID: {request_id}): '
            f"Code={error.code}, Message='{error.message}'"
            f'{", Data=" + str(error.data) if error.data else ""}',
        )
        return JSONResponse(
            error_resp.model_dump(mode='json', exclude_none=True),
            status_code=200,
        )

    async def _handle_requests(self, request: Request) -> Response:
        """Handles POST requests to the JSON-RPC endpoint.

        Malformed JSON, requests failing validation, unknown methods and
        unexpected failures are all answered with a JSON-RPC error response
        and HTTP status 200.
        """
        request_id = None

        try:
            body = await request.json()
            if isinstance(body, dict):
                request_id = body.get('id')
            a2a_request = A2ARequest.model_validate(body)

            request_id = a2a_request.root.id
            request_obj = a2a_request.root

            if isinstance(request_obj, UnknownMethodRequest):
                return self._generate_error_response(
                    request_id,
                    MethodNotFoundError(
                        message=f'Method {request_obj.method} not found'
                    ),
                )
            if isinstance(
                request_obj,
                SendTaskStreamingRequest | TaskResubscriptionRequest,
            ):
                return self._process_streaming_request(request_obj)

            return await self._process_non_streaming_request(request_obj)
        except MethodNotImplementedError:
            return self._generate_error_response(
                request_id, UnsupportedOperationError()
            )
        except ServerError as e:
            return self._generate_error_response(request_id, e.to_error())
        except json.decoder.JSONDecodeError as e:
            return self._generate_error_response(
                None, JSONParseError(message=str(e))
            )
        except ValidationError as e:
            return self._generate_error_response(
                request_id if isinstance(request_id, str | int) else None,
                InvalidRequestError(data=json.loads(e.json())),
            )
        except Exception as e:
            logger.exception(f'Unhandled exception: {e}')
            return self._generate_error_response(
                request_id, InternalError(message=str(e))
            )

    def _process_streaming_request(
        self,
        request_obj: SendTaskStreamingRequest | TaskResubscriptionRequest,
    ) -> Response:
        if isinstance(request_obj, SendTaskStreamingRequest):
            handler_result = self.handler.on_send_task_subscribe(request_obj)
        else:
            handler_result = self.handler.on_resubscribe_to_task(request_obj)

        return self._create_response(handler_result)

    async def _process_non_streaming_request(self, request_obj: Any) -> Response:
        match request_obj:
            case SendTaskRequest():
                handler_result = await self.handler.on_send_task(request_obj)
            case CancelTaskRequest():
                handler_result = await self.handler.on_cancel_task(request_obj)
            case GetTaskRequest():
                handler_result = await self.handler.on_get_task(request_obj)
            case SetTaskPushNotificationRequest():
                handler_result = await self.handler.set_push_notification(
                    request_obj
                )
            case GetTaskPushNotificationRequest():
                handler_result = await self.handler.get_push_notification(
                    request_obj
                )
            case _:
                logger.error(
                    f'Unhandled validated request type: {type(request_obj)}'
                )
                handler_result = JSONRPCErrorResponse(
                    id=request_obj.id,
                    error=UnsupportedOperationError(
                        message=f'Request type {type(request_obj).__name__} is unknown.'
                    ),
                )

        return self._create_response(handler_result)

    def _create_response(
        self,
        handler_result: (
            AsyncIterable[SendTaskStreamingResponse]
            | JSONRPCErrorResponse
            | JSONRPCResponse
        ),
    ) -> Response:
        if isinstance(handler_result, AsyncIterable):

            async def event_generator(
                stream: AsyncIterable[SendTaskStreamingResponse],
            ) -> AsyncGenerator[dict[str, str]]:
                async for item in stream:
                    yield {'data': item.root.model_dump_json(exclude_none=True)}

            return EventSourceResponse(event_generator(handler_result))
        if isinstance(handler_result, JSONRPCErrorResponse):
            return JSONResponse(
                handler_result.model_dump(mode='json', exclude_none=True)
            )

        return JSONResponse(
            handler_result.root.model_dump(mode='json', exclude_none=True)
        )

    async def _handle_get_agent_card(self, request: Request) -> JSONResponse:
        return JSONResponse(
            self.agent_card.model_dump(mode='json', exclude_none=True)
        )

    def routes(
        self,
        agent_card_url: str = '/.well-known/agent.json',
        rpc_url: str = '/',
    ) -> list[Route]:
        """Returns the Starlette routes of the A2A endpoints.

        Args:
            agent_card_url: Path serving the agent card (GET).
            rpc_url: Path of the JSON-RPC endpoint (POST).
        """
        return [
            Route(
                rpc_url,
                self._handle_requests,
                methods=['POST'],
                name='a2a_handler',
            ),
            Route(
                agent_card_url,
                self._handle_get_agent_card,
                methods=['GET'],
                name='agent_card',
            ),
        ]

    def build(
        self,
        agent_card_url: str = '/.well-known/agent.json',
        rpc_url: str = '/',
        **kwargs: Any,
    ) -> Starlette:
        """Builds the Starlette application.

        Args:
            agent_card_url: Path serving the agent card.
            rpc_url: Path of the JSON-RPC endpoint.
            **kwargs: Passed through to the `Starlette` constructor; extra
                ``routes`` are appended after the A2A ones.
        """
        app_routes = self.routes(agent_card_url, rpc_url)
        if 'routes' in kwargs:
            kwargs['routes'] = app_routes + list(kwargs['routes'])
        else:
            kwargs['routes'] = app_routes

        return Starlette(**kwargs)
