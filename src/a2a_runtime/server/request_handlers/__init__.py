"""Request handling components for the A2A runtime."""

from a2a_runtime.server.request_handlers.default_task_manager import (
    DefaultTaskManager,
)
from a2a_runtime.server.request_handlers.jsonrpc_handler import JSONRPCHandler
from a2a_runtime.server.request_handlers.response_helpers import (
    build_error_response,
    prepare_response_object,
)
from a2a_runtime.server.request_handlers.task_manager import TaskManager


__all__ = [
    'DefaultTaskManager',
    'JSONRPCHandler',
    'TaskManager',
    'build_error_response',
    'prepare_response_object',
]
