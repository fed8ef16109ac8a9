"""Exceptions raised by the A2A runtime."""

from a2a_runtime.types import InternalError, JSONRPCError


class A2AServerError(Exception):
    """Base exception for A2A Server errors."""


class MethodNotImplementedError(A2AServerError):
    """Raised by task managers for methods they do not implement."""

    def __init__(
        self, message: str = 'This method is not implemented by the server'
    ):
        self.message = message
        super().__init__(f'Not Implemented operation Error: {message}')


class TaskStoreError(A2AServerError):
    """Raised when a task store backend fails to read or write."""


class ServerError(Exception):
    """Carries a protocol error out of the request handling logic.

    The JSON-RPC layer turns the wrapped error into the ``error`` member of
    the response. A missing error is reported as an `InternalError`.
    """

    def __init__(self, error: JSONRPCError | None):
        self.error = error
        super().__init__(error.message if error else 'Internal error')

    def to_error(self) -> JSONRPCError:
        return self.error if self.error else InternalError()
