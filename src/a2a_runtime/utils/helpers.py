"""General utility functions for the A2A runtime."""

import logging

from collections.abc import Callable
from typing import Any
from uuid import uuid4

from a2a_runtime.types import (
    Artifact,
    JSONRPCError,
    Task,
    TaskSendParams,
    TaskState,
    TaskStatus,
    UnsupportedOperationError,
)
from a2a_runtime.utils.errors import ServerError
from a2a_runtime.utils.telemetry import trace_function


logger = logging.getLogger(__name__)


@trace_function()
def create_task_obj(params: TaskSendParams) -> Task:
    """Creates a new task from the parameters of its first message.

    A session id is generated when the caller did not supply one.

    Args:
        params: The `TaskSendParams` carrying the task id and first message.

    Returns:
        A `Task` in the 'submitted' state with the message as its history.
    """
    return Task(
        id=params.id,
        sessionId=params.sessionId or str(uuid4()),
        status=TaskStatus(state=TaskState.submitted),
        history=[params.message],
        metadata=params.metadata,
    )


def append_message_to_task(task: Task, params: TaskSendParams) -> Task:
    """Returns a copy of ``task`` with the incoming message added to history."""
    history = list(task.history or [])
    history.append(params.message)
    return task.model_copy(update={'history': history})


@trace_function()
def append_artifact_to_task(task: Task, artifact: Artifact) -> None:
    """Merges a new artifact into the task's artifact list in place.

    The task keeps its own copy of the artifact, so later chunks never alter
    an artifact object the caller still holds.

    A chunk flagged ``append`` extends the parts of the existing artifact with
    the same ``index`` and takes over its ``lastChunk`` flag. Any other
    artifact, including an ``append`` chunk with no matching index, is added
    to the end of the list.

    Args:
        task: The `Task` to modify.
        artifact: The new `Artifact` or artifact chunk.
    """
    if task.artifacts is None:
        task.artifacts = []

    if artifact.append:
        for existing in task.artifacts:
            if existing.index == artifact.index:
                logger.debug(
                    f'Appending parts to artifact index {artifact.index} '
                    f'for task {task.id}'
                )
                existing.parts.extend(artifact.parts)
                existing.lastChunk = artifact.lastChunk
                return
        logger.debug(
            'No artifact with index %s in task %s, adding chunk as new.',
            artifact.index,
            task.id,
        )

    task.artifacts.append(artifact.model_copy(deep=True))


def limit_history(task: Task, history_length: int | None) -> Task:
    """Returns a copy of ``task`` keeping only the last messages of history.

    A missing or non-positive ``history_length`` yields an empty history.
    The stored task is never modified.
    """
    history = task.history or []
    if history_length and history_length > 0:
        history = history[-history_length:]
    else:
        history = []
    return task.model_copy(update={'history': list(history)})


def validate(
    expression: Callable[[Any], bool],
    error_message: str | None = None,
    error_type: type[JSONRPCError] = UnsupportedOperationError,
):
    """Decorator that checks a condition on ``self`` before running a method.

    Typically used to gate methods on agent card capabilities. If the
    expression is False, a `ServerError` wrapping ``error_type`` (by default
    `UnsupportedOperationError`) is raised instead of calling the method.

    Args:
        expression: Callable taking the instance and returning a boolean.
        error_message: Message for the error. Defaults to the expression's
            string representation.
    """

    def decorator(function):
        def wrapper(self, *args, **kwargs):
            if not expression(self):
                final_message = error_message or str(expression)
                logger.error(f'Unsupported Operation: {final_message}')
                raise ServerError(error_type(message=final_message))
            return function(self, *args, **kwargs)

        return wrapper

    return decorator
