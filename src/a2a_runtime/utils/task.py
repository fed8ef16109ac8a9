"""Utility functions for inspecting and deriving A2A Task objects."""

from a2a_runtime.types import (
    TERMINAL_TASK_STATES,
    Task,
    TaskState,
    TaskStatus,
    TaskStatusUpdateEvent,
)


def is_terminal(task: Task) -> bool:
    """True when the task is completed, canceled or failed."""
    return task.status.state in TERMINAL_TASK_STATES


def with_state(task: Task, state: TaskState) -> Task:
    """Returns a copy of ``task`` with a fresh status in ``state``."""
    return task.model_copy(update={'status': TaskStatus(state=state)})


def status_event(task: Task, final: bool = False) -> TaskStatusUpdateEvent:
    """Builds the streaming event describing the task's current status."""
    return TaskStatusUpdateEvent(id=task.id, status=task.status, final=final)
