"""Contract and helpers for the agent logic run on each task."""

from a2a_runtime.server.agent_execution.task_handler import (
    CallableTaskHandler,
    TaskHandler,
)
from a2a_runtime.server.agent_execution.task_updates import (
    artifact_update,
    completed_update,
    failed_update,
    input_required_update,
    status_update,
    text_artifact_update,
)


__all__ = [
    'CallableTaskHandler',
    'TaskHandler',
    'artifact_update',
    'completed_update',
    'failed_update',
    'input_required_update',
    'status_update',
    'text_artifact_update',
]
