"""Utility functions for the A2A runtime."""

from a2a_runtime.utils.artifact import (
    new_artifact,
    new_data_artifact,
    new_text_artifact,
)
from a2a_runtime.utils.helpers import (
    append_artifact_to_task,
    append_message_to_task,
    create_task_obj,
    limit_history,
)
from a2a_runtime.utils.message import (
    get_message_text,
    get_text_parts,
    new_agent_text_message,
    new_user_text_message,
)
from a2a_runtime.utils.task import (
    is_terminal,
    status_event,
    with_state,
)


__all__ = [
    'append_artifact_to_task',
    'append_message_to_task',
    'create_task_obj',
    'get_message_text',
    'get_text_parts',
    'is_terminal',
    'limit_history',
    'new_agent_text_message',
    'new_artifact',
    'new_data_artifact',
    'new_text_artifact',
    'new_user_text_message',
    'status_event',
    'with_state',
]
