"""Builders for the updates a task handler emits."""

from a2a_runtime.types import (
    Artifact,
    ArtifactUpdate,
    StatusUpdate,
    TaskState,
    TaskStatus,
)
from a2a_runtime.utils.artifact import new_text_artifact
from a2a_runtime.utils.message import new_agent_text_message


def status_update(
    state: TaskState, text: str | None = None, final: bool = False
) -> StatusUpdate:
    """Builds a status update, with an agent message when ``text`` is given."""
    message = new_agent_text_message(text) if text is not None else None
    return StatusUpdate(
        status=TaskStatus(state=state, message=message), final=final
    )


def completed_update(text: str | None = None) -> StatusUpdate:
    """Final update marking the task completed."""
    return status_update(TaskState.completed, text, final=True)


def failed_update(message: str | None = None) -> StatusUpdate:
    """Final update marking the task failed."""
    return status_update(TaskState.failed, message, final=True)


def input_required_update(text: str) -> StatusUpdate:
    """Final update asking the caller for more input.

    The run ends here; the caller's next message for the same task id starts
    a new run.
    """
    return status_update(TaskState.input_required, text, final=True)


def artifact_update(*artifacts: Artifact) -> ArtifactUpdate:
    return ArtifactUpdate(artifacts=list(artifacts))


def text_artifact_update(text: str, name: str | None = None) -> ArtifactUpdate:
    """Update carrying a single text artifact."""
    return artifact_update(new_text_artifact(text, name=name))
