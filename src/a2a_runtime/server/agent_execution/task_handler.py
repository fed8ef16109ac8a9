import logging

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable

from a2a_runtime.server.agent_execution.task_updates import (
    completed_update,
    text_artifact_update,
)
from a2a_runtime.types import Message, Task, TaskUpdate


logger = logging.getLogger(__name__)


class TaskHandler(ABC):
    """Agent logic invoked by the task manager for every incoming message."""

    @abstractmethod
    def handle(self, task: Task) -> AsyncIterator[TaskUpdate]:
        """Produces the updates of one run over ``task``.

        The task passed in is a snapshot whose history ends with the message
        just received. Implementations are usually async generators. The
        sequence must end with exactly one `StatusUpdate` with ``final=True``;
        updates after it are never read.
        """


class CallableTaskHandler(TaskHandler):
    """Answers the latest message with a text completion.

    Each run emits the completion as a text artifact followed by a final
    completed status carrying the same text as the agent's message.
    """

    def __init__(
        self,
        completer: Callable[[Message], Awaitable[str]],
        artifact_name: str = 'agent-response',
    ):
        """Initializes the CallableTaskHandler.

        Args:
            completer: Async function turning the latest message into a reply.
            artifact_name: Name given to the reply artifact.
        """
        self._completer = completer
        self._artifact_name = artifact_name

    async def handle(self, task: Task) -> AsyncIterator[TaskUpdate]:
        message = task.history[-1] if task.history else None
        if message is None:
            logger.warning('Task %s has no message to answer.', task.id)
            reply = ''
        else:
            reply = await self._completer(message)
        yield text_artifact_update(reply, name=self._artifact_name)
        yield completed_update(reply)
