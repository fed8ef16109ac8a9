"""Utility functions for creating and reading A2A Message objects."""

from a2a_runtime.types import (
    Message,
    Part,
    Role,
    TextPart,
)


def new_agent_text_message(text: str) -> Message:
    """Creates an agent message holding a single TextPart."""
    return Message(role=Role.agent, parts=[Part(root=TextPart(text=text))])


def new_user_text_message(text: str) -> Message:
    """Creates a user message holding a single TextPart."""
    return Message(role=Role.user, parts=[Part(root=TextPart(text=text))])


def get_text_parts(parts: list[Part]) -> list[str]:
    """Extracts the text of every TextPart in ``parts``."""
    return [part.root.text for part in parts if isinstance(part.root, TextPart)]


def get_message_text(message: Message | None, delimiter='\n') -> str:
    """Joins all text content of a message.

    Args:
        message: The `Message`, or None.
        delimiter: Separator placed between the text of multiple TextParts.

    Returns:
        The joined text, or an empty string if there is none.
    """
    if message is None:
        return ''
    return delimiter.join(get_text_parts(message.parts))
