"""Utility functions for creating A2A Artifact objects."""

from typing import Any

from a2a_runtime.types import Artifact, DataPart, Part, TextPart


def new_artifact(
    parts: list[Part],
    name: str | None = None,
    description: str | None = None,
    index: int = 0,
) -> Artifact:
    """Creates a new, complete (single chunk) Artifact."""
    return Artifact(
        parts=parts,
        name=name,
        description=description,
        index=index,
    )


def new_text_artifact(
    text: str,
    name: str | None = None,
    description: str | None = None,
) -> Artifact:
    """Creates an Artifact containing a single TextPart."""
    return new_artifact([Part(root=TextPart(text=text))], name, description)


def new_data_artifact(
    data: dict[str, Any],
    name: str | None = None,
    description: str | None = None,
) -> Artifact:
    """Creates an Artifact containing a single DataPart."""
    return new_artifact([Part(root=DataPart(data=data))], name, description)
