"""Render a user's memories as the plain-text context block for chat."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from src.memory.models import Memory


def _format_date(timestamp: str) -> str:
    try:
        return datetime.fromisoformat(timestamp).date().isoformat()
    except ValueError:
        return timestamp


def format_memory(memory: Memory) -> str:
    """One memory as a labelled block followed by a blank line."""
    return (
        f"Title: {memory.title}\n"
        f"Category: {memory.category}\n"
        f"Content: {memory.content}\n"
        f"Tags: {', '.join(memory.tags)}\n"
        f"Date: {_format_date(memory.timestamp)}\n\n"
    )


def format_memory_context(memories: Iterable[Memory]) -> str:
    """Concatenate memory blocks. Empty input gives an empty string."""
    return "".join(format_memory(m) for m in memories)
