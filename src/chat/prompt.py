"""Prompt assembly for memory-grounded chat."""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.chat.models import ChatMessage, PromptPayload

if TYPE_CHECKING:
    from collections.abc import Sequence

NO_MEMORIES_PLACEHOLDER = "No memories available yet."

SYSTEM_INSTRUCTIONS = """\
You are an AI assistant that helps users access and analyze their personal memories.
Your task is to use the provided memory context to assist the user by:
1. Retrieving relevant memories when asked
2. Finding connections between different memories
3. Providing insights and advice based on the user's personal experiences
4. Answering questions using information from their memories"""

CLOSING_INSTRUCTIONS = (
    "Respond in a helpful, friendly manner. If you cannot find relevant information "
    "in the memories, acknowledge this and provide a general response."
)

PROMPT_TEMPLATE = """\
{system_instructions}

Below is the user's memory database. Use this information to respond to their query:

{memory_context}

Conversation history:
{history}

User's current question: {current_question}

{closing}"""


def format_history(messages: Sequence[ChatMessage]) -> str:
    """Render turns as ``User: ...`` / ``Assistant: ...`` lines in order."""
    return "\n".join(f"{m.speaker}: {m.content}" for m in messages)


def build_payload(messages: Sequence[ChatMessage], memory_context: str | None) -> PromptPayload:
    """Split a non-empty transcript into prompt sections.

    The last message is the current question; everything before it is
    history.
    """
    return PromptPayload(
        system_instructions=SYSTEM_INSTRUCTIONS,
        memory_context=memory_context or NO_MEMORIES_PLACEHOLDER,
        history=format_history(messages[:-1]),
        current_question=messages[-1].content,
    )


def render_prompt(payload: PromptPayload) -> str:
    """Render a payload as the single text part sent to the model."""
    return PROMPT_TEMPLATE.format(
        system_instructions=payload.system_instructions,
        memory_context=payload.memory_context,
        history=payload.history,
        current_question=payload.current_question,
        closing=CLOSING_INSTRUCTIONS,
    )
