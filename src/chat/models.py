"""Data models for chat requests and responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ChatMessage:
    """A single conversation turn as sent by the client."""

    role: str  # "user" or "assistant"
    content: str

    @classmethod
    def from_raw(cls, raw: Any) -> ChatMessage:
        """Build a message from an untrusted JSON element.

        Shape is not validated: anything that is not an object becomes an
        empty message, and a missing or null content renders as empty text.
        """
        if not isinstance(raw, dict):
            return cls(role="", content="")
        role = raw.get("role")
        content = raw.get("content")
        return cls(
            role=role if isinstance(role, str) else "",
            content="" if content is None else str(content),
        )

    @property
    def speaker(self) -> str:
        return "User" if self.role == "user" else "Assistant"


@dataclass(frozen=True)
class PromptPayload:
    """The sections of one generation prompt. Built per request, never stored."""

    system_instructions: str
    memory_context: str
    history: str
    current_question: str


@dataclass
class ChatResult:
    """Outcome of one chat request: a reply or a classified error."""

    status: int
    response: str | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_body(self) -> dict[str, str]:
        """JSON body for the HTTP response."""
        if self.error is not None:
            return {"error": self.error}
        return {"response": self.response or ""}
