"""Memory-grounded chat: prompt assembly, generation call, error mapping."""

from src.chat.errors import BadRequest, ChatError, InternalError, Unauthorized, UpstreamError
from src.chat.handler import FALLBACK_RESPONSE, ChatConfig, ChatHandler
from src.chat.models import ChatMessage, ChatResult, PromptPayload

__all__ = [
    "FALLBACK_RESPONSE",
    "BadRequest",
    "ChatConfig",
    "ChatError",
    "ChatHandler",
    "ChatMessage",
    "ChatResult",
    "InternalError",
    "PromptPayload",
    "Unauthorized",
    "UpstreamError",
]
