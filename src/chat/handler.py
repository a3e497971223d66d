"""Memory-context chat request handler.

Turns one chat request into either a generated reply or a classified error:

1. Reject anonymous callers and malformed bodies before any network call.
2. Assemble the prompt from the transcript and the caller's memory context.
3. Make a single ``generateContent`` call and extract the first text part.

The handler keeps no state between requests. Its configuration is fixed at
construction time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from src.chat.errors import BadRequest, ChatError, InternalError, Unauthorized, UpstreamError
from src.chat.models import ChatMessage, ChatResult
from src.chat.prompt import build_payload, render_prompt
from src.config import DEFAULT_GEMINI_MODEL
from src.llm.gemini import GeminiAPIError, GeminiClient, extract_text

if TYPE_CHECKING:
    from src.config import Settings

logger = logging.getLogger(__name__)

FALLBACK_RESPONSE = "I'm sorry, I couldn't generate a response. Please try again."


@dataclass(frozen=True)
class ChatConfig:
    """Generation settings injected into the handler."""

    api_key: str
    model: str = DEFAULT_GEMINI_MODEL
    base_url: str = "https://generativelanguage.googleapis.com"
    temperature: float = 0.7
    max_output_tokens: int = 800
    timeout: float | None = 60.0

    @classmethod
    def from_settings(cls, s: Settings) -> ChatConfig:
        return cls(
            api_key=s.gemini_api_key,
            model=s.gemini_model or DEFAULT_GEMINI_MODEL,
            base_url=s.gemini_api_base,
            timeout=s.gemini_timeout_seconds,
        )


ClientFactory = Callable[[ChatConfig], GeminiClient]


def _default_client_factory(config: ChatConfig) -> GeminiClient:
    return GeminiClient(
        api_key=config.api_key,
        model=config.model,
        base_url=config.base_url,
        timeout=config.timeout,
    )


class ChatHandler:
    """Answers chat requests using the caller's memories as context."""

    def __init__(
        self,
        config: ChatConfig,
        client_factory: ClientFactory = _default_client_factory,
    ) -> None:
        self.config = config
        self._client_factory = client_factory

    async def handle(self, user_id: str | None, body: Any) -> ChatResult:
        """Process one request body on behalf of *user_id*.

        Never raises: every failure is returned as a ``ChatResult`` with an
        error message that is safe to show the caller.
        """
        try:
            reply = await self._respond(user_id, body)
        except ChatError as exc:
            return ChatResult(status=exc.status, error=exc.message)
        except Exception:
            logger.exception("Chat request failed")
            err = InternalError("Failed to process your request")
            return ChatResult(status=err.status, error=err.message)
        return ChatResult(status=200, response=reply)

    async def _respond(self, user_id: str | None, body: Any) -> str:
        if not user_id:
            raise Unauthorized("Unauthorized")

        raw_messages = body.get("messages") if isinstance(body, dict) else None
        if not raw_messages or not isinstance(raw_messages, list):
            raise BadRequest("Messages are required")

        if not self.config.api_key:
            logger.error("GEMINI_API_KEY is not configured")
            raise InternalError("API key not configured")

        messages = [ChatMessage.from_raw(m) for m in raw_messages]
        raw_context = body.get("memoryContext")
        memory_context = str(raw_context) if raw_context else None

        prompt = render_prompt(build_payload(messages, memory_context))
        logger.info(
            "Chat request: user=%s, turns=%d, has_memories=%s",
            user_id,
            len(messages),
            memory_context is not None,
        )

        client = self._client_factory(self.config)
        try:
            data = await client.generate_content(
                prompt,
                temperature=self.config.temperature,
                max_output_tokens=self.config.max_output_tokens,
            )
        except GeminiAPIError as exc:
            raise self._classify(exc) from exc

        return extract_text(data) or FALLBACK_RESPONSE

    @staticmethod
    def _classify(exc: GeminiAPIError) -> ChatError:
        """Map an upstream status to the error the caller sees."""
        logger.error("Gemini API error %d: %s", exc.status_code, exc.body)
        if exc.status_code == 400:
            return BadRequest("Bad request to AI service")
        if exc.status_code == 401:
            return Unauthorized("API key unauthorized")
        return UpstreamError(exc.status_code)
