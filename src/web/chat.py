"""Chat routes: the memory-context chat call and context rendering."""

from __future__ import annotations

import logging

from aiohttp import web

from src.memory.context import format_memory_context
from src.web.common import (
    CHAT_HANDLER_KEY,
    MEMORY_STORE_KEY,
    InvalidJSON,
    current_user,
    error_response,
    read_json,
)

logger = logging.getLogger(__name__)


async def handle_chat(request: web.Request) -> web.Response:
    """POST /api/chat: answer a question using the caller's memory context."""
    handler = request.app[CHAT_HANDLER_KEY]
    user_id = current_user(request)

    body = None
    if user_id is not None:
        try:
            body = await read_json(request)
        except InvalidJSON:
            logger.warning("Chat bad request: invalid JSON (user=%s)", user_id)
            return error_response("invalid JSON", 400)

    result = await handler.handle(user_id, body)
    if not result.success:
        logger.info("Chat request failed: status=%d, error=%s", result.status, result.error)
    return web.json_response(result.to_body(), status=result.status)


async def handle_chat_context(request: web.Request) -> web.Response:
    """GET /api/chat/context: the caller's memories rendered for the chat prompt."""
    user_id = current_user(request)
    if user_id is None:
        return error_response("Unauthorized", 401)

    try:
        memories = await request.app[MEMORY_STORE_KEY].list_for_user(user_id)
    except Exception:
        logger.exception("Failed to build memory context for user %s", user_id)
        return error_response("Failed to fetch memories", 500)

    return web.json_response({"memoryContext": format_memory_context(memories)})


def setup_routes(app: web.Application) -> None:
    app.router.add_post("/api/chat", handle_chat)
    app.router.add_get("/api/chat/context", handle_chat_context)
