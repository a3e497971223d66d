"""Shared request helpers and application keys for the HTTP API."""

from __future__ import annotations

from typing import Any

from aiohttp import web

from src.auth import TokenAuthenticator
from src.chat.handler import ChatHandler
from src.memory.store import MemoryStore

AUTHENTICATOR_KEY = web.AppKey("authenticator", TokenAuthenticator)
CHAT_HANDLER_KEY = web.AppKey("chat_handler", ChatHandler)
MEMORY_STORE_KEY = web.AppKey("memory_store", MemoryStore)


class InvalidJSON(Exception):
    """The request body could not be decoded as JSON."""


def current_user(request: web.Request) -> str | None:
    """Resolve the caller's user id from the Authorization header."""
    authenticator = request.app[AUTHENTICATOR_KEY]
    return authenticator.identify(request.headers.get("Authorization"))


async def read_json(request: web.Request) -> Any:
    """Decode the request body, raising InvalidJSON on malformed input."""
    try:
        return await request.json()
    except ValueError as exc:
        raise InvalidJSON from exc


def error_response(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)
