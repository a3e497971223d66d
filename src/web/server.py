"""Async HTTP server for the NeuroFluent API.

Uses aiohttp's AppRunner/TCPSite for non-blocking start/stop.
"""

from __future__ import annotations

import logging

from aiohttp import web

from src.auth import TokenAuthenticator
from src.chat.handler import ChatConfig, ChatHandler
from src.config import settings
from src.memory.store import MemoryStore
from src.web import chat, memories
from src.web.common import AUTHENTICATOR_KEY, CHAT_HANDLER_KEY, MEMORY_STORE_KEY

logger = logging.getLogger(__name__)


async def _health(request: web.Request) -> web.Response:
    """GET /health: liveness plus generation config presence."""
    config = request.app[CHAT_HANDLER_KEY].config
    return web.json_response({
        "status": "ok",
        "gemini_configured": bool(config.api_key),
        "model": config.model,
    })


def create_web_app(
    chat_handler: ChatHandler | None = None,
    memory_store: MemoryStore | None = None,
    authenticator: TokenAuthenticator | None = None,
) -> web.Application:
    """Build the aiohttp Application with routes.

    Collaborators default to ones built from ``settings``.
    """
    app = web.Application()
    app[CHAT_HANDLER_KEY] = chat_handler or ChatHandler(ChatConfig.from_settings(settings))
    app[MEMORY_STORE_KEY] = memory_store or MemoryStore.get()
    app[AUTHENTICATOR_KEY] = authenticator or TokenAuthenticator.from_settings()

    app.router.add_get("/health", _health)
    chat.setup_routes(app)
    memories.setup_routes(app)
    return app


class WebServer:
    """Manages the aiohttp server lifecycle."""

    def __init__(self, host: str | None = None, port: int | None = None) -> None:
        self.host = host if host is not None else settings.web_host
        self.port = port if port is not None else settings.web_port
        self._runner: web.AppRunner | None = None

    async def start(self, app: web.Application | None = None) -> None:
        """Start listening for API requests."""
        if self._runner is not None:
            return
        runner = web.AppRunner(app if app is not None else create_web_app())
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        try:
            await site.start()
        except Exception:
            await runner.cleanup()
            raise
        self._runner = runner
        logger.info("API server listening on %s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("API server stopped")
