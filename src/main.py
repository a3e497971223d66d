"""NeuroFluent API entry point."""

import asyncio
import contextlib
import logging

from src.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)


async def _serve() -> None:
    from src.web.server import WebServer

    server = WebServer()
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main() -> None:
    """Start the API server and run until interrupted."""
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is empty, chat requests will fail")
    if not settings.get_auth_tokens():
        logger.warning("AUTH_TOKENS is empty, API will reject all requests")

    logger.info("Starting NeuroFluent with model %s...", settings.gemini_model)
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_serve())


if __name__ == "__main__":
    main()
