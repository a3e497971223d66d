"""aiohttp JSON API for chat and the memory journal."""
