"""Memory journal CRUD routes, scoped to the authenticated user."""

from __future__ import annotations

import logging
from typing import Any

from aiohttp import web

from src.memory.models import MediaItem
from src.web.common import MEMORY_STORE_KEY, InvalidJSON, current_user, error_response, read_json

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("title", "content", "category")
_MEDIA_TYPES = ("image", "video")


def _valid_tags(tags: Any) -> bool:
    return isinstance(tags, list) and all(isinstance(t, str) for t in tags)


def _valid_text_fields(body: dict[str, Any]) -> bool:
    """Title, content and category, when present, must be strings."""
    return all(body.get(f) is None or isinstance(body[f], str) for f in _TEXT_FIELDS)


def _valid_media_item(item: Any) -> bool:
    return (
        isinstance(item, dict)
        and item.get("type") in _MEDIA_TYPES
        and isinstance(item.get("url"), str)
        and bool(item["url"])
    )


async def list_memories(request: web.Request) -> web.Response:
    """GET /api/memories: all of the caller's memories, newest first."""
    user_id = current_user(request)
    if user_id is None:
        return error_response("Unauthorized", 401)

    try:
        memories = await request.app[MEMORY_STORE_KEY].list_for_user(user_id)
    except Exception:
        logger.exception("Error fetching memories")
        return error_response("Failed to fetch memories", 500)

    return web.json_response({"memories": [m.to_dict() for m in memories]})


async def create_memory(request: web.Request) -> web.Response:
    """POST /api/memories: create a memory from title, content, category, tags and media."""
    user_id = current_user(request)
    if user_id is None:
        return error_response("Unauthorized", 401)

    try:
        body = await read_json(request)
    except InvalidJSON:
        return error_response("invalid JSON", 400)
    if not isinstance(body, dict):
        body = {}

    title = body.get("title")
    content = body.get("content")
    category = body.get("category")
    if not title or not content or not category:
        return error_response("Title, content, and category are required", 400)
    if not _valid_text_fields(body):
        return error_response("Title, content, and category must be strings", 400)

    tags = body.get("tags") or []
    if not _valid_tags(tags):
        return error_response("Tags must be a list of strings", 400)

    raw_media = body.get("media") or []
    if not isinstance(raw_media, list) or not all(_valid_media_item(m) for m in raw_media):
        return error_response("Media items need a type of image or video and a url", 400)

    try:
        memory = await request.app[MEMORY_STORE_KEY].add(
            user_id,
            title=title,
            content=content,
            category=category,
            tags=tags,
            media=[MediaItem.from_dict(m) for m in raw_media],
        )
    except Exception:
        logger.exception("Error creating memory")
        return error_response("Failed to create memory", 500)

    return web.json_response(memory.to_dict(), status=201)


async def get_memory(request: web.Request) -> web.Response:
    """GET /api/memories/{id}"""
    user_id = current_user(request)
    if user_id is None:
        return error_response("Unauthorized", 401)

    memory_id = request.match_info["id"]
    try:
        memory = await request.app[MEMORY_STORE_KEY].get_memory(user_id, memory_id)
    except Exception:
        logger.exception("Error fetching memory %s", memory_id)
        return error_response("Failed to fetch memory", 500)

    if memory is None:
        return error_response("Memory not found", 404)
    return web.json_response(memory.to_dict())


async def update_memory(request: web.Request) -> web.Response:
    """PATCH /api/memories/{id}: update title, content, category or tags."""
    user_id = current_user(request)
    if user_id is None:
        return error_response("Unauthorized", 401)

    try:
        updates = await read_json(request)
    except InvalidJSON:
        return error_response("invalid JSON", 400)
    if not isinstance(updates, dict):
        updates = {}

    if not _valid_text_fields(updates):
        return error_response("Title, content, and category must be strings", 400)
    if updates.get("tags") and not _valid_tags(updates["tags"]):
        return error_response("Tags must be a list of strings", 400)

    memory_id = request.match_info["id"]
    try:
        memory = await request.app[MEMORY_STORE_KEY].update(
            user_id,
            memory_id,
            title=updates.get("title"),
            content=updates.get("content"),
            category=updates.get("category"),
            tags=updates.get("tags"),
        )
    except Exception:
        logger.exception("Error updating memory %s", memory_id)
        return error_response("Failed to update memory", 500)

    if memory is None:
        return error_response("Memory not found", 404)
    return web.json_response(memory.to_dict())


async def delete_memory(request: web.Request) -> web.Response:
    """DELETE /api/memories/{id}"""
    user_id = current_user(request)
    if user_id is None:
        return error_response("Unauthorized", 401)

    memory_id = request.match_info["id"]
    try:
        deleted = await request.app[MEMORY_STORE_KEY].delete(user_id, memory_id)
    except Exception:
        logger.exception("Error deleting memory %s", memory_id)
        return error_response("Failed to delete memory", 500)

    if not deleted:
        return error_response("Memory not found", 404)
    return web.json_response({"success": True})


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/api/memories", list_memories)
    app.router.add_post("/api/memories", create_memory)
    app.router.add_get("/api/memories/{id}", get_memory)
    app.router.add_patch("/api/memories/{id}", update_memory)
    app.router.add_delete("/api/memories/{id}", delete_memory)
