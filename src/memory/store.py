"""MemoryStore: aiosqlite CRUD for journal memories."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

import aiosqlite

from src.config import settings
from src.memory.models import MediaItem, Memory

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS memories (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    category TEXT NOT NULL,
    tags TEXT NOT NULL DEFAULT '[]',
    media TEXT NOT NULL DEFAULT '[]',
    timestamp TEXT NOT NULL
)
"""

_CREATE_INDEX = """
CREATE INDEX IF NOT EXISTS idx_memories_user_ts ON memories (user_id, timestamp)
"""

_COLUMNS = "id, user_id, title, content, category, tags, media, timestamp"

UPDATABLE_FIELDS = ("title", "content", "category", "tags")


class MemoryStore:
    """Persists memories in SQLite. Every query is scoped to one owner.

    Singleton accessed via ``MemoryStore.get()``.  Pass an explicit *db_path*
    for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    _instance: MemoryStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path or settings.database_path
        self._initialised = False

    @classmethod
    def get(cls) -> MemoryStore:
        """Return the shared MemoryStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    # -- Internal helpers ------------------------------------------------------

    async def _connect(self) -> aiosqlite.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        db = await aiosqlite.connect(str(self._db_path))
        if not self._initialised:
            try:
                await db.execute(_CREATE_TABLE)
                await db.execute(_CREATE_INDEX)
                await db.commit()
            except Exception:
                await db.close()
                raise
            self._initialised = True
        return db

    async def _fetch(self, db: aiosqlite.Connection, user_id: str, memory_id: str) -> Memory | None:
        cursor = await db.execute(
            f"SELECT {_COLUMNS} FROM memories WHERE id = ? AND user_id = ?",
            (memory_id, user_id),
        )
        row = await cursor.fetchone()
        return Memory.from_row(row) if row else None

    # -- CRUD ------------------------------------------------------------------

    async def add(
        self,
        user_id: str,
        title: str,
        content: str,
        category: str,
        tags: list[str] | None = None,
        media: list[MediaItem] | None = None,
    ) -> Memory:
        """Insert a new memory for *user_id* and return it."""
        memory = Memory(
            id=uuid.uuid4().hex,
            user_id=user_id,
            title=title,
            content=content,
            category=category,
            tags=list(tags or []),
            media=list(media or []),
        )
        db = await self._connect()
        try:
            await db.execute(
                f"INSERT INTO memories ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                memory.to_row(),
            )
            await db.commit()
            logger.info("Added memory %s for user %s", memory.id, user_id)
            return memory
        finally:
            await db.close()

    async def list_for_user(self, user_id: str) -> list[Memory]:
        """Return all of a user's memories, newest first."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM memories WHERE user_id = ? ORDER BY timestamp DESC",
                (user_id,),
            )
            rows = await cursor.fetchall()
            return [Memory.from_row(row) for row in rows]
        finally:
            await db.close()

    async def get_memory(self, user_id: str, memory_id: str) -> Memory | None:
        """Fetch one memory, or None if it does not exist or is not the user's."""
        db = await self._connect()
        try:
            return await self._fetch(db, user_id, memory_id)
        finally:
            await db.close()

    async def update(self, user_id: str, memory_id: str, **fields) -> Memory | None:
        """Apply the non-empty updatable fields. Returns the updated memory or None.

        Only ``title``, ``content``, ``category`` and ``tags`` are written;
        empty values leave the stored value untouched.
        """
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v}
        db = await self._connect()
        try:
            existing = await self._fetch(db, user_id, memory_id)
            if existing is None:
                return None
            if changes:
                for key, value in changes.items():
                    setattr(existing, key, list(value) if key == "tags" else value)
                row = existing.to_row()
                await db.execute(
                    """
                    UPDATE memories SET title = ?, content = ?, category = ?, tags = ?
                    WHERE id = ? AND user_id = ?
                    """,
                    (row[2], row[3], row[4], row[5], memory_id, user_id),
                )
                await db.commit()
                logger.info("Updated memory %s (%s)", memory_id, ", ".join(sorted(changes)))
            return existing
        finally:
            await db.close()

    async def delete(self, user_id: str, memory_id: str) -> bool:
        """Delete a memory. Returns True if a row was removed."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                "DELETE FROM memories WHERE id = ? AND user_id = ?",
                (memory_id, user_id),
            )
            await db.commit()
            deleted = cursor.rowcount > 0
            if deleted:
                logger.info("Deleted memory %s", memory_id)
            return deleted
        finally:
            await db.close()
