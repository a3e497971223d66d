"""Memory journal: models, SQLite store, and chat context rendering."""

from src.memory.context import format_memory_context
from src.memory.models import MediaItem, Memory
from src.memory.store import MemoryStore

__all__ = ["MediaItem", "Memory", "MemoryStore", "format_memory_context"]
