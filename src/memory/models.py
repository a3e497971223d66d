"""Memory journal data models."""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class MediaItem:
    """Metadata for an image or video attached to a memory.

    The file itself lives with an external CDN; only its URLs are kept.
    """

    id: str
    type: str  # "image" or "video"
    url: str
    mime_type: str = ""
    caption: str = ""
    thumbnail_url: str | None = None
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = datetime.now(UTC).isoformat()

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MediaItem:
        """Accept both client (camelCase) and stored (snake_case) keys."""
        return cls(
            id=str(raw.get("id") or uuid.uuid4().hex),
            type=str(raw.get("type") or "image"),
            url=str(raw.get("url") or ""),
            mime_type=str(raw.get("mimeType") or raw.get("mime_type") or ""),
            caption=str(raw.get("caption") or ""),
            thumbnail_url=raw.get("thumbnailUrl") or raw.get("thumbnail_url"),
            created_at=str(raw.get("createdAt") or raw.get("created_at") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "url": self.url,
            "mimeType": self.mime_type,
            "caption": self.caption,
            "createdAt": self.created_at,
        }
        if self.thumbnail_url:
            data["thumbnailUrl"] = self.thumbnail_url
        return data


@dataclass
class Memory:
    """A journal entry owned by one user.

    Attributes:
        id: Unique identifier (UUID hex).
        user_id: Owner; every store query is scoped by it.
        title: Short headline.
        content: Free text body.
        category: User-chosen grouping label.
        tags: Ordered tag list.
        timestamp: ISO 8601 creation time (UTC).
        media: Attached media metadata.
    """

    id: str
    user_id: str
    title: str
    content: str
    category: str
    tags: list[str] = field(default_factory=list)
    timestamp: str = ""
    media: list[MediaItem] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = datetime.now(UTC).isoformat()

    # -- Serialization ---------------------------------------------------------

    def to_row(self) -> tuple:
        """Serialize to a tuple matching the ``memories`` column order."""
        return (
            self.id,
            self.user_id,
            self.title,
            self.content,
            self.category,
            json.dumps(self.tags),
            json.dumps([asdict(m) for m in self.media]),
            self.timestamp,
        )

    @classmethod
    def from_row(cls, row: tuple) -> Memory:
        """Deserialize from a database row tuple."""
        return cls(
            id=row[0],
            user_id=row[1],
            title=row[2],
            content=row[3],
            category=row[4],
            tags=json.loads(row[5]) if row[5] else [],
            media=[MediaItem.from_dict(m) for m in json.loads(row[6])] if row[6] else [],
            timestamp=row[7],
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON shape returned by the HTTP API."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "tags": list(self.tags),
            "timestamp": self.timestamp,
            "userId": self.user_id,
            "media": [m.to_dict() for m in self.media],
        }
