"""Shared test fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.memory.store import MemoryStore

GEMINI_URL = "https://generativelanguage.googleapis.com/v1/models/gemini-1.5-flash:generateContent"


@pytest.fixture
def memory_store(tmp_path: Path) -> MemoryStore:
    """Create a MemoryStore backed by a temp database."""
    MemoryStore._reset()
    return MemoryStore(db_path=tmp_path / "test.db")


def gemini_response(
    payload: dict | None = None,
    status_code: int = 200,
    text: str | None = None,
) -> httpx.Response:
    """Build an httpx.Response as returned by generateContent."""
    request = httpx.Request("POST", GEMINI_URL)
    if text is not None:
        return httpx.Response(status_code=status_code, text=text, request=request)
    return httpx.Response(status_code=status_code, json=payload or {}, request=request)


def candidate(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def mock_httpx_client(mock_client_cls: MagicMock, response: httpx.Response | Exception) -> AsyncMock:
    """Wire up an AsyncClient context-manager mock whose post returns *response*."""
    mock_client = AsyncMock()
    if isinstance(response, Exception):
        mock_client.post.side_effect = response
    else:
        mock_client.post.return_value = response
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client
