"""Async client for the Gemini ``generateContent`` REST endpoint."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class GeminiAPIError(Exception):
    """Raised when the generation endpoint answers with a non-2xx status."""

    def __init__(self, status_code: int, body: dict[str, Any]) -> None:
        super().__init__(f"Gemini API returned {status_code}")
        self.status_code = status_code
        self.body = body


def _parse_error_body(text: str) -> dict[str, Any]:
    try:
        parsed = json.loads(text)
    except ValueError:
        return {"error": text}
    if isinstance(parsed, dict):
        return parsed
    return {"error": parsed}


def extract_text(data: Any) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` or None if any level is missing."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


class GeminiClient:
    """Single-turn text generation against one Gemini model."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float | None = 60.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/v1/models/{self.model}:generateContent"

    async def generate_content(
        self,
        prompt: str,
        *,
        temperature: float,
        max_output_tokens: int,
    ) -> dict[str, Any]:
        """Send *prompt* as one user turn and return the decoded response.

        Raises:
            GeminiAPIError: the endpoint returned a non-2xx status.
            httpx.HTTPError: the request could not be completed.
            ValueError: the success body was not valid JSON.
        """
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
            },
        }

        logger.info("Gemini request: model=%s, prompt_chars=%d", self.model, len(prompt))
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                self.endpoint,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
            )

        logger.info("Gemini response status: %d", resp.status_code)
        if not resp.is_success:
            raise GeminiAPIError(resp.status_code, _parse_error_body(resp.text))

        return resp.json()
