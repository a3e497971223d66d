"""Bearer-token identity check for the HTTP API."""

from __future__ import annotations

import logging

from src.config import settings

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "bearer "


class TokenAuthenticator:
    """Resolves ``Authorization: Bearer <token>`` headers to user ids.

    An empty token table rejects every request.
    """

    def __init__(self, tokens: dict[str, str]) -> None:
        self._tokens = dict(tokens)
        self._warned = False

    @classmethod
    def from_settings(cls) -> TokenAuthenticator:
        return cls(settings.get_auth_tokens())

    def identify(self, authorization: str | None) -> str | None:
        """Return the user id for an Authorization header, or None."""
        if not self._tokens:
            if not self._warned:
                logger.warning("AUTH_TOKENS is empty, rejecting all API requests")
                self._warned = True
            return None

        if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
            return None

        token = authorization[len(_BEARER_PREFIX) :].strip()
        return self._tokens.get(token)
