"""Error taxonomy for the chat request handler.

Each error carries the HTTP status and a message that is safe to show the
caller. Upstream payloads and tracebacks stay in the logs.
"""


class ChatError(Exception):
    """Base class for classified chat failures."""

    status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(ChatError):
    status = 401


class BadRequest(ChatError):
    status = 400


class UpstreamError(ChatError):
    """The generation endpoint returned a status we do not map."""

    status = 500

    def __init__(self, upstream_status: int) -> None:
        super().__init__(f"AI service error: {upstream_status}")
        self.upstream_status = upstream_status


class InternalError(ChatError):
    status = 500
