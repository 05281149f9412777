"""Error taxonomy shared by the chat services, HTTP routes and socket controller."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class ChatError(RuntimeError):
    """Base exception for all chat failures.

    Every subclass carries a stable machine-readable ``code`` and the HTTP status
    the request surface should answer with.
    """

    code = "chat_error"
    status_code = 500
    default_message = "Chat operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)

    def to_payload(self) -> dict[str, Any]:
        """Return the structured error body used by REST and socket callers."""
        return {"error": {"code": self.code, "message": self.message}}


class AuthError(ChatError):
    """Raised when a credential is missing, malformed, expired or badly signed.

    All of those cases are reported identically so callers never learn which
    check failed.
    """

    code = "unauthorized"
    status_code = 401
    default_message = "Could not validate credentials"


class ValidationError(ChatError):
    """Raised when a request is rejected before any persistence attempt."""

    code = "invalid_request"
    status_code = 400
    default_message = "Invalid request"


class UnknownActionError(ValidationError):
    """Raised when a legacy action string is not one of the supported actions."""

    code = "invalid_method"
    default_message = "Invalid method"

    def __init__(self, action: str | None, available: Sequence[str]) -> None:
        super().__init__(f"Invalid method: {action!r}")
        self.action = action
        self.available = list(available)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["error"]["availableMethods"] = self.available
        return payload


class NotFoundError(ChatError):
    """Raised when a user or conversation is unknown or not visible to the caller."""

    code = "not_found"
    status_code = 404
    default_message = "Not found"


class PersistenceError(ChatError):
    """Raised when a transaction fails and has been rolled back.

    The underlying cause is logged where it happens; only a generic message is
    exposed to callers.
    """

    code = "persistence_error"
    status_code = 500
    default_message = "Failed to persist chat data"
