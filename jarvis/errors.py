"""Jarvis error types.

Error messages are fixed strings; clients receive them verbatim as a
one-element JSON array, so they must never carry internal state.
"""

from __future__ import annotations

from typing import Any


class JarvisError(Exception):
    """Base error for all Jarvis exceptions."""

    code: str = "internal_error"
    message: str = "Internal error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.details = details or {}
        super().__init__(self.message)

    def to_body(self) -> list[str]:
        """Wire body: a one-element list with the fixed message."""
        return [self.message]


class ValidationError(JarvisError):
    """Required input missing or malformed (422)."""

    code = "validation_error"
    message = "Missing data"
    status_code = 422


class MissingCredentialsError(ValidationError):
    """Validation failure on a key-gated route (401)."""

    code = "missing_credentials"
    status_code = 401


class AuthError(JarvisError):
    """Unknown identifier or inactive key (403).

    Both cases share one message so callers cannot probe key existence.
    """

    code = "invalid_api_key"
    message = "Invalid API key"
    status_code = 403


class NotFoundError(JarvisError):
    """Confirmation code or identifier not matched (404)."""

    code = "not_found"
    message = "Not found"
    status_code = 404


class DispatchFailure(JarvisError):
    """A delivery task could not be handed off (503)."""

    code = "dispatch_failure"
    message = "Dispatch unavailable"
    status_code = 503
