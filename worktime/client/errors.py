"""Error taxonomy for calls made by the client core.

Every failure a caller can see is an ``ApiError``; the subclass says what the
user can do about it. Field-level problems travel on ``errors``.
"""

from __future__ import annotations

from typing import Any

import httpx


class ApiError(Exception):
    """A request failed; ``message`` is safe to show to the user."""

    def __init__(self, message: str, *, status_code: int | None = None, errors: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors


class ValidationError(ApiError):
    """Missing or malformed input (HTTP 400/422)."""


class AuthError(ApiError):
    """Missing, invalid or expired credential (HTTP 401)."""


class NotFoundError(ApiError):
    """Resource absent, or owned by someone else (HTTP 404)."""


class ConflictError(ApiError):
    """The resource already exists, e.g. a registered email."""


class TransientError(ApiError):
    """Network failure, timeout or unavailable server. Retry is up to the user."""


_RETRYABLE_STATUSES = {502, 503, 504}


def _server_message(response: httpx.Response) -> tuple[str | None, Any]:
    try:
        body = response.json()
    except ValueError:
        return None, None
    if not isinstance(body, dict):
        return None, None
    message = body.get("error") or body.get("message")
    return (str(message) if message else None), body.get("errors")


def error_from_response(response: httpx.Response) -> ApiError:
    status = response.status_code
    message, errors = _server_message(response)
    message = message or response.reason_phrase or "Request failed"
    kwargs = {"status_code": status, "errors": errors}
    if status == 401:
        return AuthError(message, **kwargs)
    if status == 404:
        return NotFoundError(message, **kwargs)
    if status == 409 or (status == 400 and "already registered" in message.lower()):
        return ConflictError(message, **kwargs)
    if status in (400, 422):
        return ValidationError(message, **kwargs)
    if status in _RETRYABLE_STATUSES:
        return TransientError(message, **kwargs)
    return ApiError(message, **kwargs)
