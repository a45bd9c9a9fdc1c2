# Error types shared by the client, gateways and web layer.
# Created: 2026-10-18

from __future__ import annotations

from typing import Any

__all__ = [
    "ClinicDeskError",
    "ApiError",
    "AuthenticationError",
    "LoginRequired",
    "FormError",
]


class ClinicDeskError(Exception):
    """Base class for dashboard errors."""


class ApiError(ClinicDeskError):
    """Non-2xx response from the platform API."""

    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload

    def __repr__(self) -> str:
        return f"ApiError(status_code={self.status_code}, message={self.message!r})"


class AuthenticationError(ApiError):
    """Login rejected by the platform (bad credentials, disabled account)."""


class LoginRequired(ClinicDeskError):
    """The session can no longer authenticate; the user must sign in again.

    ``marker`` carries the token error (``RefreshAccessTokenError``,
    ``RefreshTokenMissing``) or ``SessionRequired`` when there was no session.
    """

    def __init__(self, message: str = "Login required", marker: str = "SessionRequired"):
        super().__init__(message)
        self.message = message
        self.marker = marker


class FormError(ClinicDeskError, ValueError):
    """Client-side validation failure, raised before any network call."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message
