# Token Store: in-memory holder of one admin session's token pair.
# Created: 2026-10-18
#
# One store per authenticated user context. Values are immutable, so set()
# and clear() are single reference swaps and readers never see a partial token.

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class TokenError(str, Enum):
    """Marker recorded on a token the coordinator could not refresh."""

    REFRESH_FAILED = "RefreshAccessTokenError"
    REFRESH_TOKEN_MISSING = "RefreshTokenMissing"


@dataclass(frozen=True)
class AdminUser:
    """Profile of the signed-in administrator."""

    id: str
    email: str
    name: str
    image: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> AdminUser:
        first = data.get("firstName") or ""
        last = data.get("lastName") or ""
        return cls(
            id=str(data.get("_id") or data.get("id") or ""),
            email=data.get("email", ""),
            name=f"{first} {last}".strip(),
            image=data.get("profileImage") or "",
        )


@dataclass(frozen=True)
class SessionToken:
    """Access/refresh token pair plus expiry and error metadata."""

    access_token: str | None
    refresh_token: str | None = None
    expires_at: float | None = None  # Unix timestamp
    error: TokenError | None = None
    user: AdminUser | None = None

    @property
    def usable(self) -> bool:
        return bool(self.access_token) and self.error is None

    def invalidated(self, error: TokenError) -> SessionToken:
        """Copy with the access token dropped and *error* recorded."""
        return replace(self, access_token=None, error=error)


class TokenStore:
    """In-memory token store for a single user context."""

    def __init__(self, token: SessionToken | None = None):
        self._token = token

    def get(self) -> SessionToken | None:
        return self._token

    def set(self, token: SessionToken) -> None:
        """Replace any prior token."""
        self._token = token
        if token.error:
            logger.info("Session token marked %s", token.error.value)
        else:
            logger.debug("Session token replaced")

    def clear(self) -> None:
        if self._token is not None:
            logger.info("Session token cleared")
        self._token = None
