"""Access-token refresh coordination.

The coordinator owns every write to a session's ``TokenStore`` after login.
Staleness is detected two ways:

- proactively, by ``ensure_fresh()`` before a token is attached, once the token
  is inside the safety window before ``expires_at``;
- reactively, by ``refresh_after_failure()`` when the API answers 401.

Both paths funnel into one shared refresh task, so N concurrent callers that
find the token expiring cause exactly one call to the refresh endpoint.  A
failed refresh marks the token (``RefreshAccessTokenError`` or
``RefreshTokenMissing``) and drops the access token; that state is terminal
until the next login stores a new token.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from enum import Enum

from clinicdesk.auth.token_store import SessionToken, TokenError, TokenStore

logger = logging.getLogger(__name__)

__all__ = [
    "REFRESH_TIMEOUT",
    "SAFETY_WINDOW",
    "TOKEN_MAX_AGE",
    "RefreshCoordinator",
    "RefreshedTokens",
    "TokenState",
]

TOKEN_MAX_AGE = 24 * 60 * 60  # seconds
SAFETY_WINDOW = 60  # seconds before expiry that count as "due"
REFRESH_TIMEOUT = 10.0

# Smallest step expires_at moves forward when the clock has not.
_MIN_ADVANCE = 0.001


class TokenState(str, Enum):
    VALID = "valid"
    EXPIRING = "expiring"
    REFRESHING = "refreshing"
    INVALID = "invalid"


@dataclass(frozen=True)
class RefreshedTokens:
    """What the refresh endpoint hands back."""

    access_token: str
    refresh_token: str | None = None


Refresher = Callable[[str], Awaitable[RefreshedTokens]]


class RefreshCoordinator:
    """Keeps one session's access token fresh.

    Args:
        store: The session's token store.
        refresher: Coroutine function exchanging a refresh token for new tokens.
        max_age: Lifetime given to each new access token, in seconds.
        safety_window: Seconds before expiry at which a refresh becomes due.
        timeout: Upper bound on a single refresh call.
        clock: Time source returning unix seconds.
    """

    def __init__(
        self,
        store: TokenStore,
        refresher: Refresher,
        *,
        max_age: float = TOKEN_MAX_AGE,
        safety_window: float = SAFETY_WINDOW,
        timeout: float = REFRESH_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._refresher = refresher
        self._max_age = max_age
        self._safety_window = safety_window
        self._timeout = timeout
        self._clock = clock
        self._pending: asyncio.Task[SessionToken | None] | None = None

    @property
    def store(self) -> TokenStore:
        return self._store

    @property
    def state(self) -> TokenState:
        if self._pending is not None:
            return TokenState.REFRESHING
        token = self._store.get()
        if token is None or not token.usable:
            return TokenState.INVALID
        if self._is_due(token):
            return TokenState.EXPIRING
        return TokenState.VALID

    def new_expiry(self) -> float:
        """Expiry for a token issued now."""
        return self._clock() + self._max_age

    async def ensure_fresh(self) -> SessionToken | None:
        """Return the current token, refreshing first if it is due."""
        if self._pending is not None:
            return await asyncio.shield(self._pending)

        token = self._store.get()
        if token is None or token.error is not None:
            return token
        if token.access_token and not self._is_due(token):
            return token
        return await self._refresh()

    async def refresh_after_failure(self, sent_access_token: str | None) -> SessionToken | None:
        """Handle a 401 for a request that carried *sent_access_token*.

        If another caller already replaced the token, the newer one is returned
        without calling the refresh endpoint again.
        """
        token = self._store.get()
        if token is None or token.error is not None:
            return token
        if self._pending is None and token.usable and token.access_token != sent_access_token:
            return token
        return await self._refresh()

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _is_due(self, token: SessionToken) -> bool:
        if token.expires_at is None:
            return False
        return self._clock() >= token.expires_at - self._safety_window

    async def _refresh(self) -> SessionToken | None:
        if self._pending is None:
            self._pending = asyncio.get_running_loop().create_task(self._run_refresh())
        # shield: a cancelled caller must not cancel the refresh others await
        return await asyncio.shield(self._pending)

    async def _run_refresh(self) -> SessionToken | None:
        try:
            return await self._do_refresh()
        finally:
            self._pending = None

    async def _do_refresh(self) -> SessionToken | None:
        token = self._store.get()
        if token is None:
            return None

        if not token.refresh_token:
            logger.warning("Access token due for refresh but no refresh token is held")
            invalid = token.invalidated(TokenError.REFRESH_TOKEN_MISSING)
            self._store.set(invalid)
            return invalid

        try:
            result = await asyncio.wait_for(
                self._refresher(token.refresh_token), timeout=self._timeout
            )
        except Exception as e:
            logger.warning("Access token refresh failed: %r", e)
            return self._settle(token, token.invalidated(TokenError.REFRESH_FAILED))

        fresh = replace(
            token,
            access_token=result.access_token,
            refresh_token=result.refresh_token or token.refresh_token,
            expires_at=self._next_expiry(token),
            error=None,
        )
        logger.info("Access token refreshed")
        return self._settle(token, fresh)

    def _settle(self, started_from: SessionToken, outcome: SessionToken) -> SessionToken | None:
        # A login or logout that landed mid-refresh wins over the refresh outcome.
        current = self._store.get()
        if current is not started_from:
            return current
        self._store.set(outcome)
        return outcome

    def _next_expiry(self, previous: SessionToken) -> float:
        candidate = self.new_expiry()
        if previous.expires_at is not None and candidate <= previous.expires_at:
            candidate = previous.expires_at + _MIN_ADVANCE
        return candidate
