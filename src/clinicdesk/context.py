# AppContext: process-wide dependencies, built once at startup and passed down.
# Created: 2026-10-18

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable

import httpx

from clinicdesk.auth import identity
from clinicdesk.auth.refresh import RefreshCoordinator
from clinicdesk.auth.session_cookie import new_session_id
from clinicdesk.auth.token_store import TokenStore
from clinicdesk.client import ApiClient, build_http_client
from clinicdesk.config import Settings
from clinicdesk.sessions import AdminSession, SessionRegistry

logger = logging.getLogger(__name__)


class AppContext:
    """Settings, the shared HTTP client and the session registry.

    The HTTP client is created lazily on first use and shared by every
    session; each session gets its own token store, coordinator and ApiClient.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        realtime: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.realtime = realtime
        self._transport = transport
        self._clock = clock
        self._http: httpx.AsyncClient | None = None
        self.sessions = SessionRegistry(settings.session_ttl_hours * 3600, clock=clock)

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            kwargs = {"transport": self._transport} if self._transport is not None else {}
            self._http = build_http_client(
                self.settings.api_base_url,
                timeout=self.settings.request_timeout_seconds,
                **kwargs,
            )
            logger.debug("Created shared HTTP client for %s", self.settings.api_base_url)
        return self._http

    def new_client(self) -> ApiClient:
        """ApiClient over an empty token store (also used for public endpoints)."""
        store = TokenStore()
        coordinator = RefreshCoordinator(
            store,
            functools.partial(identity.refresh_tokens, self.http),
            max_age=self.settings.token_max_age_seconds,
            safety_window=self.settings.refresh_safety_window_seconds,
            timeout=self.settings.refresh_timeout_seconds,
            clock=self._clock,
        )
        return ApiClient(self.http, coordinator)

    def new_session(self) -> AdminSession:
        """Build an unauthenticated session; login fills its token store."""
        return AdminSession(new_session_id(), self.new_client(), created_at=self._clock())

    async def aclose(self) -> None:
        await self.sessions.close_all()
        if self._http is not None:
            await self._http.aclose()
            self._http = None
