# Admin sessions: one authenticated user context per browser session.
# Created: 2026-10-18

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable

from clinicdesk.auth.token_store import SessionToken
from clinicdesk.client import ApiClient
from clinicdesk.realtime import NotificationStream
from clinicdesk.views.listing import Fetcher, ListingView
from clinicdesk.views.notifications import NotificationFeed

logger = logging.getLogger(__name__)


class AdminSession:
    """Token store, API client and cached views of one signed-in admin."""

    def __init__(self, session_id: str, client: ApiClient, *, created_at: float | None = None):
        self.id = session_id
        self.client = client
        self.created_at = created_at if created_at is not None else time.time()
        self.feed = NotificationFeed(client)
        self.stream: NotificationStream | None = None
        self._views: dict[str, ListingView] = {}
        self._follow_task: asyncio.Task | None = None

    @property
    def token(self) -> SessionToken | None:
        return self.client.store.get()

    @property
    def authenticated(self) -> bool:
        token = self.token
        return token is not None and token.usable

    def listing(self, name: str, fetch: Fetcher, *, limit: int = 10) -> ListingView:
        """The session's listing view for *name*, created on first use."""
        view = self._views.get(name)
        if view is None:
            view = self._views[name] = ListingView(fetch, limit=limit)
        return view

    def invalidate(self, name: str) -> None:
        view = self._views.get(name)
        if view is not None:
            view.invalidate()

    async def start_realtime(self, socket_url: str) -> None:
        """Connect the notification socket and feed its events to ``feed``."""
        token = self.token
        if token is None or token.user is None or not token.user.id:
            return
        stream = NotificationStream(socket_url, token.user.id)
        try:
            await stream.connect()
        except Exception as e:
            logger.warning("Notification socket unavailable: %s", e)
            return
        self.stream = stream
        self._follow_task = asyncio.get_running_loop().create_task(self.feed.follow(stream))

    async def close(self) -> None:
        if self.stream is not None:
            await self.stream.close()
            self.stream = None
        if self._follow_task is not None:
            self._follow_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._follow_task
            self._follow_task = None
        self.client.store.clear()


class SessionRegistry:
    """Server-side map from session id to ``AdminSession``."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time):
        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, AdminSession] = {}
        self._closing: set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._sessions)

    def add(self, session: AdminSession) -> None:
        self._sessions[session.id] = session

    def get(self, session_id: str) -> AdminSession | None:
        """Live session for *session_id*.

        An expired session is removed on lookup and closed in the background.
        Must be called from a running event loop.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._expired(session):
            del self._sessions[session_id]
            task = asyncio.get_running_loop().create_task(session.close())
            self._closing.add(task)
            task.add_done_callback(self._closed)
            logger.info("Session %s… expired", session_id[:8])
            return None
        return session

    async def discard(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            await session.close()
            logger.info("Session %s… closed", session_id[:8])

    async def prune(self) -> int:
        """Close and remove expired sessions. Returns how many were removed."""
        stale = [sid for sid, s in self._sessions.items() if self._expired(s)]
        for sid in stale:
            await self.discard(sid)
        return len(stale)

    async def prune_loop(self, interval: float) -> None:
        """Prune every *interval* seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            try:
                removed = await self.prune()
            except Exception as e:
                logger.error("Session prune failed: %s", e)
                continue
            if removed:
                logger.info("Pruned %d expired session(s)", removed)

    async def close_all(self) -> None:
        for sid in list(self._sessions):
            await self.discard(sid)
        if self._closing:
            await asyncio.gather(*self._closing, return_exceptions=True)

    def _closed(self, task: asyncio.Task) -> None:
        self._closing.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Closing expired session failed: %s", task.exception())

    def _expired(self, session: AdminSession) -> bool:
        return self._clock() - session.created_at > self._ttl
