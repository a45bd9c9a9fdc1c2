"""Socket.IO notification stream for one signed-in admin.

``NotificationStream`` connects with the admin's user id, joins the per-user
notification room and the global alert room, and fans every
``notification_new`` event out to its subscriptions.  A ``Subscription`` is an
async iterator of ``NotificationEvent``; closing it (or leaving its
``async with`` block) unsubscribes, and closing the stream ends every
subscription.
"""

from __future__ import annotations

import asyncio
import logging
import urllib.parse
from typing import Any

import socketio
from pydantic import ValidationError

from clinicdesk.realtime.events import (
    JOIN_ALERTS,
    JOIN_NOTIFICATIONS,
    NEW_NOTIFICATION,
    NotificationEvent,
)

logger = logging.getLogger(__name__)

_END = None


class Subscription:
    """Async iterator over events delivered to one subscriber."""

    def __init__(self, stream: NotificationStream, maxsize: int = 100):
        self._stream = stream
        self._queue: asyncio.Queue[NotificationEvent | None] = asyncio.Queue(maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _push(self, event: NotificationEvent | None) -> None:
        if self._queue.full():
            # Slow consumer: drop the oldest event, keep the newest.
            self._queue.get_nowait()
            logger.warning("Notification subscriber lagging; dropped one event")
        self._queue.put_nowait(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stream._unsubscribe(self)
        self._push(_END)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> NotificationEvent:
        event = await self._queue.get()
        if event is _END:
            raise StopAsyncIteration
        return event

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()


class NotificationStream:
    """Real-time notification channel for *user_id*."""

    def __init__(
        self,
        url: str,
        user_id: str,
        *,
        client: socketio.AsyncClient | None = None,
    ):
        self._url = url
        self._user_id = user_id
        self._subscribers: list[Subscription] = []
        self._sio = client or socketio.AsyncClient(
            reconnection=True,
            reconnection_attempts=5,
            reconnection_delay=1,
            reconnection_delay_max=5,
        )
        self._sio.on("connect", self._on_connect)
        self._sio.on("disconnect", self._on_disconnect)
        self._sio.on("connect_error", self._on_connect_error)
        self._sio.on(NEW_NOTIFICATION, self._on_notification)

    @property
    def connected(self) -> bool:
        return bool(self._sio.connected)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def connect(self) -> None:
        query = urllib.parse.urlencode({"userId": self._user_id})
        await self._sio.connect(f"{self._url}?{query}")

    def subscribe(self, maxsize: int = 100) -> Subscription:
        sub = Subscription(self, maxsize)
        self._subscribers.append(sub)
        return sub

    async def close(self) -> None:
        """End every subscription and disconnect."""
        for sub in list(self._subscribers):
            sub.close()
        if self._sio.connected:
            await self._sio.disconnect()

    def _unsubscribe(self, sub: Subscription) -> None:
        try:
            self._subscribers.remove(sub)
        except ValueError:
            pass

    # -- socket handlers ------------------------------------------------

    async def _on_connect(self) -> None:
        logger.info("Notification socket connected for user %s", self._user_id)
        await self._sio.emit(JOIN_NOTIFICATIONS, self._user_id)
        await self._sio.emit(JOIN_ALERTS)

    async def _on_disconnect(self, *args: Any) -> None:
        logger.info("Notification socket disconnected for user %s", self._user_id)

    async def _on_connect_error(self, data: Any = None) -> None:
        logger.warning("Notification socket connection error: %s", data)

    async def _on_notification(self, data: Any) -> None:
        try:
            event = NotificationEvent.model_validate(data)
        except ValidationError as e:
            logger.warning("Ignoring malformed notification payload: %s", e)
            return
        for sub in list(self._subscribers):
            sub._push(event)
