# NotificationFeed: cached notification dropdown state for one admin.
# Created: 2026-10-18

from __future__ import annotations

import logging
from collections import deque
from typing import Any

from clinicdesk.client import ApiClient
from clinicdesk.gateways import notifications as notifications_api
from clinicdesk.realtime import NotificationEvent, NotificationStream

logger = logging.getLogger(__name__)


class NotificationFeed:
    """Latest notifications plus unread count, refreshed on push events."""

    def __init__(self, client: ApiClient, *, limit: int = 10, max_alerts: int = 20):
        self._client = client
        self._limit = limit
        self._items: list[dict[str, Any]] | None = None
        self.alerts: deque[str] = deque(maxlen=max_alerts)

    @property
    def stale(self) -> bool:
        return self._items is None

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._items or [] if not n.get("isRead"))

    async def items(self) -> list[dict[str, Any]]:
        if self._items is None:
            body = await notifications_api.list_notifications(self._client, 1, self._limit)
            data = body.get("data") if isinstance(body, dict) else None
            self._items = list((data or {}).get("items") or [])
        return self._items

    def invalidate(self) -> None:
        self._items = None

    async def mark_read(self, notification_id: str) -> Any:
        result = await notifications_api.mark_read(self._client, notification_id)
        self.invalidate()
        return result

    async def mark_all_read(self) -> Any:
        result = await notifications_api.mark_all_read(self._client)
        self.invalidate()
        return result

    def handle_event(self, event: NotificationEvent) -> None:
        self.invalidate()
        if event.title:
            self.alerts.append(event.title)

    async def follow(self, stream: NotificationStream) -> None:
        """Consume *stream* until it closes."""
        async with stream.subscribe() as subscription:
            async for event in subscription:
                logger.debug("New notification %s", event.id)
                self.handle_event(event)
