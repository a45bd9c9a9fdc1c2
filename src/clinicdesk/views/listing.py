"""Paginated listing controller.

``ListingView`` keeps the latest requested ``ListQuery`` for one table.
Changing the search term or status filter resets the page to 1.  Results are
cached per query for ``ttl`` seconds and dropped by ``invalidate()`` after a
mutation.  ``load()`` always answers the query its caller asked for.  When
a slower fetch finishes after the query has moved on, its result is cached
and returned to that caller, but ``current`` keeps following the latest
requested query.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import Any

from clinicdesk.gateways import ALL, ListQuery

logger = logging.getLogger(__name__)

Fetcher = Callable[[ListQuery], Awaitable[Any]]


@dataclass
class ListingPage:
    query: ListQuery
    items: list[dict[str, Any]]
    total: int
    fetched_at: float = field(default=0.0, compare=False)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.query.limit) if self.total else 0

    @classmethod
    def from_body(cls, query: ListQuery, body: Any, fetched_at: float = 0.0) -> ListingPage:
        """Read items and total out of the platform's list envelopes.

        Handles both ``{"data": [...], "pagination": {"total"}}`` and
        ``{"data": {"items": [...], "pagination": {"total"}}}``.
        """
        items: list[dict[str, Any]] = []
        total: int | None = None
        if isinstance(body, dict):
            payload = body.get("data")
            if isinstance(payload, list):
                items = payload
            elif isinstance(payload, dict):
                items = payload.get("items") or payload.get("data") or []
                total = (payload.get("pagination") or {}).get("total")
            if total is None:
                total = (body.get("pagination") or {}).get("total") or body.get("total")
        return cls(query=query, items=items, total=total or len(items), fetched_at=fetched_at)


class ListingView:
    """Query state and result cache for one paginated resource."""

    def __init__(
        self,
        fetch: Fetcher,
        *,
        limit: int = 10,
        ttl: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch = fetch
        self._ttl = ttl
        self._clock = clock
        self._cache: dict[ListQuery, ListingPage] = {}
        self.query = ListQuery(limit=limit)

    @property
    def current(self) -> ListingPage | None:
        return self._fresh(self.query)

    def set_search(self, term: str) -> ListQuery:
        term = (term or "").strip()
        if term != self.query.search:
            self.query = replace(self.query, search=term, page=1)
        return self.query

    def set_status(self, status: str) -> ListQuery:
        status = "" if not status or status == ALL else status
        if status != self.query.status:
            self.query = replace(self.query, status=status, page=1)
        return self.query

    def set_page(self, page: int) -> ListQuery:
        self.query = self.query.with_page(page)
        return self.query

    def apply(self, *, page: int = 1, search: str = "", status: str = "") -> ListQuery:
        """Set filters first (which may reset the page), then the page."""
        filters_changed = (search or "").strip() != self.query.search or (
            "" if status == ALL else status
        ) != self.query.status
        self.set_search(search)
        self.set_status(status)
        if not filters_changed:
            self.set_page(page)
        return self.query

    async def load(self, query: ListQuery | None = None) -> ListingPage:
        """Page for *query* (default: the current query), from cache or a fetch."""
        requested = query if query is not None else self.query
        cached = self._fresh(requested)
        if cached is not None:
            return cached

        body = await self._fetch(requested)
        page = ListingPage.from_body(requested, body, fetched_at=self._clock())
        self._cache[requested] = page

        if requested != self.query:
            logger.debug("Listing query moved on from %s; not current", requested)
        return page

    def invalidate(self) -> None:
        self._cache.clear()

    def _fresh(self, query: ListQuery) -> ListingPage | None:
        page = self._cache.get(query)
        if page is None:
            return None
        if self._clock() - page.fetched_at > self._ttl:
            del self._cache[query]
            return None
        return page
