# Response schemas for the web routes.
# Created: 2026-10-18

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from clinicdesk.views.listing import ListingPage


class OkResponse(BaseModel):
    ok: bool = True
    message: str | None = None


class UserInfo(BaseModel):
    id: str
    email: str
    name: str
    image: str = ""


class LoginResponse(OkResponse):
    user: UserInfo | None = None


class PageResponse(BaseModel):
    """Descriptor for a public page; layout is left to the frontend."""

    page: str
    error: str | None = None
    email: str | None = None


class ListingResponse(BaseModel):
    items: list[dict[str, Any]]
    total: int
    page: int
    limit: int
    total_pages: int
    search: str = ""
    status: str = ""

    @classmethod
    def from_page(cls, page: ListingPage) -> ListingResponse:
        q = page.query
        return cls(
            items=page.items,
            total=page.total,
            page=q.page,
            limit=q.limit,
            total_pages=page.total_pages,
            search=q.search,
            status=q.status,
        )


class NotificationsResponse(BaseModel):
    items: list[dict[str, Any]]
    unread_count: int
    alerts: list[str]
