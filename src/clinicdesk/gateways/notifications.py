# Notifications gateway.
# Created: 2026-10-18

from __future__ import annotations

from typing import Any

from clinicdesk.client import ApiClient


async def list_notifications(
    client: ApiClient, page: int = 1, limit: int = 20, is_read: bool | None = None
) -> Any:
    params: dict[str, Any] = {"page": page, "limit": limit}
    if is_read is not None:
        params["isRead"] = "true" if is_read else "false"
    return await client.get("/notification", params=params)


async def mark_read(client: ApiClient, notification_id: str) -> Any:
    return await client.patch(f"/notification/{notification_id}/read")


async def mark_all_read(client: ApiClient) -> Any:
    return await client.patch("/notification/read-all")
