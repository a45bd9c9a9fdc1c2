# Dashboard overview and app-wide settings.
# Created: 2026-10-18

from __future__ import annotations

from typing import Any

from clinicdesk.client import ApiClient


async def get_overview(client: ApiClient) -> Any:
    return await client.get("/user/dashboard/overview")


async def toggle_referral_system(client: ApiClient) -> Any:
    """Flip the platform-wide referral program switch."""
    return await client.patch("/app-setting/toggle-referral-system")
