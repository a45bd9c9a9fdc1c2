# Referral codes gateway.
# Created: 2026-10-18

from __future__ import annotations

from enum import Enum
from typing import Any

from clinicdesk.client import ApiClient
from clinicdesk.gateways._query import ALL


class ReferralStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


async def list_referral_codes(client: ApiClient, status: str = "") -> Any:
    """List codes, filtered server-side by *status* when one is given."""
    params = {"status": status} if status and status != ALL else None
    return await client.get("/referral/get-referral-codes", params=params)


async def create_referral_code(client: ApiClient, payload: dict[str, Any]) -> Any:
    return await client.post("/referral/create-referral-code", payload)


async def update_referral_code(client: ApiClient, code_id: str, payload: dict[str, Any]) -> Any:
    return await client.patch(f"/referral/update-referral-code/{code_id}", payload)


async def set_active(client: ApiClient, code_id: str, is_active: bool) -> Any:
    return await update_referral_code(client, code_id, {"isActive": is_active})


async def delete_referral_code(client: ApiClient, code_id: str) -> Any:
    return await client.delete(f"/referral/delete-referral-code/{code_id}")
