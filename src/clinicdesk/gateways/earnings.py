# Earnings gateway.
# Created: 2026-10-18

from __future__ import annotations

from typing import Any

from clinicdesk.client import ApiClient
from clinicdesk.gateways._query import ListQuery


async def list_doctor_earnings(client: ApiClient, query: ListQuery) -> Any:
    return await client.get("/earnings/doctors", params=query.to_params(search=False, status=False))


async def get_overview(client: ApiClient) -> Any:
    return await client.get("/appointment/earnings/overview")
