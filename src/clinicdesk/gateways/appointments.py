# Appointments gateway.
# Created: 2026-10-18

from __future__ import annotations

from enum import Enum
from typing import Any

from clinicdesk.client import ApiClient
from clinicdesk.gateways._query import ListQuery


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    APPOINT = "appoint"  # confirmed
    RESCHEDULE = "reschedule"
    CANCELLED = "cancelled"


async def list_appointments(client: ApiClient, query: ListQuery) -> Any:
    return await client.get("/appointment", params=query.to_params())


async def get_appointment(client: ApiClient, appointment_id: str) -> Any:
    return await client.get(f"/appointment/{appointment_id}")


async def update_appointment(client: ApiClient, appointment_id: str, data: dict[str, Any]) -> Any:
    return await client.patch(f"/appointment/{appointment_id}", data)


async def cancel_appointment(client: ApiClient, appointment_id: str) -> Any:
    return await client.patch(f"/appointment/{appointment_id}/cancel", {})
