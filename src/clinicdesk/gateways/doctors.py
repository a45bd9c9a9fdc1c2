# Doctors gateway: role-scoped user listing plus approval workflow.
# Created: 2026-10-18

from __future__ import annotations

from enum import Enum
from typing import Any

from clinicdesk.client import ApiClient
from clinicdesk.gateways._query import ListQuery


class DoctorStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    SUSPENDED = "suspended"


async def list_doctors(client: ApiClient, query: ListQuery) -> Any:
    return await client.get("/user/role/doctor", params=query.to_params())


async def get_doctor(client: ApiClient, doctor_id: str) -> Any:
    return await client.get(f"/user/{doctor_id}")


async def set_approval(client: ApiClient, doctor_id: str, approval_status: DoctorStatus | str) -> Any:
    """Approve or suspend a doctor's registration."""
    return await client.patch(
        f"/user/doctor/{doctor_id}/approval",
        {"approvalStatus": DoctorStatus(approval_status).value},
    )


async def update_doctor(client: ApiClient, doctor_id: str, data: dict[str, Any]) -> Any:
    return await client.patch(f"/user/doctor/{doctor_id}", data)


async def delete_doctor(client: ApiClient, doctor_id: str) -> Any:
    return await client.delete(f"/user/doctor/{doctor_id}")
