# Patients gateway.
# Created: 2026-10-18

from __future__ import annotations

from enum import Enum
from typing import Any

from clinicdesk.client import ApiClient
from clinicdesk.gateways._query import ListQuery


class PatientStatus(str, Enum):
    ACTIVE = "active"
    BLOCK = "block"


async def list_patients(client: ApiClient, query: ListQuery) -> Any:
    return await client.get("/user/role/patient", params=query.to_params())


async def get_patient(client: ApiClient, patient_id: str) -> Any:
    return await client.get(f"/user/{patient_id}")


async def update_patient(client: ApiClient, patient_id: str, data: dict[str, Any]) -> Any:
    return await client.patch(f"/user/patient/{patient_id}", data)


async def set_status(client: ApiClient, patient_id: str, status: PatientStatus | str) -> Any:
    """Activate or block a patient account."""
    return await update_patient(client, patient_id, {"status": PatientStatus(status).value})


async def delete_patient(client: ApiClient, patient_id: str) -> Any:
    return await client.delete(f"/user/patient/{patient_id}")
