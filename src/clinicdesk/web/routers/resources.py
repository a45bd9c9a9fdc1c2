# Resource routers: doctors, patients, appointments, categories, earnings
# and referral codes.
# Created: 2026-10-18
#
# Listings go through the session's ListingView for each resource so search
# and status changes reset to page 1 and repeat views are served from cache.
# Mutations invalidate that view.

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile

from clinicdesk.errors import ApiError, FormError
from clinicdesk.gateways import ALL, ListQuery
from clinicdesk.gateways import appointments as appointments_api
from clinicdesk.gateways import categories as categories_api
from clinicdesk.gateways import doctors as doctors_api
from clinicdesk.gateways import earnings as earnings_api
from clinicdesk.gateways import patients as patients_api
from clinicdesk.gateways import referrals as referrals_api
from clinicdesk.sessions import AdminSession
from clinicdesk.views.forms import CategoryForm, ReferralCodeEdit, ReferralCodeForm, parse_form
from clinicdesk.views.referrals import filter_codes, total_uses
from clinicdesk.web.deps import get_admin_session, json_body
from clinicdesk.web.schemas import ListingResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["Resources"])


def _status(enum_cls: type[Enum], value: str | None, field: str = "status") -> str:
    """Normalise a status filter or body value; ``all``/empty means no filter."""
    if not value or value == ALL:
        return ""
    try:
        return enum_cls(value).value
    except ValueError:
        raise FormError(field, f"Unknown {field}: {value}")


async def _listing(
    session: AdminSession,
    name: str,
    fetch,
    *,
    page: int,
    search: str = "",
    status: str = "",
) -> ListingResponse:
    client = session.client
    view = session.listing(name, lambda query: fetch(client, query))
    # Concurrent requests may move view.query; answer the one asked for here.
    query = view.apply(page=page, search=search, status=status)
    return ListingResponse.from_page(await view.load(query))


# --- Doctors -------------------------------------------------------------


@router.get("/doctors", response_model=ListingResponse)
async def list_doctors(
    page: int = Query(1, ge=1),
    search: str = "",
    status: str = "",
    session: AdminSession = Depends(get_admin_session),
):
    return await _listing(
        session,
        "doctors",
        doctors_api.list_doctors,
        page=page,
        search=search,
        status=_status(doctors_api.DoctorStatus, status),
    )


@router.get("/doctors/{doctor_id}")
async def get_doctor(doctor_id: str, session: AdminSession = Depends(get_admin_session)) -> Any:
    return await doctors_api.get_doctor(session.client, doctor_id)


@router.patch("/doctors/{doctor_id}/approval")
async def set_doctor_approval(
    doctor_id: str, request: Request, session: AdminSession = Depends(get_admin_session)
) -> Any:
    body = await json_body(request)
    approval = _status(doctors_api.DoctorStatus, body.get("approvalStatus"), "approvalStatus")
    if not approval:
        raise FormError("approvalStatus", "Please select an approval status")
    result = await doctors_api.set_approval(session.client, doctor_id, approval)
    session.invalidate("doctors")
    logger.info("Doctor %s set to %s", doctor_id, approval)
    return result


@router.patch("/doctors/{doctor_id}")
async def update_doctor(
    doctor_id: str, request: Request, session: AdminSession = Depends(get_admin_session)
) -> Any:
    result = await doctors_api.update_doctor(session.client, doctor_id, await json_body(request))
    session.invalidate("doctors")
    return result


@router.delete("/doctors/{doctor_id}")
async def delete_doctor(doctor_id: str, session: AdminSession = Depends(get_admin_session)) -> Any:
    result = await doctors_api.delete_doctor(session.client, doctor_id)
    session.invalidate("doctors")
    return result


# --- Patients ------------------------------------------------------------


@router.get("/patients", response_model=ListingResponse)
async def list_patients(
    page: int = Query(1, ge=1),
    search: str = "",
    status: str = "",
    session: AdminSession = Depends(get_admin_session),
):
    return await _listing(
        session,
        "patients",
        patients_api.list_patients,
        page=page,
        search=search,
        status=_status(patients_api.PatientStatus, status),
    )


@router.get("/patients/{patient_id}")
async def get_patient(patient_id: str, session: AdminSession = Depends(get_admin_session)) -> Any:
    return await patients_api.get_patient(session.client, patient_id)


@router.patch("/patients/{patient_id}/status")
async def set_patient_status(
    patient_id: str, request: Request, session: AdminSession = Depends(get_admin_session)
) -> Any:
    body = await json_body(request)
    status = _status(patients_api.PatientStatus, body.get("status"))
    if not status:
        raise FormError("status", "Please select a status")
    result = await patients_api.set_status(session.client, patient_id, status)
    session.invalidate("patients")
    return result


@router.patch("/patients/{patient_id}")
async def update_patient(
    patient_id: str, request: Request, session: AdminSession = Depends(get_admin_session)
) -> Any:
    result = await patients_api.update_patient(
        session.client, patient_id, await json_body(request)
    )
    session.invalidate("patients")
    return result


@router.delete("/patients/{patient_id}")
async def delete_patient(patient_id: str, session: AdminSession = Depends(get_admin_session)) -> Any:
    result = await patients_api.delete_patient(session.client, patient_id)
    session.invalidate("patients")
    return result


# --- Appointments --------------------------------------------------------


@router.get("/appointments", response_model=ListingResponse)
async def list_appointments(
    page: int = Query(1, ge=1),
    search: str = "",
    status: str = "",
    session: AdminSession = Depends(get_admin_session),
):
    return await _listing(
        session,
        "appointments",
        appointments_api.list_appointments,
        page=page,
        search=search,
        status=_status(appointments_api.AppointmentStatus, status),
    )


@router.get("/appointments/{appointment_id}")
async def get_appointment(
    appointment_id: str, session: AdminSession = Depends(get_admin_session)
) -> Any:
    return await appointments_api.get_appointment(session.client, appointment_id)


@router.patch("/appointments/{appointment_id}")
async def update_appointment(
    appointment_id: str, request: Request, session: AdminSession = Depends(get_admin_session)
) -> Any:
    result = await appointments_api.update_appointment(
        session.client, appointment_id, await json_body(request)
    )
    session.invalidate("appointments")
    return result


@router.post("/appointments/{appointment_id}/cancel")
async def cancel_appointment(
    appointment_id: str, session: AdminSession = Depends(get_admin_session)
) -> Any:
    result = await appointments_api.cancel_appointment(session.client, appointment_id)
    session.invalidate("appointments")
    return result


# --- Categories ----------------------------------------------------------


async def _image(upload: UploadFile | None) -> categories_api.ImageUpload | None:
    if upload is None or not upload.filename:
        return None
    return categories_api.ImageUpload(
        filename=upload.filename,
        content=await upload.read(),
        content_type=upload.content_type or "application/octet-stream",
    )


@router.get("/categories", response_model=ListingResponse)
async def list_categories(
    page: int = Query(1, ge=1),
    search: str = "",
    session: AdminSession = Depends(get_admin_session),
):
    return await _listing(
        session, "categories", categories_api.list_categories, page=page, search=search
    )


@router.get("/categories/{category_id}")
async def get_category(category_id: str, session: AdminSession = Depends(get_admin_session)) -> Any:
    return await categories_api.get_category(session.client, category_id)


@router.post("/categories")
async def create_category(
    speciality_name: str = Form(""),
    category_image: UploadFile | None = File(None),
    session: AdminSession = Depends(get_admin_session),
) -> Any:
    form = parse_form(CategoryForm, {"speciality_name": speciality_name})
    result = await categories_api.create_category(
        session.client, form.speciality_name, await _image(category_image)
    )
    session.invalidate("categories")
    return result


@router.patch("/categories/{category_id}")
async def update_category(
    category_id: str,
    speciality_name: str = Form(""),
    status: str | None = Form(None),
    category_image: UploadFile | None = File(None),
    session: AdminSession = Depends(get_admin_session),
) -> Any:
    form = parse_form(CategoryForm, {"speciality_name": speciality_name, "status": status})
    result = await categories_api.update_category(
        session.client,
        category_id,
        form.speciality_name,
        status=form.status,
        image=await _image(category_image),
    )
    session.invalidate("categories")
    return result


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: str, session: AdminSession = Depends(get_admin_session)
) -> Any:
    result = await categories_api.delete_category(session.client, category_id)
    session.invalidate("categories")
    return result


# --- Earnings ------------------------------------------------------------


@router.get("/earnings", response_model=ListingResponse)
async def list_earnings(
    page: int = Query(1, ge=1),
    session: AdminSession = Depends(get_admin_session),
):
    return await _listing(session, "earnings", earnings_api.list_doctor_earnings, page=page)


# --- Referral codes ------------------------------------------------------


def _code_items(body: Any) -> list[dict[str, Any]]:
    items = body.get("data") if isinstance(body, dict) else None
    if isinstance(items, dict):
        items = items.get("items") or []
    return list(items or [])


async def _fetch_referral_codes(client, query: ListQuery) -> Any:
    """Codes are fetched whole and searched locally."""
    body = await referrals_api.list_referral_codes(client, query.status)
    return {"data": filter_codes(_code_items(body), query.search)}


async def _referral_code_record(client, code_id: str) -> dict[str, Any]:
    body = await referrals_api.list_referral_codes(client)
    for item in _code_items(body):
        if item.get("_id") == code_id:
            return item
    raise ApiError(404, "Referral code not found")


@router.get("/referrals", response_model=ListingResponse)
async def list_referral_codes(
    search: str = "",
    status: str = "",
    session: AdminSession = Depends(get_admin_session),
):
    return await _listing(
        session,
        "referrals",
        _fetch_referral_codes,
        page=1,
        search=search,
        status=_status(referrals_api.ReferralStatus, status),
    )


@router.post("/referrals")
async def create_referral_code(
    request: Request, session: AdminSession = Depends(get_admin_session)
) -> Any:
    form = parse_form(ReferralCodeForm, await json_body(request))
    result = await referrals_api.create_referral_code(session.client, form.create_payload())
    session.invalidate("referrals")
    logger.info("Created referral code %s", form.code)
    return result


@router.patch("/referrals/{code_id}/status")
async def set_referral_code_active(
    code_id: str, request: Request, session: AdminSession = Depends(get_admin_session)
) -> Any:
    body = await json_body(request)
    if not isinstance(body.get("isActive"), bool):
        raise FormError("isActive", "isActive must be true or false")
    result = await referrals_api.set_active(session.client, code_id, body["isActive"])
    session.invalidate("referrals")
    return result


@router.patch("/referrals/{code_id}")
async def update_referral_code(
    code_id: str, request: Request, session: AdminSession = Depends(get_admin_session)
) -> Any:
    form = parse_form(ReferralCodeEdit, await json_body(request))
    record = await _referral_code_record(session.client, code_id)
    result = await referrals_api.update_referral_code(
        session.client, code_id, form.update_payload(total_uses(record))
    )
    session.invalidate("referrals")
    return result


@router.delete("/referrals/{code_id}")
async def delete_referral_code(
    code_id: str, session: AdminSession = Depends(get_admin_session)
) -> Any:
    result = await referrals_api.delete_referral_code(session.client, code_id)
    session.invalidate("referrals")
    return result
