# Dashboard router: overview, notifications and account actions.
# Created: 2026-10-18

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, Request

from clinicdesk.auth import identity
from clinicdesk.gateways import dashboard as dashboard_api
from clinicdesk.gateways import earnings as earnings_api
from clinicdesk.sessions import AdminSession
from clinicdesk.views.forms import ChangePasswordForm, parse_form
from clinicdesk.web.deps import get_admin_session, json_body
from clinicdesk.web.schemas import NotificationsResponse, OkResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Dashboard"])


@router.get("/dashboard")
async def dashboard_page(session: AdminSession = Depends(get_admin_session)):
    """Dashboard landing page: signed-in user plus the overview counters."""
    user = session.token.user if session.token else None
    return {
        "page": "dashboard",
        "user": asdict(user) if user else None,
        "overview": await dashboard_api.get_overview(session.client),
    }


@router.get("/api/dashboard/overview")
async def overview(session: AdminSession = Depends(get_admin_session)) -> Any:
    return await dashboard_api.get_overview(session.client)


@router.get("/api/dashboard/earnings/overview")
async def earnings_overview(session: AdminSession = Depends(get_admin_session)) -> Any:
    return await earnings_api.get_overview(session.client)


@router.post("/api/dashboard/settings/referral-system")
async def toggle_referral_system(session: AdminSession = Depends(get_admin_session)) -> Any:
    result = await dashboard_api.toggle_referral_system(session.client)
    logger.info("Referral system toggled")
    return result


@router.post("/api/dashboard/change-password", response_model=OkResponse)
async def change_password(request: Request, session: AdminSession = Depends(get_admin_session)):
    form = parse_form(ChangePasswordForm, await json_body(request))
    await identity.change_password(session.client, form.old_password, form.new_password)
    return OkResponse(message="Password changed successfully")


# --- Notifications -------------------------------------------------------


@router.get("/api/dashboard/notifications", response_model=NotificationsResponse)
async def notifications(session: AdminSession = Depends(get_admin_session)):
    """Latest notifications, refetched only after a push event or a mark-read."""
    feed = session.feed
    items = await feed.items()
    return NotificationsResponse(
        items=items, unread_count=feed.unread_count, alerts=list(feed.alerts)
    )


@router.patch("/api/dashboard/notifications/read-all")
async def mark_all_notifications_read(
    session: AdminSession = Depends(get_admin_session),
) -> Any:
    return await session.feed.mark_all_read()


@router.patch("/api/dashboard/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: str, session: AdminSession = Depends(get_admin_session)
) -> Any:
    return await session.feed.mark_read(notification_id)
