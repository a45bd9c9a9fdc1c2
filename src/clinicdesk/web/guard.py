"""Route guard for dashboard navigation.

- ``evaluate()``: pure decision for a path given whether the visitor is signed in
- ``resolve_session()``: verifies the signed cookie and looks the session up
- ``guard_middleware()``: HTTP middleware (registered by ``create_app``)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse

from clinicdesk.auth.session_cookie import COOKIE_NAME, verify_session
from clinicdesk.sessions import AdminSession

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"

PROTECTED_PREFIXES = ("/dashboard", "/api/dashboard")
PUBLIC_AUTH_PREFIXES = ("/login", "/forgot-password", "/reset-password", "/verify-otp")


class GuardAction(str, Enum):
    PASS = "pass"
    TO_LOGIN = "to_login"
    TO_DASHBOARD = "to_dashboard"


@dataclass(frozen=True)
class GuardDecision:
    action: GuardAction
    location: str | None = None


def _matches(path: str, prefixes: tuple[str, ...]) -> bool:
    return any(path == p or path.startswith(p + "/") for p in prefixes)


def evaluate(path: str, authenticated: bool) -> GuardDecision:
    """Decide what to do with a navigation to *path*."""
    if not authenticated and _matches(path, PROTECTED_PREFIXES):
        return GuardDecision(GuardAction.TO_LOGIN, LOGIN_PATH)
    if authenticated and _matches(path, PUBLIC_AUTH_PREFIXES):
        return GuardDecision(GuardAction.TO_DASHBOARD, DASHBOARD_PATH)
    return GuardDecision(GuardAction.PASS)


def resolve_session(request: Request) -> AdminSession | None:
    """Return the signed-in session behind the request's cookie, if any."""
    cookie = request.cookies.get(COOKIE_NAME)
    if not cookie:
        return None
    context = request.app.state.context
    session_id = verify_session(cookie, context.settings.session_secret)
    if session_id is None:
        return None
    session = context.sessions.get(session_id)
    if session is None or not session.authenticated:
        return None
    return session


async def guard_middleware(request: Request, call_next):
    session = resolve_session(request)
    request.state.admin_session = session

    decision = evaluate(request.url.path, session is not None)
    if decision.action is GuardAction.TO_LOGIN:
        if request.url.path.startswith("/api/"):
            return JSONResponse(status_code=401, content={"detail": "Unauthorized"})
        return RedirectResponse(decision.location, status_code=303)
    if decision.action is GuardAction.TO_DASHBOARD:
        return RedirectResponse(decision.location, status_code=303)

    return await call_next(request)
