# Auth router: public pages, login/logout and the password-reset flow.
# Created: 2026-10-18

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from clinicdesk.auth import identity
from clinicdesk.auth.session_cookie import COOKIE_NAME, sign_session, verify_session
from clinicdesk.context import AppContext
from clinicdesk.views.forms import (
    ForgotPasswordForm,
    LoginForm,
    ResetPasswordForm,
    VerifyOtpForm,
    parse_form,
)
from clinicdesk.web.deps import get_context, json_body
from clinicdesk.web.schemas import LoginResponse, OkResponse, PageResponse, UserInfo

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.get("/login", response_model=PageResponse)
async def login_page(error: str | None = None):
    """Login page; ``error`` carries the marker that sent the visitor here."""
    return PageResponse(page="login", error=error)


@router.get("/forgot-password", response_model=PageResponse)
async def forgot_password_page():
    return PageResponse(page="forgot-password")


@router.get("/verify-otp", response_model=PageResponse)
async def verify_otp_page(email: str = ""):
    return PageResponse(page="verify-otp", email=email or None)


@router.get("/reset-password", response_model=PageResponse)
async def reset_password_page(email: str = "", otp: str = ""):
    if not email or not otp:
        return PageResponse(
            page="reset-password", error="Invalid reset request. Please try again."
        )
    return PageResponse(page="reset-password", email=email)


@router.post("/api/auth/login", response_model=LoginResponse)
async def login(request: Request, context: AppContext = Depends(get_context)):
    """Sign in against the platform and bind a fresh session to the cookie."""
    form = parse_form(LoginForm, await json_body(request))

    session = context.new_session()
    token = await identity.login(session.client, form.email, form.password)

    previous = _cookie_session_id(request, context)
    if previous is not None:
        await context.sessions.discard(previous)
    await context.sessions.prune()
    context.sessions.add(session)
    if context.realtime:
        await session.start_realtime(context.settings.socket_url)

    settings = context.settings
    user = UserInfo(**asdict(token.user)) if token.user else None
    response = JSONResponse(content=LoginResponse(user=user).model_dump())
    response.set_cookie(
        key=COOKIE_NAME,
        value=sign_session(settings.session_secret, session.id, settings.session_ttl_hours),
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
        max_age=settings.session_ttl_hours * 3600,
    )
    return response


@router.post("/api/auth/logout", response_model=OkResponse)
async def logout(request: Request, context: AppContext = Depends(get_context)):
    """Drop the server-side session and clear the cookie."""
    session_id = _cookie_session_id(request, context)
    if session_id is not None:
        await context.sessions.discard(session_id)
    response = JSONResponse(content=OkResponse().model_dump())
    response.delete_cookie(key=COOKIE_NAME, path="/")
    return response


@router.post("/api/auth/forgot-password", response_model=OkResponse)
async def forgot_password(request: Request, context: AppContext = Depends(get_context)):
    form = parse_form(ForgotPasswordForm, await json_body(request))
    body = await identity.forgot_password(context.new_client(), form.email)
    return OkResponse(message=_message(body, "OTP sent to your email"))


@router.post("/api/auth/send-otp", response_model=OkResponse)
async def send_otp(request: Request, context: AppContext = Depends(get_context)):
    form = parse_form(ForgotPasswordForm, await json_body(request))
    body = await identity.send_otp(context.new_client(), form.email)
    return OkResponse(message=_message(body, "OTP sent to your email"))


@router.post("/api/auth/verify-otp", response_model=OkResponse)
async def verify_otp(request: Request, context: AppContext = Depends(get_context)):
    form = parse_form(VerifyOtpForm, await json_body(request))
    body = await identity.verify_otp(context.new_client(), form.email, form.otp)
    return OkResponse(message=_message(body, "OTP verified"))


@router.post("/api/auth/reset-password", response_model=OkResponse)
async def reset_password(request: Request, context: AppContext = Depends(get_context)):
    form = parse_form(ResetPasswordForm, await json_body(request))
    body = await identity.reset_password(
        context.new_client(), form.email, form.otp, form.password
    )
    return OkResponse(message=_message(body, "Password reset successfully"))


def _cookie_session_id(request: Request, context: AppContext) -> str | None:
    cookie = request.cookies.get(COOKIE_NAME)
    if not cookie:
        return None
    return verify_session(cookie, context.settings.session_secret)


def _message(body, default: str) -> str:
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return default
