# Identity endpoints: login, token refresh and the password flows.
# Created: 2026-10-18

from __future__ import annotations

import logging
from typing import Any

import httpx

from clinicdesk.auth.refresh import RefreshedTokens
from clinicdesk.auth.token_store import AdminUser, SessionToken
from clinicdesk.client import ApiClient
from clinicdesk.errors import ApiError, AuthenticationError

logger = logging.getLogger(__name__)

REFRESH_PATH = "/auth/reset-refresh-token"


def _data(body: Any) -> dict[str, Any]:
    """Unwrap the platform's ``{"success", "message", "data"}`` envelope."""
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        return body["data"]
    raise ValueError("Unexpected response shape from platform API")


async def login(client: ApiClient, email: str, password: str) -> SessionToken:
    """Exchange credentials for a token pair and store it on *client*'s session.

    Raises:
        AuthenticationError: missing credentials, rejected by the platform, or
            a success response without an access token.
    """
    email = (email or "").strip()
    if not email or not password:
        raise AuthenticationError(400, "Invalid credentials")

    try:
        body = await client.post(
            "/auth/login", {"email": email, "password": password}, auth=False
        )
    except ApiError as e:
        backend_message = e.payload.get("message") if isinstance(e.payload, dict) else None
        raise AuthenticationError(
            e.status_code, backend_message or "Invalid email or password", e.payload
        ) from e

    try:
        data = _data(body)
    except ValueError as e:
        raise AuthenticationError(502, "Unexpected login response from platform", body) from e
    if not data.get("accessToken"):
        raise AuthenticationError(502, "Login response carried no access token", body)

    token = SessionToken(
        access_token=data["accessToken"],
        refresh_token=data.get("refreshToken"),
        expires_at=client.coordinator.new_expiry(),
        user=AdminUser.from_api(data.get("user") or {}),
    )
    client.store.set(token)
    logger.info("Admin %s signed in", token.user.email if token.user else email)
    return token


async def refresh_tokens(http: httpx.AsyncClient, refresh_token: str) -> RefreshedTokens:
    """Call the refresh endpoint directly, outside the ApiClient retry path."""
    resp = await http.post(REFRESH_PATH, json={"refreshToken": refresh_token})
    resp.raise_for_status()
    data = _data(resp.json())
    return RefreshedTokens(
        access_token=data["accessToken"],
        refresh_token=data.get("refreshToken"),
    )


async def forgot_password(client: ApiClient, email: str) -> Any:
    """Ask the platform to email a password-reset OTP."""
    return await client.post("/auth/forget", {"email": email}, auth=False)


async def send_otp(client: ApiClient, email: str) -> Any:
    return await client.post("/auth/send-otp", {"email": email}, auth=False)


async def verify_otp(client: ApiClient, email: str, otp: str) -> Any:
    return await client.post("/auth/verify-otp", {"email": email, "otp": otp}, auth=False)


async def reset_password(client: ApiClient, email: str, otp: str, password: str) -> Any:
    return await client.post(
        "/auth/reset-password",
        {"email": email, "otp": otp, "password": password},
        auth=False,
    )


async def change_password(client: ApiClient, old_password: str, new_password: str) -> Any:
    return await client.post(
        "/auth/change-password",
        {"oldPassword": old_password, "newPassword": new_password},
    )
