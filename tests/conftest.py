# Shared fixtures: a controllable clock and a fake platform API behind
# httpx.MockTransport.
# Created: 2026-10-18

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from clinicdesk.auth.refresh import RefreshCoordinator, RefreshedTokens
from clinicdesk.auth.token_store import AdminUser, SessionToken, TokenStore
from clinicdesk.client import ApiClient, build_http_client

BASE_URL = "http://platform.test/api"
T0 = 1_800_000_000.0
DAY = 24 * 60 * 60

ADMIN = AdminUser(id="u1", email="admin@clinic.test", name="Ada Admin")


class FakeClock:
    def __init__(self, start: float = T0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePlatform:
    """Records every request and answers from registered routes.

    Routes are keyed on method and the path below ``/api``. An answer is either
    ``(status, body)`` or a callable taking the ``httpx.Request``.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Any] = {}

    def on(self, method: str, path: str, answer: Any) -> None:
        self._routes[(method.upper(), path)] = answer

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and _path(r) == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self._routes.get((request.method, _path(request)))
        if answer is None:
            return httpx.Response(404, json={"success": False, "message": "Not found"})
        if callable(answer):
            return answer(request)
        status, body = answer
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def _path(request: httpx.Request) -> str:
    return request.url.path.removeprefix("/api")


def body_of(request: httpx.Request) -> Any:
    return json.loads(request.content) if request.content else None


def bearer(request: httpx.Request) -> str | None:
    value = request.headers.get("authorization")
    return value.removeprefix("Bearer ") if value else None


def login_body(access: str = "A1", refresh: str | None = "R1") -> dict[str, Any]:
    data: dict[str, Any] = {
        "accessToken": access,
        "user": {
            "_id": "u1",
            "email": "admin@clinic.test",
            "firstName": "Ada",
            "lastName": "Admin",
        },
    }
    if refresh is not None:
        data["refreshToken"] = refresh
    return {"success": True, "message": "Login successful", "data": data}


class CountingRefresher:
    """Refresher double: hands out A2, A3, ... and counts calls."""

    def __init__(self, *, fail: Exception | None = None, delay: float = 0.0, start: int = 2):
        self.calls: list[str] = []
        self._fail = fail
        self._delay = delay
        self._next = start

    async def __call__(self, refresh_token: str) -> RefreshedTokens:
        self.calls.append(refresh_token)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._fail is not None:
            raise self._fail
        n = self._next
        self._next += 1
        return RefreshedTokens(access_token=f"A{n}", refresh_token=f"R{n}")


def issued_token(clock: FakeClock, access: str = "A1", refresh: str | None = "R1") -> SessionToken:
    return SessionToken(
        access_token=access, refresh_token=refresh, expires_at=clock() + DAY, user=ADMIN
    )


def make_coordinator(
    clock: FakeClock,
    refresher: Callable,
    token: SessionToken | None = None,
    **kwargs: Any,
) -> RefreshCoordinator:
    return RefreshCoordinator(TokenStore(token), refresher, max_age=DAY, clock=clock, **kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
async def http(platform):
    client = build_http_client(BASE_URL, transport=platform.transport)
    yield client
    await client.aclose()


@pytest.fixture
def refresher() -> CountingRefresher:
    return CountingRefresher()


@pytest.fixture
def api(http, clock, refresher) -> ApiClient:
    """ApiClient holding a freshly issued A1/R1 token."""
    return ApiClient(http, make_coordinator(clock, refresher, issued_token(clock)))
