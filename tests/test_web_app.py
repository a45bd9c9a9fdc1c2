# Tests for the dashboard web app: route guard, auth routes, resource routes
# and error mapping, against a fake platform API.
# Created: 2026-10-18

import httpx
import pytest
from conftest import BASE_URL, FakeClock, FakePlatform, bearer, body_of, login_body
from fastapi.testclient import TestClient

from clinicdesk.auth.session_cookie import COOKIE_NAME
from clinicdesk.config import Settings
from clinicdesk.context import AppContext
from clinicdesk.web.app import create_app
from clinicdesk.web.guard import GuardAction, evaluate

DOCTORS = "/user/role/doctor"
REFRESH = "/auth/reset-refresh-token"


def _doctors_for(token):
    def answer(request):
        if bearer(request) != token:
            return httpx.Response(401, json={"success": False, "message": "jwt expired"})
        page = request.url.params.get("page")
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": [{"_id": f"d{page}", "firstName": "Lee"}],
                "pagination": {"total": 42},
            },
        )

    return answer


@pytest.fixture
def web_platform():
    platform = FakePlatform()
    platform.on("POST", "/auth/login", (200, login_body()))
    platform.on("GET", DOCTORS, _doctors_for("A1"))
    return platform


@pytest.fixture
def web_clock():
    return FakeClock()


@pytest.fixture
def context(web_platform, web_clock):
    settings = Settings(api_base_url=BASE_URL, session_secret="test-secret")
    return AppContext(settings, transport=web_platform.transport, realtime=False, clock=web_clock)


@pytest.fixture
def client(context):
    with TestClient(create_app(context)) as client:
        yield client


def _login(client):
    resp = client.post("/api/auth/login", json={"email": "admin@clinic.test", "password": "secret"})
    assert resp.status_code == 200
    return resp


class TestGuardDecision:
    @pytest.mark.parametrize(
        "path,authenticated,action",
        [
            ("/dashboard", False, GuardAction.TO_LOGIN),
            ("/dashboard/doctors", False, GuardAction.TO_LOGIN),
            ("/api/dashboard/doctors", False, GuardAction.TO_LOGIN),
            ("/login", False, GuardAction.PASS),
            ("/login", True, GuardAction.TO_DASHBOARD),
            ("/forgot-password", True, GuardAction.TO_DASHBOARD),
            ("/reset-password", True, GuardAction.TO_DASHBOARD),
            ("/verify-otp", True, GuardAction.TO_DASHBOARD),
            ("/dashboard", True, GuardAction.PASS),
            ("/api/auth/login", False, GuardAction.PASS),
            ("/dashboards", False, GuardAction.PASS),
            ("/loginx", True, GuardAction.PASS),
        ],
    )
    def test_evaluate(self, path, authenticated, action):
        assert evaluate(path, authenticated).action is action

    def test_locations(self):
        assert evaluate("/dashboard", False).location == "/login"
        assert evaluate("/login", True).location == "/dashboard"


class TestGuardMiddleware:
    def test_anonymous_page_redirects_to_login(self, client):
        resp = client.get("/dashboard", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == "/login"

    def test_anonymous_api_gets_401(self, client, web_platform):
        resp = client.get("/api/dashboard/doctors")
        assert resp.status_code == 401
        assert web_platform.calls("GET", DOCTORS) == []

    def test_signed_in_login_page_redirects_to_dashboard(self, client):
        _login(client)
        resp = client.get("/login", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == "/dashboard"

    def test_forged_cookie_is_anonymous(self, client):
        forged = {"cookie": f"{COOKIE_NAME}=abc:9999999999:deadbeef"}
        assert client.get("/api/dashboard/doctors", headers=forged).status_code == 401


class TestAuthRoutes:
    def test_login_sets_cookie_and_registers_session(self, client, context, web_platform):
        resp = _login(client)

        assert resp.json()["user"]["name"] == "Ada Admin"
        assert COOKIE_NAME in resp.cookies
        assert "httponly" in resp.headers["set-cookie"].lower()
        assert len(context.sessions) == 1
        assert body_of(web_platform.calls("POST", "/auth/login")[0])["email"] == "admin@clinic.test"

    def test_login_missing_fields_never_calls_platform(self, client, web_platform):
        resp = client.post("/api/auth/login", json={"email": "admin@clinic.test"})

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid credentials"
        assert web_platform.requests == []

    def test_login_rejected(self, client, context, web_platform):
        web_platform.on("POST", "/auth/login", (401, {"success": False, "message": "Wrong password"}))

        resp = client.post("/api/auth/login", json={"email": "a@b.c", "password": "nope"})

        assert resp.status_code == 401
        assert resp.json()["detail"] == "Wrong password"
        assert len(context.sessions) == 0

    def test_login_page_shows_error_marker(self, client):
        resp = client.get("/login", params={"error": "RefreshAccessTokenError"})
        assert resp.json() == {"page": "login", "error": "RefreshAccessTokenError", "email": None}

    def test_relogin_replaces_previous_session(self, client, context):
        _login(client)
        _login(client)
        assert len(context.sessions) == 1

    def test_logout(self, client, context):
        _login(client)

        resp = client.post("/api/auth/logout")

        assert resp.status_code == 200
        assert len(context.sessions) == 0
        assert client.get("/api/dashboard/doctors").status_code == 401

    def test_forgot_password(self, client, web_platform):
        web_platform.on("POST", "/auth/forget", (200, {"success": True, "message": "OTP sent"}))

        resp = client.post("/api/auth/forgot-password", json={"email": "a@b.c"})

        assert resp.json() == {"ok": True, "message": "OTP sent"}

    def test_reset_password_mismatch(self, client, web_platform):
        resp = client.post(
            "/api/auth/reset-password",
            json={"email": "a@b.c", "otp": "1", "password": "secret1", "confirmPassword": "nope12"},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Passwords do not match"
        assert web_platform.requests == []

    def test_reset_password_page_requires_email_and_otp(self, client):
        assert client.get("/reset-password").json()["error"] == (
            "Invalid reset request. Please try again."
        )


class TestListings:
    def test_list_doctors(self, client, web_platform):
        _login(client)

        resp = client.get("/api/dashboard/doctors", params={"page": 2})

        data = resp.json()
        assert resp.status_code == 200
        assert data["items"] == [{"_id": "d2", "firstName": "Lee"}]
        assert data["total"] == 42
        assert data["total_pages"] == 5
        (request,) = web_platform.calls("GET", DOCTORS)
        assert bearer(request) == "A1"

    def test_search_resets_page(self, client, web_platform):
        _login(client)
        client.get("/api/dashboard/doctors", params={"page": 3})

        resp = client.get("/api/dashboard/doctors", params={"page": 3, "search": "lee"})

        assert resp.json()["page"] == 1
        assert web_platform.calls("GET", DOCTORS)[-1].url.params["page"] == "1"

    def test_repeat_view_served_from_cache(self, client, web_platform):
        _login(client)
        client.get("/api/dashboard/doctors")
        client.get("/api/dashboard/doctors")
        assert len(web_platform.calls("GET", DOCTORS)) == 1

    def test_unknown_status_filter(self, client):
        _login(client)
        resp = client.get("/api/dashboard/doctors", params={"status": "retired"})
        assert resp.status_code == 400
        assert resp.json()["field"] == "status"

    def test_mutation_invalidates_listing(self, client, web_platform):
        web_platform.on("PATCH", "/user/doctor/d1/approval", (200, {"success": True}))
        _login(client)
        client.get("/api/dashboard/doctors")

        resp = client.patch("/api/dashboard/doctors/d1/approval", json={"approvalStatus": "approved"})
        client.get("/api/dashboard/doctors")

        assert resp.status_code == 200
        assert len(web_platform.calls("GET", DOCTORS)) == 2

    def test_referrals_filtered_locally(self, client, web_platform):
        web_platform.on(
            "GET",
            "/referral/get-referral-codes",
            (200, {"success": True, "data": [{"code": "SPRING"}, {"code": "WINTER"}]}),
        )
        _login(client)

        resp = client.get("/api/dashboard/referrals", params={"search": "spr", "status": "active"})

        assert resp.json()["items"] == [{"code": "SPRING"}]
        request = web_platform.calls("GET", "/referral/get-referral-codes")[0]
        assert request.url.params["status"] == "active"


class TestMutations:
    def test_empty_referral_code_never_reaches_platform(self, client, web_platform):
        _login(client)

        resp = client.post("/api/dashboard/referrals", json={"code": "", "description": "x"})

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Please enter referral code"
        assert web_platform.calls("POST", "/referral/create-referral-code") == []

    def test_create_referral_code(self, client, web_platform):
        web_platform.on("POST", "/referral/create-referral-code", (201, {"success": True}))
        _login(client)

        resp = client.post("/api/dashboard/referrals", json={"code": "spring"})

        assert resp.status_code == 200
        request = web_platform.calls("POST", "/referral/create-referral-code")[0]
        assert body_of(request)["code"] == "SPRING"

    @pytest.mark.parametrize(
        "uses,expected",
        [(0, {"description": "Promo", "code": "AUTUMN"}), (3, {"description": "Promo"})],
    )
    def test_rename_follows_platform_use_count(self, client, web_platform, uses, expected):
        web_platform.on(
            "GET",
            "/referral/get-referral-codes",
            (200, {"success": True, "data": [{"_id": "c1", "code": "SPRING", "totalUses": uses}]}),
        )
        web_platform.on("PATCH", "/referral/update-referral-code/c1", (200, {"success": True}))
        _login(client)

        resp = client.patch(
            "/api/dashboard/referrals/c1",
            json={"code": "autumn", "description": " Promo ", "totalUses": 0},
        )

        assert resp.status_code == 200
        request = web_platform.calls("PATCH", "/referral/update-referral-code/c1")[0]
        assert body_of(request) == expected

    def test_editing_unknown_referral_code_is_404(self, client, web_platform):
        web_platform.on("GET", "/referral/get-referral-codes", (200, {"success": True, "data": []}))
        _login(client)

        resp = client.patch("/api/dashboard/referrals/missing", json={"code": "X"})

        assert resp.status_code == 404
        assert web_platform.calls("PATCH", "/referral/update-referral-code/missing") == []

    def test_create_category_forwards_multipart(self, client, web_platform):
        web_platform.on("POST", "/category", (201, {"success": True}))
        _login(client)

        resp = client.post(
            "/api/dashboard/categories",
            data={"speciality_name": "Cardiology"},
            files={"category_image": ("heart.png", b"\x89PNG", "image/png")},
        )

        assert resp.status_code == 200
        (request,) = web_platform.calls("POST", "/category")
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert b'filename="heart.png"' in request.content

    def test_create_category_requires_name(self, client, web_platform):
        _login(client)
        resp = client.post("/api/dashboard/categories", data={"speciality_name": ""})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Please enter category name"

    def test_platform_error_passes_through(self, client, web_platform):
        web_platform.on("DELETE", "/user/patient/p1", (404, {"success": False, "message": "Patient not found"}))
        _login(client)

        resp = client.delete("/api/dashboard/patients/p1")

        assert resp.status_code == 404
        assert resp.json() == {"detail": "Patient not found"}

    def test_platform_unreachable(self, client, web_platform):
        def down(request):
            raise httpx.ConnectError("refused", request=request)

        web_platform.on("GET", "/appointment", down)
        _login(client)

        resp = client.get("/api/dashboard/appointments")

        assert resp.status_code == 502

    def test_change_password(self, client, web_platform):
        web_platform.on("POST", "/auth/change-password", (200, {"success": True}))
        _login(client)

        resp = client.post(
            "/api/dashboard/change-password", json={"oldPassword": "old", "newPassword": "newpass"}
        )

        assert resp.json()["ok"] is True
        assert bearer(web_platform.calls("POST", "/auth/change-password")[0]) == "A1"


class TestNotificationRoutes:
    def test_notifications(self, client, web_platform):
        web_platform.on(
            "GET",
            "/notification",
            (200, {"data": {"items": [{"_id": "n1", "isRead": False}, {"_id": "n2", "isRead": True}]}}),
        )
        _login(client)

        data = client.get("/api/dashboard/notifications").json()

        assert data["unread_count"] == 1
        assert len(data["items"]) == 2
        assert data["alerts"] == []

    def test_mark_all_read(self, client, web_platform):
        web_platform.on("PATCH", "/notification/read-all", (200, {"success": True}))
        _login(client)

        assert client.patch("/api/dashboard/notifications/read-all").status_code == 200
        assert web_platform.calls("PATCH", "/notification/read-all")


class TestTokenRefresh:
    def test_401_refreshes_and_replays(self, client, web_platform):
        web_platform.on("POST", REFRESH, (200, {"data": {"accessToken": "A2", "refreshToken": "R2"}}))
        _login(client)
        web_platform.on("GET", DOCTORS, _doctors_for("A2"))

        resp = client.get("/api/dashboard/doctors")

        assert resp.status_code == 200
        assert [bearer(r) for r in web_platform.calls("GET", DOCTORS)] == ["A1", "A2"]
        assert body_of(web_platform.calls("POST", REFRESH)[0]) == {"refreshToken": "R1"}

    def test_proactive_refresh_near_expiry(self, client, web_platform, web_clock):
        web_platform.on("POST", REFRESH, (200, {"data": {"accessToken": "A2"}}))
        _login(client)
        web_platform.on("GET", DOCTORS, _doctors_for("A2"))
        web_clock.advance(23 * 3600 + 59 * 60)

        resp = client.get("/api/dashboard/doctors")

        assert resp.status_code == 200
        assert [bearer(r) for r in web_platform.calls("GET", DOCTORS)] == ["A2"]

    def test_failed_refresh_ends_session(self, client, context, web_platform):
        web_platform.on("POST", REFRESH, (401, {"message": "refresh token expired"}))
        _login(client)
        web_platform.on("GET", DOCTORS, _doctors_for("never"))

        resp = client.get("/api/dashboard/doctors")

        assert resp.status_code == 401
        assert resp.json()["error"] == "RefreshAccessTokenError"
        assert len(web_platform.calls("GET", DOCTORS)) == 1
        assert len(context.sessions) == 0
        assert client.get("/api/dashboard/doctors").status_code == 401

    def test_failed_refresh_on_page_redirects_with_marker(self, client, web_platform):
        web_platform.on("POST", REFRESH, (500, {"message": "boom"}))
        web_platform.on("GET", "/user/dashboard/overview", (401, {"message": "jwt expired"}))
        _login(client)

        resp = client.get("/dashboard", follow_redirects=False)

        assert resp.status_code == 303
        assert resp.headers["location"] == "/login?error=RefreshAccessTokenError"
