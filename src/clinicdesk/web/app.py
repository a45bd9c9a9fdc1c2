"""FastAPI application for the admin dashboard.

``create_app()`` wires the route guard, the routers and the error mapping:

- ``ApiError``: the platform's status code with ``{"detail": message}``
- ``FormError``: 400 with the field and message, raised before any API call
- ``LoginRequired``: session dropped, cookie cleared, then 401 for ``/api``
  requests or a redirect to ``/login?error=<marker>`` for pages
- ``httpx.RequestError``: 502, the platform could not be reached
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from clinicdesk.auth.session_cookie import COOKIE_NAME, verify_session
from clinicdesk.config import get_settings
from clinicdesk.context import AppContext
from clinicdesk.errors import ApiError, FormError, LoginRequired
from clinicdesk.web.guard import LOGIN_PATH, guard_middleware
from clinicdesk.web.routers import auth, dashboard, resources

logger = logging.getLogger(__name__)


def create_app(context: AppContext | None = None) -> FastAPI:
    """Build the dashboard app. Pass *context* to supply settings or a transport."""
    if context is None:
        context = AppContext(get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        prune_task = asyncio.create_task(
            context.sessions.prune_loop(context.settings.session_prune_interval_seconds)
        )
        yield
        prune_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await prune_task
        await context.aclose()
        logger.info("Dashboard shut down; all sessions closed")

    app = FastAPI(
        title="ClinicDesk Admin",
        description="Admin dashboard for the clinic booking platform.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.context = context

    app.middleware("http")(guard_middleware)

    app.include_router(auth.router)
    app.include_router(dashboard.router)
    app.include_router(resources.router)

    _register_error_handlers(app)
    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LoginRequired)
    async def _login_required(request: Request, exc: LoginRequired):
        context: AppContext = request.app.state.context
        cookie = request.cookies.get(COOKIE_NAME)
        session_id = verify_session(cookie, context.settings.session_secret) if cookie else None
        if session_id is not None:
            await context.sessions.discard(session_id)
        logger.info("Session ended (%s); sign-in required", exc.marker)

        if request.url.path.startswith("/api/"):
            response = JSONResponse(
                status_code=401, content={"detail": exc.message, "error": exc.marker}
            )
        else:
            response = RedirectResponse(f"{LOGIN_PATH}?error={exc.marker}", status_code=303)
        response.delete_cookie(key=COOKIE_NAME, path="/")
        return response

    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(FormError)
    async def _form_error(request: Request, exc: FormError):
        return JSONResponse(
            status_code=400, content={"detail": exc.message, "field": exc.field}
        )

    @app.exception_handler(httpx.RequestError)
    async def _unreachable(request: Request, exc: httpx.RequestError):
        logger.error("Platform API unreachable: %s", exc)
        return JSONResponse(status_code=502, content={"detail": "Platform API unreachable"})


def run_server(host: str | None = None, port: int | None = None, dev: bool = False) -> None:
    """Start the dashboard under uvicorn."""
    import uvicorn

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    print("\n" + "=" * 50)
    print("CLINICDESK ADMIN")
    print("=" * 50)
    print(f"\nDashboard: http://{'localhost' if host == '0.0.0.0' else host}:{port}/login")
    print(f"Platform API: {settings.api_base_url}\n")

    if dev:
        import pathlib

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "clinicdesk.web.app:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py"],
            log_level="debug",
        )
    else:
        uvicorn.run(create_app(AppContext(settings)), host=host, port=port)
