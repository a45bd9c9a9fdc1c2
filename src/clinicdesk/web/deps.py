# Shared FastAPI dependencies for the web layer.
# Created: 2026-10-18

from __future__ import annotations

import json
from typing import Any

from fastapi import HTTPException, Request

from clinicdesk.context import AppContext
from clinicdesk.errors import LoginRequired
from clinicdesk.sessions import AdminSession


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_admin_session(request: Request) -> AdminSession:
    """The signed-in session resolved by the route guard.

    Raises ``LoginRequired`` for routes the guard does not cover.
    """
    session = getattr(request.state, "admin_session", None)
    if session is None:
        raise LoginRequired()
    return session


async def json_body(request: Request) -> dict[str, Any]:
    """The request's JSON object body; an empty body reads as ``{}``."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Expected a JSON object")
    return body
