# ApiClient: bearer-authenticated access to the platform REST API.
# Created: 2026-10-18
#
# Wraps the process-wide httpx.AsyncClient for one admin session. Attaches the
# session's access token, lets the RefreshCoordinator refresh it before expiry
# or after a 401, and replays a 401'd request at most once.

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

import httpx

from clinicdesk.auth.refresh import RefreshCoordinator
from clinicdesk.auth.token_store import SessionToken, TokenStore
from clinicdesk.errors import ApiError, LoginRequired

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiRequest:
    """An outbound call, before the auth header is attached."""

    method: str
    path: str
    params: dict[str, Any] | None = None
    json: Any = None
    data: dict[str, Any] | None = None
    files: dict[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    auth: bool = True
    retried: bool = False


def build_http_client(base_url: str, timeout: float = 15.0, **kwargs: Any) -> httpx.AsyncClient:
    """Create the shared connection pool for the platform API.

    No default Content-Type: httpx sets it per request (JSON or multipart).
    """
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
        headers={"Accept": "application/json"},
        **kwargs,
    )


class ApiClient:
    """HTTP client wrapper bound to one session's token store."""

    def __init__(self, http: httpx.AsyncClient, coordinator: RefreshCoordinator):
        self._http = http
        self._coordinator = coordinator

    @property
    def store(self) -> TokenStore:
        return self._coordinator.store

    @property
    def coordinator(self) -> RefreshCoordinator:
        return self._coordinator

    async def send(self, request: ApiRequest) -> Any:
        """Send *request* and return the decoded JSON body.

        Raises:
            ApiError: non-2xx response (after at most one refresh-and-replay).
            LoginRequired: the session cannot authenticate any more.
            httpx.RequestError: transport failure, unchanged.
        """
        sent_token: str | None = None
        if request.auth:
            token = await self._coordinator.ensure_fresh()
            self._require_usable_or_absent(token)
            if token is not None:
                sent_token = token.access_token

        response = await self._dispatch(request, sent_token)

        if response.status_code == 401 and request.auth and not request.retried:
            original = self._to_error(response)
            logger.info("%s %s got 401, refreshing session", request.method, request.path)
            token = await self._coordinator.refresh_after_failure(sent_token)
            if token is None or not token.usable:
                self.store.clear()
                marker = token.error.value if token is not None and token.error else "SessionRequired"
                raise LoginRequired(original.message, marker=marker) from original
            response = await self._dispatch(replace(request, retried=True), token.access_token)

        if response.is_error:
            raise self._to_error(response)
        return self._decode(response)

    async def get(self, path: str, params: dict[str, Any] | None = None, *, auth: bool = True) -> Any:
        return await self.send(ApiRequest("GET", path, params=params, auth=auth))

    async def post(
        self,
        path: str,
        json: Any = None,
        *,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        auth: bool = True,
    ) -> Any:
        return await self.send(ApiRequest("POST", path, json=json, data=data, files=files, auth=auth))

    async def patch(
        self,
        path: str,
        json: Any = None,
        *,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        return await self.send(ApiRequest("PATCH", path, json=json, data=data, files=files))

    async def delete(self, path: str) -> Any:
        return await self.send(ApiRequest("DELETE", path))

    # ------------------------------------------------------------------

    def _require_usable_or_absent(self, token: SessionToken | None) -> None:
        if token is not None and token.error is not None:
            self.store.clear()
            raise LoginRequired("Your session has expired. Please sign in again.", marker=token.error.value)

    async def _dispatch(self, request: ApiRequest, access_token: str | None) -> httpx.Response:
        headers = dict(request.headers)
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        logger.debug("%s %s%s", request.method, request.path, " (replay)" if request.retried else "")
        return await self._http.request(
            request.method,
            request.path,
            params=request.params,
            json=request.json,
            data=request.data,
            files=request.files,
            headers=headers,
        )

    @staticmethod
    def _to_error(response: httpx.Response) -> ApiError:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        message = payload.get("message") if isinstance(payload, dict) else None
        return ApiError(
            response.status_code,
            message or response.reason_phrase or f"HTTP {response.status_code}",
            payload,
        )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text
