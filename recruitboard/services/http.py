from __future__ import annotations

import logging
from typing import Any

import httpx

from recruitboard.core.config import Settings, settings as default_settings
from recruitboard.core.errors import ApiError, NotFound, TransportFailure, Unauthorized
from recruitboard.services.session import SessionContext

logger = logging.getLogger(__name__)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase or ""
    if isinstance(body, dict):
        raw = body.get("message")
        if isinstance(raw, str) and raw.strip():
            return raw.strip()
    return resp.reason_phrase or ""


class ApiClient:
    def __init__(
        self,
        session: SessionContext,
        *,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        conf = settings or default_settings
        self.session = session
        self._client = httpx.AsyncClient(
            base_url=conf.api_base_url,
            timeout=conf.http_timeout_seconds,
            transport=transport,
            headers={"Accept": "application/json", "User-Agent": f"{conf.app_name}/1.0"},
        )

    def _headers(self) -> dict[str, str]:
        if not self.session.access_token:
            return {}
        return {"Authorization": f"Bearer {self.session.access_token}"}

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, params=params, json=json, headers=self._headers())
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{method} {path} failed: {exc}") from exc

        if resp.status_code == 404:
            raise NotFound(_error_message(resp) or "Not found")
        if resp.status_code in (401, 403):
            raise Unauthorized(_error_message(resp) or "Unauthorized", status_code=resp.status_code)
        if resp.status_code >= 400:
            raise ApiError(resp.status_code, _error_message(resp))
        logger.debug("%s %s -> %s", method, path, resp.status_code)
        return resp

    async def get_json(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        resp = await self.request("GET", path, params=params)
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(resp.status_code, "Response body is not JSON") from exc

    async def post(self, path: str, *, json: Any = None) -> httpx.Response:
        return await self.request("POST", path, json=json)

    async def patch(self, path: str, *, json: Any = None) -> httpx.Response:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> httpx.Response:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
