from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from recruitboard.core.config import Settings
from recruitboard.services.http import ApiClient
from recruitboard.services.session import SessionContext

API_PREFIX = "/api/v1"

Handler = Callable[[httpx.Request], Any]


class FakeBackend:
    """Routes ``httpx.MockTransport`` requests by (method, path) and records them."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json: Any = None,
        handler: Handler | None = None,
    ) -> None:
        if handler is None:

            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=json)

        self.routes[(method, f"{API_PREFIX}{path}")] = handler

    def __call__(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "no such route"})
        return handler(request)

    def calls(self, method: str, path: str | None = None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.method == method and (path is None or r.url.path == f"{API_PREFIX}{path}")
        ]


def body_of(request: httpx.Request) -> Any:
    return json.loads(request.content)


class RecordingNavigator:
    def __init__(self) -> None:
        self.routes: list[str] = []

    def navigate(self, route: str) -> None:
        self.routes.append(route)


class RecordingPrompter:
    def __init__(self, confirm_result: bool = True) -> None:
        self.confirm_result = confirm_result
        self.alerts: list[str] = []
        self.toasts: list[str] = []
        self.confirms: list[tuple[str, str]] = []

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def toast(self, message: str) -> None:
        self.toasts.append(message)

    async def confirm(self, title: str, description: str) -> bool:
        self.confirms.append((title, description))
        return self.confirm_result


@pytest.fixture
def settings() -> Settings:
    return Settings(API_URL="http://api.test", PUBLIC_URL="https://cdn.test")


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(access_token="token-1", user_id=1)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def api(backend: FakeBackend, session: SessionContext, settings: Settings) -> ApiClient:
    return ApiClient(session, settings=settings, transport=httpx.MockTransport(backend))


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def prompter() -> RecordingPrompter:
    return RecordingPrompter()
