import asyncio

import httpx
import pytest

from recruitboard.core.errors import (
    ApiError,
    MutationFailure,
    NotFound,
    TransportFailure,
    Unauthorized,
    describe_error,
)
from recruitboard.services.http import ApiClient
from recruitboard.services.session import SessionContext


def test_bearer_token_and_prefix(backend, api) -> None:
    backend.on("GET", "/users/whoami", json={"data": {"id": 1, "nickname": "host"}})

    payload = asyncio.run(api.get_json("/users/whoami"))

    assert payload == {"data": {"id": 1, "nickname": "host"}}
    request = backend.requests[0]
    assert request.url.host == "api.test"
    assert request.url.path == "/api/v1/users/whoami"
    assert request.headers["Authorization"] == "Bearer token-1"


def test_no_authorization_header_without_token(backend, settings) -> None:
    backend.on("GET", "/users/whoami", json={"data": {"id": 1}})
    client = ApiClient(SessionContext(), settings=settings, transport=httpx.MockTransport(backend))

    asyncio.run(client.get_json("/users/whoami"))

    assert "Authorization" not in backend.requests[0].headers


def test_status_codes_map_to_errors(backend, api) -> None:
    backend.on("GET", "/posts/1", status=401, json={"message": "login first"})
    backend.on("GET", "/posts/2", status=500, json={"message": "boom"})

    async def scenario() -> list[Exception]:
        caught: list[Exception] = []
        for path in ("/posts/404", "/posts/1", "/posts/2"):
            try:
                await api.get_json(path)
            except ApiError as exc:
                caught.append(exc)
        return caught

    missing, unauthorized, server_error = asyncio.run(scenario())

    assert isinstance(missing, NotFound)
    assert isinstance(unauthorized, Unauthorized)
    assert unauthorized.message == "login first"
    assert server_error.status_code == 500
    assert describe_error(server_error) == "Error: 500 - boom"


def test_transport_errors_are_wrapped(settings) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = ApiClient(SessionContext(), settings=settings, transport=httpx.MockTransport(refuse))

    with pytest.raises(TransportFailure) as exc_info:
        asyncio.run(client.get_json("/posts/1"))
    assert "connection refused" in describe_error(exc_info.value)


def test_describe_mutation_failure_uses_cause() -> None:
    try:
        try:
            raise ApiError(409, "conflict")
        except ApiError as exc:
            raise MutationFailure("rejected") from exc
    except MutationFailure as failure:
        assert describe_error(failure) == "Error: 409 - conflict"
