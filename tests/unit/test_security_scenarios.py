from __future__ import annotations

import asyncio
import json
import threading
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from security_client import AsyncSecurityClient, SecurityClient
from security_client.dispatch import AsyncDispatcher, Outcome
from security_client.errors import (
    ClientTimeoutError,
    NotFoundError,
    ResponseParseError,
    ServerError,
    TransportError,
)
from security_client.operations import AUTHENTICATE, DELETE_ROLE
from security_client.request_models import AuthenticateRequest, DeletePrivilegesRequest, DeleteRoleRequest, PutUserRequest
from security_client.response_models import DeletePrivilegesResponse, DeleteRoleResponse, PutUserResponse
from security_client.transport import RawResponse, WireCall

Handler = Callable[[httpx.Request], httpx.Response]


def _sync_client(handler: Handler) -> SecurityClient:
    http_client = httpx.Client(base_url="http://cluster.test", transport=httpx.MockTransport(handler))
    return SecurityClient(http_client=http_client)


def _async_client(handler: Handler) -> AsyncSecurityClient:
    http_client = httpx.AsyncClient(base_url="http://cluster.test", transport=httpx.MockTransport(handler))
    return AsyncSecurityClient(http_client=http_client)


def test_delete_role_not_found_returns_absent_result() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(404, json={"found": False})

    client = _sync_client(handler)
    try:
        response = client.delete_role(DeleteRoleRequest(name="ghost"))
    finally:
        client.close()

    assert response == DeleteRoleResponse(found=False)
    assert seen[0].method == "DELETE"
    assert seen[0].url.path == "/_xpack/security/role/ghost"


def test_delete_role_server_error_surfaces_status_and_reason() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "internal"})

    client = _sync_client(handler)
    try:
        with pytest.raises(ServerError) as excinfo:
            client.delete_role(DeleteRoleRequest(name="admin"))
    finally:
        client.close()

    assert excinfo.value.status_code == 500
    assert excinfo.value.reason == "internal"
    assert excinfo.value.details.operation == "security.delete_role"


def test_put_user_parses_typed_response() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"created": True})

    client = _sync_client(handler)
    try:
        response = client.put_user(
            PutUserRequest(username="jacknich", password="l0ng-r4nd0m-p@ssw0rd", roles=("admin",), refresh="wait_for")
        )
    finally:
        client.close()

    assert isinstance(response, PutUserResponse)
    assert response.created is True
    assert seen[0].method == "PUT"
    assert seen[0].url.path == "/_xpack/security/user/jacknich"
    assert seen[0].url.params["refresh"] == "wait_for"
    body = json.loads(seen[0].content)
    assert body["roles"] == ["admin"]
    assert body["password"] == "l0ng-r4nd0m-p@ssw0rd"
    assert seen[0].headers["content-type"] == "application/json"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"{\"created\": tru", headers={"content-type": "application/json"}),
        httpx.Response(200, json={"user": "jacknich"}),
        httpx.Response(200, json=["created"]),
    ],
)
def test_put_user_malformed_body_is_parse_error(response: httpx.Response) -> None:
    client = _sync_client(lambda request: response)
    try:
        with pytest.raises(ResponseParseError) as excinfo:
            client.put_user(PutUserRequest(username="jacknich"))
    finally:
        client.close()

    assert excinfo.value.operation == "security.put_user"
    assert excinfo.value.status_code == 200


def test_authenticate_async_timeout_completes_once_with_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out waiting for the cluster", request=request)

    client = _sync_client(handler)
    received: list[Outcome[Any]] = []
    done = threading.Event()

    def on_complete(outcome: Outcome[Any]) -> None:
        received.append(outcome)
        done.set()

    try:
        future = client.authenticate_async(on_complete)
        outcome = future.result(timeout=5)
        assert done.wait(timeout=5)
    finally:
        client.close()

    assert received == [outcome]
    assert isinstance(outcome.error, ClientTimeoutError)
    assert isinstance(outcome.error, TransportError)


@pytest.mark.asyncio
async def test_authenticate_never_answering_hits_deadline_once() -> None:
    class SilentTransport:
        async def send(self, call: WireCall) -> RawResponse:
            await asyncio.Event().wait()
            raise AssertionError("unreachable")

    dispatcher = AsyncDispatcher(SilentTransport(), timeout_seconds=0.05)
    received: list[Outcome[Any]] = []

    task = dispatcher.execute_async(
        AuthenticateRequest(),
        AUTHENTICATE.converter,
        AUTHENTICATE.parser,
        AUTHENTICATE.ignorable_statuses,
        on_complete=received.append,
    )
    outcome = await task
    await asyncio.sleep(0)

    assert received == [outcome]
    assert isinstance(outcome.error, ClientTimeoutError)


def test_delete_privileges_not_found_reports_every_name_missing() -> None:
    client = _sync_client(lambda request: httpx.Response(404, json={}))
    try:
        response = client.delete_privileges(DeletePrivilegesRequest(application="myapp", names=("read", "write")))
    finally:
        client.close()

    assert isinstance(response, DeletePrivilegesResponse)
    assert response.is_found("myapp", "read") is False
    assert response.is_found("myapp", "write") is False
    assert set(response.root["myapp"]) == {"read", "write"}


def test_non_delete_operations_do_not_forgive_not_found() -> None:
    client = _sync_client(lambda request: httpx.Response(404, json={"error": {"type": "resource_not_found_exception"}}))
    try:
        with pytest.raises(NotFoundError) as excinfo:
            client.put_user(PutUserRequest(username="nobody"))
    finally:
        client.close()

    assert excinfo.value.status_code == 404
    assert excinfo.value.reason == "resource_not_found_exception"


@pytest.mark.asyncio
async def test_async_client_applies_same_ignorable_policy() -> None:
    client = _async_client(lambda request: httpx.Response(404, json={"found": False}))
    try:
        response = await client.delete_role(DeleteRoleRequest(name="ghost"))
    finally:
        await client.close()

    assert response == DeleteRoleResponse(found=False)


@pytest.mark.asyncio
async def test_async_client_server_failure_matches_sync_client() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "internal"})

    sync_client = _sync_client(handler)
    async_client = _async_client(handler)
    try:
        with pytest.raises(ServerError) as sync_error:
            sync_client.delete_role(DeleteRoleRequest(name="admin"))
        with pytest.raises(ServerError) as async_error:
            await async_client.delete_role(DeleteRoleRequest(name="admin"))
    finally:
        sync_client.close()
        await async_client.close()

    assert sync_error.value.details == async_error.value.details


@pytest.mark.asyncio
async def test_async_client_task_delivers_outcome_through_callback() -> None:
    client = _async_client(lambda request: httpx.Response(200, json={"created": True}))
    received: list[Outcome[Any]] = []
    try:
        task = client.execute_async("security.put_user", PutUserRequest(username="jacknich"), received.append)
        outcome = await task
    finally:
        await client.close()

    assert received == [outcome]
    assert outcome.result == PutUserResponse(created=True)


@pytest.mark.asyncio
async def test_async_task_cancellation_delivers_cancelled_outcome() -> None:
    started = asyncio.Event()

    class HangingTransport:
        async def send(self, call: WireCall) -> RawResponse:
            started.set()
            await asyncio.Event().wait()
            raise AssertionError("unreachable")

    dispatcher = AsyncDispatcher(HangingTransport())
    received: list[Outcome[Any]] = []
    task = dispatcher.execute_async(
        AuthenticateRequest(),
        AUTHENTICATE.converter,
        AUTHENTICATE.parser,
        on_complete=received.append,
    )
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await asyncio.sleep(0)

    assert len(received) == 1
    assert received[0].error is not None
    assert received[0].error.kind == "transport"  # type: ignore[attr-defined]


@pytest.mark.asyncio
async def test_async_execute_async_reports_build_failure_without_raising() -> None:
    dispatcher = AsyncDispatcher(_NeverCalledTransport())
    received: list[Outcome[Any]] = []

    task = dispatcher.execute_async(
        {"not": "a request"},
        DELETE_ROLE.converter,
        DELETE_ROLE.parser,
        on_complete=received.append,
    )
    outcome = await task

    assert received == [outcome]
    assert outcome.error is not None
    assert outcome.error.kind == "request_build"  # type: ignore[attr-defined]


class _NeverCalledTransport:
    async def send(self, call: WireCall) -> RawResponse:
        raise AssertionError("transport must not be reached")
