"""HTTP transport for the security client."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import httpx

from .errors import ClientTimeoutError, TransportError

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True, slots=True)
class WireCall:
    operation: str
    method: str
    path: str
    query: tuple[tuple[str, str], ...] = ()
    body: bytes | None = None
    content_type: str | None = None

    @property
    def url(self) -> str:
        return self.path + encode_query(self.query)


@dataclass(frozen=True, slots=True)
class RawResponse:
    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return ""


def query_pairs(params: Mapping[str, Any] | Iterable[tuple[str, Any]] | None) -> tuple[tuple[str, str], ...]:
    if not params:
        return ()

    items = params.items() if isinstance(params, Mapping) else params
    encoded: list[tuple[str, str]] = []
    for key, value in items:
        if value is None:
            continue
        if isinstance(value, bool):
            encoded.append((key, "true" if value else "false"))
            continue
        if isinstance(value, (list, tuple)):
            encoded.append((key, ",".join(str(item) for item in value)))
            continue
        encoded.append((key, str(value)))
    return tuple(encoded)


def encode_query(pairs: Iterable[tuple[str, str]]) -> str:
    pairs = list(pairs)
    if not pairs:
        return ""
    return "?" + urlencode(pairs)


def json_body(payload: Any) -> tuple[bytes, str]:
    return json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"), JSON_CONTENT_TYPE


def _headers_for(call: WireCall) -> dict[str, str] | None:
    if call.body is None or not call.content_type:
        return None
    return {"content-type": call.content_type}


def _raw_response(response: httpx.Response) -> RawResponse:
    return RawResponse(
        status_code=response.status_code,
        body=response.content,
        headers=dict(response.headers),
    )


class SyncTransport:
    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def send(self, call: WireCall) -> RawResponse:
        try:
            response = self._client.request(
                call.method,
                call.path,
                params=list(call.query) or None,
                content=call.body,
                headers=_headers_for(call),
            )
        except httpx.TimeoutException as error:
            raise ClientTimeoutError(str(error) or "request timed out") from error
        except httpx.HTTPError as error:
            raise TransportError(str(error)) from error

        return _raw_response(response)


class AsyncTransport:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def send(self, call: WireCall) -> RawResponse:
        try:
            response = await self._client.request(
                call.method,
                call.path,
                params=list(call.query) or None,
                content=call.body,
                headers=_headers_for(call),
            )
        except httpx.TimeoutException as error:
            raise ClientTimeoutError(str(error) or "request timed out") from error
        except httpx.HTTPError as error:
            raise TransportError(str(error)) from error

        return _raw_response(response)
