"""Protocol contracts for security client extension points."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .transport import RawResponse, WireCall


@runtime_checkable
class SyncWireTransport(Protocol):
    def send(self, call: WireCall) -> RawResponse: ...


@runtime_checkable
class AsyncWireTransport(Protocol):
    async def send(self, call: WireCall) -> RawResponse: ...


@runtime_checkable
class SyncHookMiddleware(Protocol):
    def before(self, call: WireCall) -> None: ...

    def after(self, call: WireCall, result: Any) -> None: ...

    def on_error(self, call: WireCall, error: Exception) -> None: ...


@runtime_checkable
class AsyncHookMiddleware(Protocol):
    async def before(self, call: WireCall) -> None: ...

    async def after(self, call: WireCall, result: Any) -> None: ...

    async def on_error(self, call: WireCall, error: Exception) -> None: ...
