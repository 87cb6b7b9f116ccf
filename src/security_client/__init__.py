"""Python client for cluster security administration APIs.

This module uses lazy exports so lightweight utilities (for example config parsing)
can be imported without immediately importing transport dependencies.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "ApiError",
    "AsyncDispatcher",
    "AsyncSecurityClient",
    "AsyncWireTransport",
    "AuthError",
    "ClientConfig",
    "ClientTimeoutError",
    "ConflictError",
    "Dispatcher",
    "HookRegistry",
    "NotFoundError",
    "Operation",
    "Outcome",
    "RawResponse",
    "RequestBuildError",
    "RequestCancelledError",
    "ResponseParseError",
    "SecurityClient",
    "SecurityClientError",
    "ServerError",
    "StatusPolicy",
    "SyncWireTransport",
    "TransportError",
    "ValidationError",
    "WireCall",
]

_EXPORTS: dict[str, tuple[str, str]] = {
    "AsyncSecurityClient": (".client", "AsyncSecurityClient"),
    "SecurityClient": (".client", "SecurityClient"),
    "ClientConfig": (".config", "ClientConfig"),
    "AsyncDispatcher": (".dispatch", "AsyncDispatcher"),
    "Dispatcher": (".dispatch", "Dispatcher"),
    "Operation": (".dispatch", "Operation"),
    "Outcome": (".dispatch", "Outcome"),
    "StatusPolicy": (".dispatch", "StatusPolicy"),
    "ApiError": (".errors", "ApiError"),
    "AuthError": (".errors", "AuthError"),
    "ClientTimeoutError": (".errors", "ClientTimeoutError"),
    "ConflictError": (".errors", "ConflictError"),
    "NotFoundError": (".errors", "NotFoundError"),
    "RequestBuildError": (".errors", "RequestBuildError"),
    "RequestCancelledError": (".errors", "RequestCancelledError"),
    "ResponseParseError": (".errors", "ResponseParseError"),
    "SecurityClientError": (".errors", "SecurityClientError"),
    "ServerError": (".errors", "ServerError"),
    "TransportError": (".errors", "TransportError"),
    "ValidationError": (".errors", "ValidationError"),
    "HookRegistry": (".hooks", "HookRegistry"),
    "AsyncWireTransport": (".protocols", "AsyncWireTransport"),
    "SyncWireTransport": (".protocols", "SyncWireTransport"),
    "RawResponse": (".transport", "RawResponse"),
    "WireCall": (".transport", "WireCall"),
}

if TYPE_CHECKING:
    from .client import AsyncSecurityClient, SecurityClient
    from .config import ClientConfig
    from .dispatch import AsyncDispatcher, Dispatcher, Operation, Outcome, StatusPolicy
    from .errors import (
        ApiError,
        AuthError,
        ClientTimeoutError,
        ConflictError,
        NotFoundError,
        RequestBuildError,
        RequestCancelledError,
        ResponseParseError,
        SecurityClientError,
        ServerError,
        TransportError,
        ValidationError,
    )
    from .hooks import HookRegistry
    from .protocols import AsyncWireTransport, SyncWireTransport
    from .transport import RawResponse, WireCall


def __getattr__(name: str) -> Any:
    module_info = _EXPORTS.get(name)
    if module_info is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attribute = module_info
    module = import_module(module_name, __name__)
    value = getattr(module, attribute)
    globals()[name] = value
    return value
