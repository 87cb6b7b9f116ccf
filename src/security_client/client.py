"""Top-level security clients (sync + async)."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from concurrent.futures import Executor, Future
from typing import Any

import httpx

from . import operations as ops
from .config import DEFAULT_BASE_URL, DEFAULT_MAX_WORKERS, DEFAULT_TIMEOUT_SECONDS, ClientConfig
from .dispatch import AsyncDispatcher, CompletionCallback, Dispatcher, Operation, Outcome
from .hooks import HookRegistry
from .operations import resolve_operation
from .protocols import AsyncHookMiddleware, AsyncWireTransport, SyncHookMiddleware, SyncWireTransport
from .request_models import (
    AuthenticateRequest,
    ChangePasswordRequest,
    ClearRealmCacheRequest,
    ClearRolesCacheRequest,
    CreateTokenRequest,
    DeletePrivilegesRequest,
    DeleteRoleMappingRequest,
    DeleteRoleRequest,
    DisableUserRequest,
    EnableUserRequest,
    GetPrivilegesRequest,
    GetRoleMappingsRequest,
    GetRolesRequest,
    GetSslCertificatesRequest,
    HasPrivilegesRequest,
    InvalidateTokenRequest,
    PutRoleMappingRequest,
    PutUserRequest,
)
from .response_models import (
    AuthenticateResponse,
    ClearRealmCacheResponse,
    ClearRolesCacheResponse,
    CreateTokenResponse,
    DeletePrivilegesResponse,
    DeleteRoleMappingResponse,
    DeleteRoleResponse,
    EmptyResponse,
    GetPrivilegesResponse,
    GetRoleMappingsResponse,
    GetRolesResponse,
    GetSslCertificatesResponse,
    HasPrivilegesResponse,
    InvalidateTokenResponse,
    PutRoleMappingResponse,
    PutUserResponse,
)
from .transport import AsyncTransport, SyncTransport, WireCall

_AUTHENTICATE = AuthenticateRequest()
_GET_SSL_CERTIFICATES = GetSslCertificatesRequest()


class _HookDecorators:
    _hooks: HookRegistry

    def before(self, operation: str = "*") -> Callable[[Callable[[WireCall], Any]], Callable[[WireCall], Any]]:
        def decorator(func: Callable[[WireCall], Any]) -> Callable[[WireCall], Any]:
            self._hooks.add_before(operation, func)
            return func

        return decorator

    def after(self, operation: str = "*") -> Callable[[Callable[[WireCall, Any], Any]], Callable[[WireCall, Any], Any]]:
        def decorator(func: Callable[[WireCall, Any], Any]) -> Callable[[WireCall, Any], Any]:
            self._hooks.add_after(operation, func)
            return func

        return decorator

    def on_error(
        self, operation: str = "*"
    ) -> Callable[[Callable[[WireCall, Exception], Any]], Callable[[WireCall, Exception], Any]]:
        def decorator(func: Callable[[WireCall, Exception], Any]) -> Callable[[WireCall, Exception], Any]:
            self._hooks.add_error(operation, func)
            return func

        return decorator

    def use_middleware(self, middleware: SyncHookMiddleware | AsyncHookMiddleware, *, operation: str = "*") -> None:
        self._hooks.add_middleware(operation, middleware)


class SecurityClient(_HookDecorators):
    """Synchronous security client.

    Every endpoint has a blocking method and an ``*_async`` twin that returns a
    :class:`concurrent.futures.Future` resolving to an :class:`Outcome`, with an
    optional ``on_complete`` callback invoked exactly once on a worker thread.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_workers: int = DEFAULT_MAX_WORKERS,
        headers: dict[str, str] | None = None,
        http_client: httpx.Client | None = None,
        transport: SyncWireTransport | None = None,
        executor: Executor | None = None,
        hook_registry: HookRegistry | None = None,
    ) -> None:
        self.client_config = ClientConfig(
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            max_workers=max_workers,
            headers=dict(headers or {}),
        )
        self._hooks = hook_registry or HookRegistry()
        self._client: httpx.Client | None = http_client
        if transport is None:
            if self._client is None:
                self._client = httpx.Client(
                    base_url=self.client_config.base_url,
                    timeout=self.client_config.timeout_seconds,
                    headers=self.client_config.headers,
                )
            transport = SyncTransport(self._client)
        self._transport = transport
        self._dispatcher = Dispatcher(
            self._transport,
            hooks=self._hooks,
            executor=executor,
            max_workers=self.client_config.max_workers,
        )

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "SecurityClient":
        return cls(
            base_url=config.base_url,
            timeout_seconds=config.timeout_seconds,
            max_workers=config.max_workers,
            headers=config.headers,
            **kwargs,
        )

    @classmethod
    def from_env(cls) -> "SecurityClient":
        return cls.from_config(ClientConfig.from_env())

    @classmethod
    def from_profile(cls, profile: str | None = None) -> "SecurityClient":
        return cls.from_config(ClientConfig.from_profile(profile))

    def close(self) -> None:
        self._dispatcher.close()
        if self._client is not None:
            self._client.close()

    def __enter__(self) -> "SecurityClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def execute(self, operation: str | Operation[Any, Any], request: Any) -> Any:
        op = resolve_operation(operation)
        return self._dispatcher.execute(
            request, op.converter, op.parser, op.ignorable_statuses, absent=op.absent
        )

    def execute_async(
        self,
        operation: str | Operation[Any, Any],
        request: Any,
        on_complete: CompletionCallback | None = None,
    ) -> Future[Outcome[Any]]:
        op = resolve_operation(operation)
        return self._dispatcher.execute_async(
            request,
            op.converter,
            op.parser,
            op.ignorable_statuses,
            absent=op.absent,
            on_complete=on_complete,
        )

    def put_user(self, request: PutUserRequest) -> PutUserResponse:
        return self.execute(ops.PUT_USER, request)

    def put_user_async(
        self, request: PutUserRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[PutUserResponse]]:
        return self.execute_async(ops.PUT_USER, request, on_complete)

    def put_role_mapping(self, request: PutRoleMappingRequest) -> PutRoleMappingResponse:
        return self.execute(ops.PUT_ROLE_MAPPING, request)

    def put_role_mapping_async(
        self, request: PutRoleMappingRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[PutRoleMappingResponse]]:
        return self.execute_async(ops.PUT_ROLE_MAPPING, request, on_complete)

    def get_role_mappings(self, request: GetRoleMappingsRequest) -> GetRoleMappingsResponse:
        return self.execute(ops.GET_ROLE_MAPPINGS, request)

    def get_role_mappings_async(
        self, request: GetRoleMappingsRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[GetRoleMappingsResponse]]:
        return self.execute_async(ops.GET_ROLE_MAPPINGS, request, on_complete)

    def enable_user(self, request: EnableUserRequest) -> EmptyResponse:
        return self.execute(ops.ENABLE_USER, request)

    def enable_user_async(
        self, request: EnableUserRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[EmptyResponse]]:
        return self.execute_async(ops.ENABLE_USER, request, on_complete)

    def disable_user(self, request: DisableUserRequest) -> EmptyResponse:
        return self.execute(ops.DISABLE_USER, request)

    def disable_user_async(
        self, request: DisableUserRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[EmptyResponse]]:
        return self.execute_async(ops.DISABLE_USER, request, on_complete)

    def authenticate(self) -> AuthenticateResponse:
        return self.execute(ops.AUTHENTICATE, _AUTHENTICATE)

    def authenticate_async(
        self, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[AuthenticateResponse]]:
        return self.execute_async(ops.AUTHENTICATE, _AUTHENTICATE, on_complete)

    def has_privileges(self, request: HasPrivilegesRequest) -> HasPrivilegesResponse:
        return self.execute(ops.HAS_PRIVILEGES, request)

    def has_privileges_async(
        self, request: HasPrivilegesRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[HasPrivilegesResponse]]:
        return self.execute_async(ops.HAS_PRIVILEGES, request, on_complete)

    def clear_realm_cache(self, request: ClearRealmCacheRequest) -> ClearRealmCacheResponse:
        return self.execute(ops.CLEAR_REALM_CACHE, request)

    def clear_realm_cache_async(
        self, request: ClearRealmCacheRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[ClearRealmCacheResponse]]:
        return self.execute_async(ops.CLEAR_REALM_CACHE, request, on_complete)

    def clear_roles_cache(self, request: ClearRolesCacheRequest) -> ClearRolesCacheResponse:
        return self.execute(ops.CLEAR_ROLES_CACHE, request)

    def clear_roles_cache_async(
        self, request: ClearRolesCacheRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[ClearRolesCacheResponse]]:
        return self.execute_async(ops.CLEAR_ROLES_CACHE, request, on_complete)

    def get_ssl_certificates(self) -> GetSslCertificatesResponse:
        return self.execute(ops.GET_SSL_CERTIFICATES, _GET_SSL_CERTIFICATES)

    def get_ssl_certificates_async(
        self, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[GetSslCertificatesResponse]]:
        return self.execute_async(ops.GET_SSL_CERTIFICATES, _GET_SSL_CERTIFICATES, on_complete)

    def change_password(self, request: ChangePasswordRequest) -> EmptyResponse:
        return self.execute(ops.CHANGE_PASSWORD, request)

    def change_password_async(
        self, request: ChangePasswordRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[EmptyResponse]]:
        return self.execute_async(ops.CHANGE_PASSWORD, request, on_complete)

    def delete_role_mapping(self, request: DeleteRoleMappingRequest) -> DeleteRoleMappingResponse:
        return self.execute(ops.DELETE_ROLE_MAPPING, request)

    def delete_role_mapping_async(
        self, request: DeleteRoleMappingRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[DeleteRoleMappingResponse]]:
        return self.execute_async(ops.DELETE_ROLE_MAPPING, request, on_complete)

    def get_roles(self, request: GetRolesRequest) -> GetRolesResponse:
        return self.execute(ops.GET_ROLES, request)

    def get_roles_async(
        self, request: GetRolesRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[GetRolesResponse]]:
        return self.execute_async(ops.GET_ROLES, request, on_complete)

    def delete_role(self, request: DeleteRoleRequest) -> DeleteRoleResponse:
        return self.execute(ops.DELETE_ROLE, request)

    def delete_role_async(
        self, request: DeleteRoleRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[DeleteRoleResponse]]:
        return self.execute_async(ops.DELETE_ROLE, request, on_complete)

    def create_token(self, request: CreateTokenRequest) -> CreateTokenResponse:
        return self.execute(ops.CREATE_TOKEN, request)

    def create_token_async(
        self, request: CreateTokenRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[CreateTokenResponse]]:
        return self.execute_async(ops.CREATE_TOKEN, request, on_complete)

    def invalidate_token(self, request: InvalidateTokenRequest) -> InvalidateTokenResponse:
        return self.execute(ops.INVALIDATE_TOKEN, request)

    def invalidate_token_async(
        self, request: InvalidateTokenRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[InvalidateTokenResponse]]:
        return self.execute_async(ops.INVALIDATE_TOKEN, request, on_complete)

    def get_privileges(self, request: GetPrivilegesRequest) -> GetPrivilegesResponse:
        return self.execute(ops.GET_PRIVILEGES, request)

    def get_privileges_async(
        self, request: GetPrivilegesRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[GetPrivilegesResponse]]:
        return self.execute_async(ops.GET_PRIVILEGES, request, on_complete)

    def delete_privileges(self, request: DeletePrivilegesRequest) -> DeletePrivilegesResponse:
        return self.execute(ops.DELETE_PRIVILEGES, request)

    def delete_privileges_async(
        self, request: DeletePrivilegesRequest, on_complete: CompletionCallback | None = None
    ) -> Future[Outcome[DeletePrivilegesResponse]]:
        return self.execute_async(ops.DELETE_PRIVILEGES, request, on_complete)


class AsyncSecurityClient(_HookDecorators):
    """Asynchronous security client."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
        transport: AsyncWireTransport | None = None,
        hook_registry: HookRegistry | None = None,
        deadline_seconds: float | None = None,
    ) -> None:
        self.client_config = ClientConfig(
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            headers=dict(headers or {}),
        )
        self._hooks = hook_registry or HookRegistry()
        self._client: httpx.AsyncClient | None = http_client
        if transport is None:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.client_config.base_url,
                    timeout=self.client_config.timeout_seconds,
                    headers=self.client_config.headers,
                )
            transport = AsyncTransport(self._client)
        self._transport = transport
        self._dispatcher = AsyncDispatcher(self._transport, hooks=self._hooks, timeout_seconds=deadline_seconds)

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "AsyncSecurityClient":
        # max_workers only sizes the sync client's thread pool.
        return cls(
            base_url=config.base_url,
            timeout_seconds=config.timeout_seconds,
            headers=config.headers,
            **kwargs,
        )

    @classmethod
    def from_env(cls) -> "AsyncSecurityClient":
        return cls.from_config(ClientConfig.from_env())

    @classmethod
    def from_profile(cls, profile: str | None = None) -> "AsyncSecurityClient":
        return cls.from_config(ClientConfig.from_profile(profile))

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncSecurityClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def execute(self, operation: str | Operation[Any, Any], request: Any) -> Any:
        op = resolve_operation(operation)
        return await self._dispatcher.execute(
            request, op.converter, op.parser, op.ignorable_statuses, absent=op.absent
        )

    def execute_async(
        self,
        operation: str | Operation[Any, Any],
        request: Any,
        on_complete: CompletionCallback | None = None,
    ) -> asyncio.Task[Outcome[Any]]:
        op = resolve_operation(operation)
        return self._dispatcher.execute_async(
            request,
            op.converter,
            op.parser,
            op.ignorable_statuses,
            absent=op.absent,
            on_complete=on_complete,
        )

    async def put_user(self, request: PutUserRequest) -> PutUserResponse:
        return await self.execute(ops.PUT_USER, request)

    async def put_role_mapping(self, request: PutRoleMappingRequest) -> PutRoleMappingResponse:
        return await self.execute(ops.PUT_ROLE_MAPPING, request)

    async def get_role_mappings(self, request: GetRoleMappingsRequest) -> GetRoleMappingsResponse:
        return await self.execute(ops.GET_ROLE_MAPPINGS, request)

    async def enable_user(self, request: EnableUserRequest) -> EmptyResponse:
        return await self.execute(ops.ENABLE_USER, request)

    async def disable_user(self, request: DisableUserRequest) -> EmptyResponse:
        return await self.execute(ops.DISABLE_USER, request)

    async def authenticate(self) -> AuthenticateResponse:
        return await self.execute(ops.AUTHENTICATE, _AUTHENTICATE)

    async def has_privileges(self, request: HasPrivilegesRequest) -> HasPrivilegesResponse:
        return await self.execute(ops.HAS_PRIVILEGES, request)

    async def clear_realm_cache(self, request: ClearRealmCacheRequest) -> ClearRealmCacheResponse:
        return await self.execute(ops.CLEAR_REALM_CACHE, request)

    async def clear_roles_cache(self, request: ClearRolesCacheRequest) -> ClearRolesCacheResponse:
        return await self.execute(ops.CLEAR_ROLES_CACHE, request)

    async def get_ssl_certificates(self) -> GetSslCertificatesResponse:
        return await self.execute(ops.GET_SSL_CERTIFICATES, _GET_SSL_CERTIFICATES)

    async def change_password(self, request: ChangePasswordRequest) -> EmptyResponse:
        return await self.execute(ops.CHANGE_PASSWORD, request)

    async def delete_role_mapping(self, request: DeleteRoleMappingRequest) -> DeleteRoleMappingResponse:
        return await self.execute(ops.DELETE_ROLE_MAPPING, request)

    async def get_roles(self, request: GetRolesRequest) -> GetRolesResponse:
        return await self.execute(ops.GET_ROLES, request)

    async def delete_role(self, request: DeleteRoleRequest) -> DeleteRoleResponse:
        return await self.execute(ops.DELETE_ROLE, request)

    async def create_token(self, request: CreateTokenRequest) -> CreateTokenResponse:
        return await self.execute(ops.CREATE_TOKEN, request)

    async def invalidate_token(self, request: InvalidateTokenRequest) -> InvalidateTokenResponse:
        return await self.execute(ops.INVALIDATE_TOKEN, request)

    async def get_privileges(self, request: GetPrivilegesRequest) -> GetPrivilegesResponse:
        return await self.execute(ops.GET_PRIVILEGES, request)

    async def delete_privileges(self, request: DeletePrivilegesRequest) -> DeletePrivilegesResponse:
        return await self.execute(ops.DELETE_PRIVILEGES, request)
