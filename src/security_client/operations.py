"""Per-endpoint operation table: converter, parser and ignorable statuses."""

from __future__ import annotations

from typing import Any

from . import converters
from .dispatch import Operation
from .parsing import model_parser
from .request_models import DeletePrivilegesRequest, DeleteRoleRequest
from .response_models import (
    AuthenticateResponse,
    ClearRealmCacheResponse,
    ClearRolesCacheResponse,
    CreateTokenResponse,
    DeletePrivilegesResponse,
    DeleteRoleMappingResponse,
    DeleteRoleResponse,
    EmptyResponse,
    FoundFlag,
    GetPrivilegesResponse,
    GetRoleMappingsResponse,
    GetRolesResponse,
    GetSslCertificatesResponse,
    HasPrivilegesResponse,
    InvalidateTokenResponse,
    PutRoleMappingResponse,
    PutUserResponse,
)

NOT_FOUND_IS_ABSENT = frozenset({404})


def _role_not_deleted(_request: DeleteRoleRequest) -> DeleteRoleResponse:
    return DeleteRoleResponse(found=False)


def _privileges_not_deleted(request: DeletePrivilegesRequest) -> DeletePrivilegesResponse:
    return DeletePrivilegesResponse(
        {request.application: {name: FoundFlag(found=False) for name in request.names}}
    )


def _operation(
    name: str,
    converter: Any,
    response_model: Any,
    *,
    ignorable: frozenset[int] = frozenset(),
    absent: Any = None,
) -> Operation[Any, Any]:
    return Operation(
        name=name,
        converter=converter,
        parser=model_parser(response_model, operation=name),
        ignorable_statuses=ignorable,
        absent=absent,
    )


PUT_USER = _operation("security.put_user", converters.put_user, PutUserResponse)
PUT_ROLE_MAPPING = _operation("security.put_role_mapping", converters.put_role_mapping, PutRoleMappingResponse)
GET_ROLE_MAPPINGS = _operation("security.get_role_mappings", converters.get_role_mappings, GetRoleMappingsResponse)
ENABLE_USER = _operation("security.enable_user", converters.enable_user, EmptyResponse)
DISABLE_USER = _operation("security.disable_user", converters.disable_user, EmptyResponse)
AUTHENTICATE = _operation("security.authenticate", converters.authenticate, AuthenticateResponse)
HAS_PRIVILEGES = _operation("security.has_privileges", converters.has_privileges, HasPrivilegesResponse)
CLEAR_REALM_CACHE = _operation("security.clear_realm_cache", converters.clear_realm_cache, ClearRealmCacheResponse)
CLEAR_ROLES_CACHE = _operation("security.clear_roles_cache", converters.clear_roles_cache, ClearRolesCacheResponse)
GET_SSL_CERTIFICATES = _operation(
    "security.get_ssl_certificates", converters.get_ssl_certificates, GetSslCertificatesResponse
)
CHANGE_PASSWORD = _operation("security.change_password", converters.change_password, EmptyResponse)
DELETE_ROLE_MAPPING = _operation(
    "security.delete_role_mapping", converters.delete_role_mapping, DeleteRoleMappingResponse
)
GET_ROLES = _operation("security.get_roles", converters.get_roles, GetRolesResponse)
DELETE_ROLE = _operation(
    "security.delete_role",
    converters.delete_role,
    DeleteRoleResponse,
    ignorable=NOT_FOUND_IS_ABSENT,
    absent=_role_not_deleted,
)
CREATE_TOKEN = _operation("security.create_token", converters.create_token, CreateTokenResponse)
INVALIDATE_TOKEN = _operation("security.invalidate_token", converters.invalidate_token, InvalidateTokenResponse)
GET_PRIVILEGES = _operation("security.get_privileges", converters.get_privileges, GetPrivilegesResponse)
DELETE_PRIVILEGES = _operation(
    "security.delete_privileges",
    converters.delete_privileges,
    DeletePrivilegesResponse,
    ignorable=NOT_FOUND_IS_ABSENT,
    absent=_privileges_not_deleted,
)

OPERATIONS: dict[str, Operation[Any, Any]] = {
    operation.name: operation
    for operation in (
        PUT_USER,
        PUT_ROLE_MAPPING,
        GET_ROLE_MAPPINGS,
        ENABLE_USER,
        DISABLE_USER,
        AUTHENTICATE,
        HAS_PRIVILEGES,
        CLEAR_REALM_CACHE,
        CLEAR_ROLES_CACHE,
        GET_SSL_CERTIFICATES,
        CHANGE_PASSWORD,
        DELETE_ROLE_MAPPING,
        GET_ROLES,
        DELETE_ROLE,
        CREATE_TOKEN,
        INVALIDATE_TOKEN,
        GET_PRIVILEGES,
        DELETE_PRIVILEGES,
    )
}


def resolve_operation(operation: str | Operation[Any, Any]) -> Operation[Any, Any]:
    if isinstance(operation, Operation):
        return operation
    resolved = OPERATIONS.get(operation)
    if resolved is None:
        raise ValueError(f"unknown security operation {operation!r}")
    return resolved
