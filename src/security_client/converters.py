"""Pure request -> wire call converters for the security API."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from urllib.parse import quote

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
    RefreshableRequest,
)
from .transport import WireCall, json_body, query_pairs

SECURITY_PREFIX = "/_xpack/security"
SSL_CERTIFICATES_PATH = "/_xpack/ssl/certificates"


def _segment(value: str) -> str:
    if not value:
        raise ValueError("path segments must not be empty")
    return quote(value, safe="")


def _csv(values: Iterable[str]) -> str:
    return ",".join(_segment(value) for value in values)


def _path(*parts: str) -> str:
    return SECURITY_PREFIX + "".join(f"/{part}" for part in parts if part)


def _refresh(request: RefreshableRequest) -> tuple[tuple[str, str], ...]:
    return query_pairs({"refresh": request.refresh})


def _call(
    operation: str,
    method: str,
    path: str,
    *,
    query: tuple[tuple[str, str], ...] = (),
    body: Any | None = None,
) -> WireCall:
    if body is None:
        return WireCall(operation=operation, method=method, path=path, query=query)
    payload, content_type = json_body(body)
    return WireCall(
        operation=operation,
        method=method,
        path=path,
        query=query,
        body=payload,
        content_type=content_type,
    )


def put_user(request: PutUserRequest) -> WireCall:
    body: dict[str, Any] = {
        "roles": list(request.roles),
        "metadata": request.metadata,
        "enabled": request.enabled,
    }
    if request.password is not None:
        body["password"] = request.password
    if request.full_name is not None:
        body["full_name"] = request.full_name
    if request.email is not None:
        body["email"] = request.email
    return _call(
        "security.put_user",
        "PUT",
        _path("user", _segment(request.username)),
        query=_refresh(request),
        body=body,
    )


def put_role_mapping(request: PutRoleMappingRequest) -> WireCall:
    return _call(
        "security.put_role_mapping",
        "PUT",
        _path("role_mapping", _segment(request.name)),
        query=_refresh(request),
        body={
            "enabled": request.enabled,
            "roles": list(request.roles),
            "rules": request.rules,
            "metadata": request.metadata,
        },
    )


def get_role_mappings(request: GetRoleMappingsRequest) -> WireCall:
    return _call("security.get_role_mappings", "GET", _path("role_mapping", _csv(request.names)))


def enable_user(request: EnableUserRequest) -> WireCall:
    return _call(
        "security.enable_user",
        "PUT",
        _path("user", _segment(request.username), "_enable"),
        query=_refresh(request),
    )


def disable_user(request: DisableUserRequest) -> WireCall:
    return _call(
        "security.disable_user",
        "PUT",
        _path("user", _segment(request.username), "_disable"),
        query=_refresh(request),
    )


def authenticate(request: AuthenticateRequest) -> WireCall:
    return _call("security.authenticate", "GET", _path("_authenticate"))


def has_privileges(request: HasPrivilegesRequest) -> WireCall:
    body: dict[str, Any] = {}
    if request.cluster:
        body["cluster"] = list(request.cluster)
    if request.index:
        body["index"] = [
            {"names": list(entry.names), "privileges": list(entry.privileges)} for entry in request.index
        ]
    if request.application:
        body["application"] = [
            {
                "application": entry.application,
                "privileges": list(entry.privileges),
                "resources": list(entry.resources),
            }
            for entry in request.application
        ]
    return _call("security.has_privileges", "GET", _path("user", "_has_privileges"), body=body)


def clear_realm_cache(request: ClearRealmCacheRequest) -> WireCall:
    realms = _csv(request.realms) if request.realms else "_all"
    return _call(
        "security.clear_realm_cache",
        "POST",
        _path("realm", realms, "_clear_cache"),
        query=query_pairs({"usernames": list(request.usernames) or None}),
    )


def clear_roles_cache(request: ClearRolesCacheRequest) -> WireCall:
    names = _csv(request.names) if request.names else "*"
    return _call("security.clear_roles_cache", "POST", _path("role", names, "_clear_cache"))


def get_ssl_certificates(request: GetSslCertificatesRequest) -> WireCall:
    return _call("security.get_ssl_certificates", "GET", SSL_CERTIFICATES_PATH)


def change_password(request: ChangePasswordRequest) -> WireCall:
    # Without a username the password of the authenticated user is changed.
    user = _segment(request.username) if request.username is not None else ""
    return _call(
        "security.change_password",
        "PUT",
        _path("user", user, "_password"),
        query=_refresh(request),
        body={"password": request.password},
    )


def delete_role_mapping(request: DeleteRoleMappingRequest) -> WireCall:
    return _call(
        "security.delete_role_mapping",
        "DELETE",
        _path("role_mapping", _segment(request.name)),
        query=_refresh(request),
    )


def get_roles(request: GetRolesRequest) -> WireCall:
    return _call("security.get_roles", "GET", _path("role", _csv(request.names)))


def delete_role(request: DeleteRoleRequest) -> WireCall:
    return _call(
        "security.delete_role",
        "DELETE",
        _path("role", _segment(request.name)),
        query=_refresh(request),
    )


def create_token(request: CreateTokenRequest) -> WireCall:
    body = request.model_dump(exclude_none=True)
    return _call("security.create_token", "POST", _path("oauth2", "token"), body=body)


def invalidate_token(request: InvalidateTokenRequest) -> WireCall:
    if request.access_token is not None:
        body = {"token": request.access_token}
    else:
        body = {"refresh_token": request.refresh_token}
    return _call("security.invalidate_token", "DELETE", _path("oauth2", "token"), body=body)


def get_privileges(request: GetPrivilegesRequest) -> WireCall:
    application = _segment(request.application) if request.application else ""
    return _call(
        "security.get_privileges",
        "GET",
        _path("privilege", application, _csv(request.names)),
    )


def delete_privileges(request: DeletePrivilegesRequest) -> WireCall:
    return _call(
        "security.delete_privileges",
        "DELETE",
        _path("privilege", _segment(request.application), _csv(request.names)),
        query=_refresh(request),
    )
