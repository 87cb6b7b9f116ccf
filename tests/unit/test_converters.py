from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from security_client import converters
from security_client.dispatch import Dispatcher
from security_client.errors import RequestBuildError
from security_client.operations import DELETE_PRIVILEGES, DELETE_ROLE, OPERATIONS, PUT_USER, resolve_operation
from security_client.request_models import (
    ApplicationResourcePrivileges,
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
    IndexPrivileges,
    InvalidateTokenRequest,
    PutRoleMappingRequest,
    PutUserRequest,
)


def _body(call) -> dict:
    assert call.body is not None
    assert call.content_type == "application/json"
    return json.loads(call.body)


def test_converters_are_deterministic() -> None:
    request = PutUserRequest(username="jacknich", roles=("admin", "other_role1"), metadata={"intelligence": 7})

    assert converters.put_user(request) == converters.put_user(request)


def test_put_user_omits_unset_optional_fields() -> None:
    call = converters.put_user(PutUserRequest(username="jacknich", roles=("admin",)))

    assert call.method == "PUT"
    assert call.path == "/_xpack/security/user/jacknich"
    assert call.query == ()
    assert _body(call) == {"roles": ["admin"], "metadata": {}, "enabled": True}


def test_path_segments_are_escaped() -> None:
    call = converters.delete_role(DeleteRoleRequest(name="team/ops lead", refresh="true"))

    assert call.path == "/_xpack/security/role/team%2Fops%20lead"
    assert call.query == (("refresh", "true"),)


def test_put_role_mapping_body_and_refresh() -> None:
    call = converters.put_role_mapping(
        PutRoleMappingRequest(
            name="mapping-1",
            roles=("superuser",),
            rules={"field": {"username": "*"}},
            refresh="wait_for",
        )
    )

    assert call.path == "/_xpack/security/role_mapping/mapping-1"
    assert call.query == (("refresh", "wait_for"),)
    assert _body(call)["rules"] == {"field": {"username": "*"}}


def test_listing_converters_join_names() -> None:
    assert converters.get_role_mappings(GetRoleMappingsRequest()).path == "/_xpack/security/role_mapping"
    assert (
        converters.get_role_mappings(GetRoleMappingsRequest(names=("a", "b"))).path
        == "/_xpack/security/role_mapping/a,b"
    )
    assert converters.get_roles(GetRolesRequest(names=("r1", "r2"))).path == "/_xpack/security/role/r1,r2"


def test_enable_and_disable_user() -> None:
    enable = converters.enable_user(EnableUserRequest(username="jacknich", refresh="true"))
    disable = converters.disable_user(DisableUserRequest(username="jacknich"))

    assert (enable.method, enable.path, enable.query) == (
        "PUT",
        "/_xpack/security/user/jacknich/_enable",
        (("refresh", "true"),),
    )
    assert (disable.method, disable.path, disable.body) == ("PUT", "/_xpack/security/user/jacknich/_disable", None)


def test_parameterless_converters() -> None:
    assert converters.authenticate(AuthenticateRequest()).path == "/_xpack/security/_authenticate"
    assert converters.get_ssl_certificates(GetSslCertificatesRequest()).path == "/_xpack/ssl/certificates"


def test_has_privileges_body() -> None:
    call = converters.has_privileges(
        HasPrivilegesRequest(
            cluster=("monitor",),
            index=(IndexPrivileges(names=("logs-*",), privileges=("read",)),),
            application=(
                ApplicationResourcePrivileges(application="kibana", privileges=("all",), resources=("*",)),
            ),
        )
    )

    assert call.method == "GET"
    assert call.path == "/_xpack/security/user/_has_privileges"
    assert _body(call) == {
        "cluster": ["monitor"],
        "index": [{"names": ["logs-*"], "privileges": ["read"]}],
        "application": [{"application": "kibana", "privileges": ["all"], "resources": ["*"]}],
    }


def test_has_privileges_requires_something_to_check() -> None:
    with pytest.raises(ValidationError):
        HasPrivilegesRequest()


def test_cache_clearing_defaults_to_everything() -> None:
    realm = converters.clear_realm_cache(ClearRealmCacheRequest())
    scoped = converters.clear_realm_cache(ClearRealmCacheRequest(realms=("file", "ldap"), usernames=("u1", "u2")))
    roles = converters.clear_roles_cache(ClearRolesCacheRequest())

    assert (realm.method, realm.path, realm.query) == ("POST", "/_xpack/security/realm/_all/_clear_cache", ())
    assert scoped.path == "/_xpack/security/realm/file,ldap/_clear_cache"
    assert scoped.query == (("usernames", "u1,u2"),)
    assert roles.path == "/_xpack/security/role/*/_clear_cache"


def test_change_password_for_current_and_named_user() -> None:
    current = converters.change_password(ChangePasswordRequest(password="n3w-p@ss"))
    named = converters.change_password(ChangePasswordRequest(username="jacknich", password="n3w-p@ss"))

    assert current.path == "/_xpack/security/user/_password"
    assert named.path == "/_xpack/security/user/jacknich/_password"
    assert _body(named) == {"password": "n3w-p@ss"}


def test_delete_role_mapping() -> None:
    call = converters.delete_role_mapping(DeleteRoleMappingRequest(name="mapping-1"))

    assert (call.method, call.path) == ("DELETE", "/_xpack/security/role_mapping/mapping-1")


def test_token_converters() -> None:
    create = converters.create_token(CreateTokenRequest.password_grant("jacknich", "s3cr3t"))
    invalidate = converters.invalidate_token(InvalidateTokenRequest(refresh_token="r-token"))

    assert (create.method, create.path) == ("POST", "/_xpack/security/oauth2/token")
    assert _body(create) == {"grant_type": "password", "username": "jacknich", "password": "s3cr3t"}
    assert (invalidate.method, invalidate.path) == ("DELETE", "/_xpack/security/oauth2/token")
    assert _body(invalidate) == {"refresh_token": "r-token"}


def test_token_requests_validate_grants() -> None:
    with pytest.raises(ValidationError):
        CreateTokenRequest(grant_type="password", username="jacknich")
    with pytest.raises(ValidationError):
        InvalidateTokenRequest()
    with pytest.raises(ValidationError):
        InvalidateTokenRequest(access_token="a", refresh_token="r")


def test_privilege_converters() -> None:
    assert converters.get_privileges(GetPrivilegesRequest()).path == "/_xpack/security/privilege"
    assert converters.get_privileges(GetPrivilegesRequest(application="app")).path == "/_xpack/security/privilege/app"
    assert (
        converters.get_privileges(GetPrivilegesRequest(application="app", names=("read", "write"))).path
        == "/_xpack/security/privilege/app/read,write"
    )
    delete = converters.delete_privileges(DeletePrivilegesRequest(application="app", names=("read",)))
    assert (delete.method, delete.path) == ("DELETE", "/_xpack/security/privilege/app/read")


def test_requests_are_immutable() -> None:
    request = PutUserRequest(username="jacknich")

    with pytest.raises(ValidationError):
        request.username = "someone-else"  # type: ignore[misc]


def test_operation_table_policies() -> None:
    assert len(OPERATIONS) == 18
    forgiving = {name for name, op in OPERATIONS.items() if op.ignorable_statuses}
    assert forgiving == {DELETE_ROLE.name, DELETE_PRIVILEGES.name}
    assert resolve_operation("security.put_user") is PUT_USER
    with pytest.raises(ValueError):
        resolve_operation("security.unknown")


def test_wrong_request_type_is_a_build_failure() -> None:
    class _NoTransport:
        def send(self, call):
            raise AssertionError("transport must not be reached")

    dispatcher = Dispatcher(_NoTransport())

    with pytest.raises(RequestBuildError):
        dispatcher.execute({"username": "jacknich"}, PUT_USER.converter, PUT_USER.parser)
