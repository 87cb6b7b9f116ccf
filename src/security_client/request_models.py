"""Request values accepted by the security facade."""

from __future__ import annotations

from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, model_validator

RefreshPolicy: TypeAlias = Literal["true", "false", "wait_for"]
GrantType: TypeAlias = Literal["password", "refresh_token", "client_credentials"]


class SecurityRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class RefreshableRequest(SecurityRequest):
    refresh: RefreshPolicy | None = None


class PutUserRequest(RefreshableRequest):
    username: str = Field(min_length=1)
    password: str | None = None
    roles: tuple[str, ...] = ()
    full_name: str | None = None
    email: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True


class PutRoleMappingRequest(RefreshableRequest):
    name: str = Field(min_length=1)
    enabled: bool = True
    roles: tuple[str, ...] = Field(min_length=1)
    # Raw rule document, e.g. {"field": {"username": "*"}}.
    rules: dict[str, Any]
    metadata: dict[str, Any] = Field(default_factory=dict)


class GetRoleMappingsRequest(SecurityRequest):
    names: tuple[str, ...] = ()


class EnableUserRequest(RefreshableRequest):
    username: str = Field(min_length=1)


class DisableUserRequest(RefreshableRequest):
    username: str = Field(min_length=1)


class AuthenticateRequest(SecurityRequest):
    pass


class IndexPrivileges(SecurityRequest):
    names: tuple[str, ...] = Field(min_length=1)
    privileges: tuple[str, ...] = Field(min_length=1)


class ApplicationResourcePrivileges(SecurityRequest):
    application: str = Field(min_length=1)
    privileges: tuple[str, ...] = Field(min_length=1)
    resources: tuple[str, ...] = Field(min_length=1)


class HasPrivilegesRequest(SecurityRequest):
    cluster: tuple[str, ...] = ()
    index: tuple[IndexPrivileges, ...] = ()
    application: tuple[ApplicationResourcePrivileges, ...] = ()

    @model_validator(mode="after")
    def _require_privileges(self) -> HasPrivilegesRequest:
        if not (self.cluster or self.index or self.application):
            raise ValueError("at least one cluster, index or application privilege is required")
        return self


class ClearRealmCacheRequest(SecurityRequest):
    realms: tuple[str, ...] = ()
    usernames: tuple[str, ...] = ()


class ClearRolesCacheRequest(SecurityRequest):
    names: tuple[str, ...] = ()


class GetSslCertificatesRequest(SecurityRequest):
    pass


class ChangePasswordRequest(RefreshableRequest):
    username: str | None = None
    password: str = Field(min_length=1)


class DeleteRoleMappingRequest(RefreshableRequest):
    name: str = Field(min_length=1)


class GetRolesRequest(SecurityRequest):
    names: tuple[str, ...] = ()


class DeleteRoleRequest(RefreshableRequest):
    name: str = Field(min_length=1)


class CreateTokenRequest(SecurityRequest):
    grant_type: GrantType
    scope: str | None = None
    username: str | None = None
    password: str | None = None
    refresh_token: str | None = None

    @model_validator(mode="after")
    def _check_grant(self) -> CreateTokenRequest:
        if self.grant_type == "password" and not (self.username and self.password):
            raise ValueError("password grant requires username and password")
        if self.grant_type == "refresh_token" and not self.refresh_token:
            raise ValueError("refresh_token grant requires refresh_token")
        return self

    @classmethod
    def password_grant(cls, username: str, password: str, *, scope: str | None = None) -> CreateTokenRequest:
        return cls(grant_type="password", username=username, password=password, scope=scope)

    @classmethod
    def refresh_token_grant(cls, refresh_token: str, *, scope: str | None = None) -> CreateTokenRequest:
        return cls(grant_type="refresh_token", refresh_token=refresh_token, scope=scope)

    @classmethod
    def client_credentials_grant(cls, *, scope: str | None = None) -> CreateTokenRequest:
        return cls(grant_type="client_credentials", scope=scope)


class InvalidateTokenRequest(SecurityRequest):
    access_token: str | None = None
    refresh_token: str | None = None

    @model_validator(mode="after")
    def _exactly_one_token(self) -> InvalidateTokenRequest:
        if bool(self.access_token) == bool(self.refresh_token):
            raise ValueError("exactly one of access_token or refresh_token is required")
        return self


class GetPrivilegesRequest(SecurityRequest):
    application: str | None = None
    names: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _names_need_application(self) -> GetPrivilegesRequest:
        if self.names and not self.application:
            raise ValueError("privilege names require an application")
        return self


class DeletePrivilegesRequest(RefreshableRequest):
    application: str = Field(min_length=1)
    names: tuple[str, ...] = Field(min_length=1)
