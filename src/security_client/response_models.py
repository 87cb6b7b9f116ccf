"""Typed results parsed from security API responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, model_validator


class SecurityResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class EmptyResponse(SecurityResponse):
    """Acknowledgement with no content (enable/disable user, change password)."""

    @model_validator(mode="before")
    @classmethod
    def _accept_empty_body(cls, data: Any) -> Any:
        return {} if data is None else data


class PutUserResponse(SecurityResponse):
    created: bool


class PutRoleMappingResponse(SecurityResponse):
    created: bool

    @model_validator(mode="before")
    @classmethod
    def _unwrap(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("role_mapping"), dict):
            return data["role_mapping"]
        return data


class RoleMapping(SecurityResponse):
    enabled: bool
    roles: tuple[str, ...] = ()
    rules: dict[str, Any]
    metadata: dict[str, Any] = Field(default_factory=dict)


class GetRoleMappingsResponse(RootModel[dict[str, RoleMapping]]):
    @property
    def mappings(self) -> dict[str, RoleMapping]:
        return self.root


class RealmInfo(SecurityResponse):
    name: str
    type: str


class AuthenticateResponse(SecurityResponse):
    username: str
    roles: tuple[str, ...] = ()
    full_name: str | None = None
    email: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True
    authentication_realm: RealmInfo
    lookup_realm: RealmInfo


class HasPrivilegesResponse(SecurityResponse):
    username: str
    has_all_requested: bool
    cluster: dict[str, bool] = Field(default_factory=dict)
    index: dict[str, dict[str, bool]] = Field(default_factory=dict)
    application: dict[str, dict[str, dict[str, bool]]] = Field(default_factory=dict)

    def has_cluster_privilege(self, privilege: str) -> bool:
        return self.cluster.get(privilege, False)

    def has_index_privilege(self, index: str, privilege: str) -> bool:
        return self.index.get(index, {}).get(privilege, False)

    def has_application_privilege(self, application: str, resource: str, privilege: str) -> bool:
        return self.application.get(application, {}).get(resource, {}).get(privilege, False)


class NodesHeader(SecurityResponse):
    total: int
    successful: int
    failed: int
    failures: tuple[dict[str, Any], ...] = ()


class NodeInfo(SecurityResponse):
    name: str


class ClearRealmCacheResponse(SecurityResponse):
    node_stats: NodesHeader = Field(alias="_nodes")
    cluster_name: str
    nodes: dict[str, NodeInfo] = Field(default_factory=dict)


class ClearRolesCacheResponse(ClearRealmCacheResponse):
    pass


class CertificateInfo(SecurityResponse):
    path: str
    format: str
    alias: str | None = None
    subject_dn: str
    serial_number: str
    has_private_key: bool
    expiry: datetime


class GetSslCertificatesResponse(RootModel[tuple[CertificateInfo, ...]]):
    @property
    def certificates(self) -> tuple[CertificateInfo, ...]:
        return self.root


class DeleteRoleMappingResponse(SecurityResponse):
    found: bool


class IndicesPrivileges(SecurityResponse):
    names: tuple[str, ...]
    privileges: tuple[str, ...]
    field_security: dict[str, Any] | None = None
    query: str | dict[str, Any] | None = None
    allow_restricted_indices: bool | None = None


class ApplicationPrivileges(SecurityResponse):
    application: str
    privileges: tuple[str, ...]
    resources: tuple[str, ...]


class Role(SecurityResponse):
    cluster: tuple[str, ...] = ()
    indices: tuple[IndicesPrivileges, ...] = ()
    applications: tuple[ApplicationPrivileges, ...] = ()
    run_as: tuple[str, ...] = ()
    metadata: dict[str, Any] = Field(default_factory=dict)
    transient_metadata: dict[str, Any] = Field(default_factory=dict)


class GetRolesResponse(RootModel[dict[str, Role]]):
    @property
    def roles(self) -> dict[str, Role]:
        return self.root


class DeleteRoleResponse(SecurityResponse):
    found: bool


class CreateTokenResponse(SecurityResponse):
    access_token: str
    type: str
    expires_in: int | None = None
    scope: str | None = None
    refresh_token: str | None = None


class InvalidateTokenResponse(SecurityResponse):
    created: bool


class ApplicationPrivilege(SecurityResponse):
    application: str
    name: str
    actions: tuple[str, ...] = ()
    metadata: dict[str, Any] = Field(default_factory=dict)


class GetPrivilegesResponse(RootModel[dict[str, dict[str, ApplicationPrivilege]]]):
    @property
    def privileges(self) -> list[ApplicationPrivilege]:
        return [privilege for by_name in self.root.values() for privilege in by_name.values()]


class FoundFlag(SecurityResponse):
    found: bool


class DeletePrivilegesResponse(RootModel[dict[str, dict[str, FoundFlag]]]):
    def is_found(self, application: str, name: str) -> bool:
        flag = self.root.get(application, {}).get(name)
        return flag.found if flag is not None else False
