from __future__ import annotations

from datetime import datetime

import pytest

from security_client import operations as ops
from security_client.errors import ResponseParseError
from security_client.parsing import extract_reason, sample_payload
from security_client.response_models import EmptyResponse


def test_authenticate_response() -> None:
    parsed = ops.AUTHENTICATE.parser(
        {
            "username": "jacknich",
            "roles": ["admin", "other_role1"],
            "full_name": "Jack Nicholson",
            "email": "jacknich@example.com",
            "metadata": {"intelligence": 7},
            "enabled": True,
            "authentication_realm": {"name": "default_native", "type": "native"},
            "lookup_realm": {"name": "default_native", "type": "native"},
        }
    )

    assert parsed.username == "jacknich"
    assert parsed.roles == ("admin", "other_role1")
    assert parsed.authentication_realm.type == "native"


def test_put_role_mapping_unwraps_envelope() -> None:
    assert ops.PUT_ROLE_MAPPING.parser({"role_mapping": {"created": True}}).created is True


def test_role_mappings_and_roles_are_keyed_by_name() -> None:
    mappings = ops.GET_ROLE_MAPPINGS.parser(
        {"mapping-1": {"enabled": True, "roles": ["superuser"], "rules": {"field": {"username": "*"}}}}
    )
    roles = ops.GET_ROLES.parser(
        {
            "my_admin_role": {
                "cluster": ["all"],
                "indices": [{"names": ["index1", "index2"], "privileges": ["all"], "allow_restricted_indices": False}],
                "applications": [],
                "run_as": ["other_user"],
                "metadata": {"version": 1},
                "transient_metadata": {"enabled": True},
            }
        }
    )

    assert mappings.mappings["mapping-1"].roles == ("superuser",)
    assert roles.roles["my_admin_role"].indices[0].names == ("index1", "index2")


def test_has_privileges_lookups() -> None:
    parsed = ops.HAS_PRIVILEGES.parser(
        {
            "username": "jacknich",
            "has_all_requested": False,
            "cluster": {"monitor": True, "manage": False},
            "index": {"logs-*": {"read": True}},
            "application": {"kibana": {"*": {"all": False}}},
        }
    )

    assert parsed.has_cluster_privilege("monitor") is True
    assert parsed.has_cluster_privilege("manage") is False
    assert parsed.has_index_privilege("logs-*", "read") is True
    assert parsed.has_application_privilege("kibana", "*", "all") is False
    assert parsed.has_application_privilege("missing", "*", "all") is False


def test_cache_clearing_response_reads_nodes_header() -> None:
    payload = {
        "_nodes": {"total": 2, "successful": 2, "failed": 0},
        "cluster_name": "security-cluster",
        "nodes": {"node-a": {"name": "a"}, "node-b": {"name": "b"}},
    }

    realm = ops.CLEAR_REALM_CACHE.parser(payload)
    roles = ops.CLEAR_ROLES_CACHE.parser(payload)

    assert realm.node_stats.successful == 2
    assert set(roles.nodes) == {"node-a", "node-b"}


def test_ssl_certificates() -> None:
    parsed = ops.GET_SSL_CERTIFICATES.parser(
        [
            {
                "path": "certs/node.crt",
                "format": "PEM",
                "alias": None,
                "subject_dn": "CN=node",
                "serial_number": "abc123",
                "has_private_key": True,
                "expiry": "2030-01-01T00:00:00.000Z",
            }
        ]
    )

    assert len(parsed.certificates) == 1
    assert isinstance(parsed.certificates[0].expiry, datetime)


def test_tokens_and_privileges() -> None:
    token = ops.CREATE_TOKEN.parser(
        {"access_token": "dGhpcyBpcyBub3Q=", "type": "Bearer", "expires_in": 1200, "refresh_token": "vLBPvmAB"}
    )
    privileges = ops.GET_PRIVILEGES.parser(
        {"app": {"read": {"application": "app", "name": "read", "actions": ["data:read/*"], "metadata": {}}}}
    )
    deleted = ops.DELETE_PRIVILEGES.parser({"app": {"read": {"found": True}}})

    assert token.expires_in == 1200
    assert [privilege.name for privilege in privileges.privileges] == ["read"]
    assert deleted.is_found("app", "read") is True
    assert deleted.is_found("app", "write") is False


def test_empty_response_accepts_empty_body() -> None:
    assert ops.ENABLE_USER.parser(None) == EmptyResponse()
    assert ops.CHANGE_PASSWORD.parser({}) == EmptyResponse()


def test_model_parser_reports_operation_and_sample() -> None:
    with pytest.raises(ResponseParseError) as excinfo:
        ops.DELETE_ROLE.parser({"deleted": "maybe"})

    assert excinfo.value.operation == "security.delete_role"
    assert excinfo.value.model_name == "DeleteRoleResponse"
    assert excinfo.value.raw_sample == {"deleted": "maybe"}
    assert excinfo.value.errors


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"error": "internal"}, "internal"),
        ({"error": {"type": "security_exception", "reason": "action denied"}}, "action denied"),
        ({"error": {"root_cause": [{"reason": "root reason"}], "type": "x"}}, "root reason"),
        ({"error": {"type": "index_not_found_exception"}}, "index_not_found_exception"),
        ({"message": "gateway down"}, "gateway down"),
        ("  upstream closed  ", "upstream closed"),
        ({"status": 500}, None),
        (None, None),
    ],
)
def test_extract_reason(payload, expected) -> None:
    assert extract_reason(payload) == expected


def test_sample_payload_trims_large_values() -> None:
    sampled = sample_payload({"items": list(range(10)), "text": "x" * 500})

    assert sampled["items"][-1] == "<trimmed>"
    assert sampled["text"].endswith("...")
