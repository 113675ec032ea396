"""
tests.test_responder

Decision -> CheckResponse mapping and header building.
"""

from __future__ import annotations

from ext_authz_server.authz.headers import build_headers
from ext_authz_server.authz.models import Decision
from ext_authz_server.authz.responder import respond
from ext_authz_server.authz.wire import RpcCode

HEADERS = (("x-account-id", "1"), ("x-plan", "BASIC"), ("x-service", "service1"))


def test_build_headers_keeps_order_and_replaces() -> None:
    built = build_headers(HEADERS)
    assert [(h.key, h.value) for h in built] == list(HEADERS)
    assert all(h.append is False for h in built)


def test_allowed_maps_to_ok_response() -> None:
    resp = respond(Decision.allow(HEADERS))
    assert resp.allowed
    assert resp.status.code == RpcCode.ok
    assert resp.denied_response is None
    assert resp.ok_response is not None
    assert [(h.header.key, h.header.value, h.append) for h in resp.ok_response.headers] == [
        (k, v, False) for k, v in HEADERS
    ]


def test_denied_maps_to_denied_response() -> None:
    resp = respond(Decision.deny(status_code=400, body='{"msg": "x"}', headers=HEADERS))
    assert not resp.allowed
    assert resp.status.code == RpcCode.permission_denied == 7
    assert resp.ok_response is None
    denied = resp.denied_response
    assert denied is not None
    assert denied.status.code == 400
    assert denied.body == '{"msg": "x"}'
    assert [h.header.key for h in denied.headers] == [k for k, _ in HEADERS]


def test_denial_defaults() -> None:
    resp = respond(Decision(allowed=False))
    assert resp.denied_response is not None
    assert resp.denied_response.status.code == 403
    assert resp.denied_response.body == "{}"
    assert resp.denied_response.headers == []


def test_wire_json_uses_proto_field_names() -> None:
    resp = respond(Decision.allow(HEADERS[:1]))
    assert resp.model_dump(by_alias=True, exclude_none=True) == {
        "status": {"code": 0, "message": ""},
        "okResponse": {"headers": [{"header": {"key": "x-account-id", "value": "1"}, "append": False}]},
    }
