"""
tests.test_check_api

End-to-end check calls through the FastAPI app (Envoy HTTP-service mode).

Responsibilities:
- Account/plan and path-prefix verdicts rendered as HTTP responses.
- Raw forwarded paths: percent-encoding and query strings reach the policy untouched.
- Unencodable enrichment headers become an explicit denial, never a server error.
"""

from __future__ import annotations

import json

import httpx
import pytest

from ext_authz_server.api.app import create_app
from ext_authz_server.api.routers.http_authz import to_http_response
from ext_authz_server.authz.config import AccountPlanPolicyConfig, PathPrefixPolicyConfig
from ext_authz_server.authz.models import Decision
from ext_authz_server.authz.responder import respond
from ext_authz_server.settings import Settings


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_account_plan_allow_and_deny() -> None:
    app = create_app(settings=Settings(env="test"))
    async with _client(app) as client:
        r = await client.get("/authz/service/service1", headers={"user": "Scott"})
        assert r.status_code == 200
        assert r.headers["x-account-id"] == "1"
        assert r.headers["x-plan"] == "BASIC"
        assert r.headers["x-service"] == "service1"
        assert r.content == b""

        r = await client.get("/authz/service/service2", headers={"user": "Jonathan"})
        assert r.status_code == 200
        assert r.headers["x-plan"] == "BASIC"

        r = await client.post("/authz/service/service1", headers={"user": "Bill"})
        assert r.status_code == 403
        assert r.json() == {"msg": "denied"}
        assert r.headers["content-type"] == "application/json"
        assert r.headers["x-account-id"] == "3"
        assert r.headers["x-plan"] == "NONE"


@pytest.mark.asyncio
async def test_missing_user_and_bad_path() -> None:
    app = create_app(settings=Settings(env="test"))
    async with _client(app) as client:
        r = await client.get("/authz/service/service1")
        assert r.status_code == 403
        assert r.json() == {"msg": "no user specified"}
        assert "x-plan" not in r.headers

        r = await client.get("/authz/elsewhere", headers={"user": "Scott"})
        assert r.status_code == 400
        assert r.json() == {"msg": "no service specified"}
        assert "x-service" not in r.headers


@pytest.mark.asyncio
async def test_percent_encoded_service_is_checked_raw() -> None:
    app = create_app(settings=Settings(env="test"))
    async with _client(app) as client:
        r = await client.get("/authz/service/%E2%9C%93", headers={"user": "Scott"})

    # Unknown service under the permissive defaults; the segment stays percent-encoded.
    assert r.status_code == 200
    assert r.headers["x-service"] == "%E2%9C%93"
    assert r.headers["x-plan"] == ""


@pytest.mark.asyncio
async def test_query_string_is_part_of_checked_path() -> None:
    app = create_app(settings=Settings(env="test"))
    async with _client(app) as client:
        r = await client.get("/authz/service/service1?a=1", headers={"user": "Bill"})
    # `(.*)` captures the query too, so the lookup misses and the default plan allows.
    assert r.status_code == 200
    assert r.headers["x-service"] == "service1?a=1"
    assert r.headers["x-plan"] == ""

    anchored = create_app(
        settings=Settings(env="test"),
        policy_config=AccountPlanPolicyConfig(path_pattern="^/service/([^/?]+)"),
    )
    async with _client(anchored) as client:
        r = await client.get("/authz/service/service1?a=1", headers={"user": "Bill"})
    assert r.status_code == 403
    assert r.headers["x-service"] == "service1"


def test_unencodable_header_becomes_bad_request() -> None:
    for decision in (
        Decision.allow((("x-service", "✓"),)),
        Decision.deny(status_code=403, body='{"msg": "denied"}', headers=(("x-plan", "a\r\nb"),)),
    ):
        response = to_http_response(respond(decision))
        assert response.status_code == 400
        assert json.loads(response.body) == {"msg": "enrichment header not encodable"}
        assert "x-service" not in response.headers


@pytest.mark.asyncio
async def test_path_prefix_mode() -> None:
    app = create_app(
        settings=Settings(env="test", http_authz_prefix="/check"),
        policy_config=PathPrefixPolicyConfig(),
    )
    async with _client(app) as client:
        r = await client.get("/check/api/pets/123", headers={"x-req-a": "alpha"})
        assert r.status_code == 200
        assert r.headers["x-auth-a"] == "alpha"
        assert r.headers["x-auth-b"] == ""

        r = await client.get("/check/other", headers={"always-approve": "true"})
        assert r.status_code == 200

        r = await client.get("/check/other")
        assert r.status_code == 403
        assert r.json() == {"msg": "denied"}
        assert "x-auth-e" in r.headers

        r = await client.get("/readyz")
        assert r.json()["policy"] == "path_prefix"


@pytest.mark.asyncio
async def test_check_responses_do_not_set_request_id() -> None:
    app = create_app(settings=Settings(env="test"))
    async with _client(app) as client:
        r = await client.get("/authz/service/service1", headers={"user": "Scott"})
        assert "x-request-id" not in r.headers

        r = await client.get("/healthz")
        assert r.headers["x-request-id"]


# --- Module Notes -----------------------------------------------------------
# Scenarios 1-3 run end to end above; 4-5 in `test_path_prefix_mode`.
