"""
tests.test_smoke

Minimal smoke tests to validate the service can boot and serve core endpoints.

Responsibilities:
- Ensure the FastAPI app starts with the default policy and its health endpoints answer.
"""

from __future__ import annotations

import httpx
import pytest

from ext_authz_server.api.app import create_app
from ext_authz_server.settings import Settings


@pytest.mark.asyncio
async def test_health_endpoints() -> None:
    app = create_app(settings=Settings(env="test"))

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/healthz")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"
        assert r.headers["x-request-id"]

        r = await client.get("/readyz")
        assert r.status_code == 200
        assert r.json() == {"status": "ready", "policy": "account_plan"}


@pytest.mark.asyncio
async def test_request_id_is_propagated() -> None:
    app = create_app(settings=Settings(env="test", policy_kind="static"))

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/healthz", headers={"x-request-id": "req-123"})
        assert r.headers["x-request-id"] == "req-123"
