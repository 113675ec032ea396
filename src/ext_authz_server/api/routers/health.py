"""
ext_authz_server.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness endpoint (`/healthz`).
- Provide readiness endpoint (`/readyz`) reporting the active policy.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ext_authz_server.api.deps import decision_service_dep
from ext_authz_server.services.decision_service import DecisionService

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(service: DecisionService = Depends(decision_service_dep)) -> dict[str, str]:
    # Ready once the policy snapshot has been built; there is nothing else to wait for.
    return {"status": "ready", "policy": service.policy_name}
