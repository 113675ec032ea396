"""
ext_authz_server.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide the shared DecisionService to routers.
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from fastapi import Request

from ext_authz_server.services.decision_service import DecisionService


def decision_service_dep(request: Request) -> DecisionService:
    # Built once in `ext_authz_server.api.app.create_app`.
    return request.app.state.decision_service  # type: ignore[attr-defined]
