"""
ext_authz_server.api.app

FastAPI app factory for the external authorization service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Load and freeze the policy snapshot before the app serves any request.
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ext_authz_server import __version__
from ext_authz_server.api.routers.health import router as health_router
from ext_authz_server.api.routers.http_authz import router as http_authz_router
from ext_authz_server.authz.config import PolicyConfig, load_policy_config
from ext_authz_server.observability.logging import configure_logging, get_logger
from ext_authz_server.observability.middleware import RequestContextMiddleware
from ext_authz_server.services.decision_service import DecisionService
from ext_authz_server.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, policy_config: PolicyConfig | None = None) -> FastAPI:
    """
    `policy_config` overrides whatever `settings.policy_kind`/`settings.policy_file` point at.
    Raises `PolicyConfigError` if the policy cannot be loaded; callers must not serve then.
    """

    if policy_config is None:
        policy_config = load_policy_config(kind=settings.policy_kind, path=settings.policy_file)
    decision_service = DecisionService.from_config(policy_config)

    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        policy=decision_service.policy_name,
        json_logs=settings.log_json,
        log_identities=settings.log_identities,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, policy=decision_service.policy_name)
        yield
        log.info("shutdown")

    app = FastAPI(
        lifespan=lifespan,
        title="External Authorization Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.decision_service = decision_service

    app.add_middleware(RequestContextMiddleware, authz_prefix=settings.http_authz_prefix)
    app.include_router(health_router, tags=["health"])
    # Catch-all; must be registered after every fixed route.
    app.include_router(http_authz_router, prefix=settings.http_authz_prefix)

    return app


# --- Module Notes -----------------------------------------------------------
# Building the DecisionService here (not in a startup hook) makes a bad policy file fail
# `create_app` itself, before uvicorn binds the listener.
