"""
ext_authz_server.api.__main__

Entrypoint for running the service via `python -m ext_authz_server.api`.

Responsibilities:
- Load settings.
- Create the app (aborts on policy configuration errors).
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import sys

import uvicorn

from ext_authz_server.api.app import create_app
from ext_authz_server.authz.errors import PolicyConfigError
from ext_authz_server.observability.logging import get_logger
from ext_authz_server.settings import get_settings

log = get_logger(__name__)


def main() -> None:
    settings = get_settings()
    try:
        app = create_app(settings=settings)
    except PolicyConfigError as e:
        log.error("policy_config_error", error=str(e))
        sys.exit(1)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()
