"""
ext_authz_server.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the service.
- Select the active policy variant and point at its (optional) policy file.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PolicyKind = Literal["account_plan", "path_prefix", "static"]


class Settings(BaseSettings):
    """
    - Env-driven (EXTAUTHZ_*), defaults safe for local dev
    - One settings object per process; the policy snapshot is derived from it at startup
    """

    model_config = SettingsConfigDict(env_prefix="EXTAUTHZ_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "ext-authz-server"
    log_level: str = "INFO"
    # False switches to structlog console rendering (local dev).
    log_json: bool = True
    # Decision logs mask usernames unless this is set.
    log_identities: bool = False

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Policy selection. Exactly one variant is active per process.
    policy_kind: PolicyKind = "account_plan"
    # JSON policy document; when unset the built-in defaults for `policy_kind` apply.
    policy_file: str | None = None

    # Envoy HTTP-service mode: checked path is whatever follows this prefix.
    http_authz_prefix: str = Field(default="/authz", pattern=r"^/.*[^/]$")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Registries are deliberately not env vars: they are loaded once from `policy_file`
# (see `authz.config`) and frozen for the process lifetime.
