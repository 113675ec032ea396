"""
ext_authz_server.authz.config

Policy configuration models and loader.

Responsibilities:
- Validate the startup policy snapshot (one model per policy variant, discriminated on `kind`).
- Load it from an optional JSON file, falling back to built-in defaults per variant.
- Turn every load/validation failure into `PolicyConfigError` so startup aborts cleanly.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from ext_authz_server.authz.context import DEFAULT_SERVICE_PATTERN, compile_service_pattern
from ext_authz_server.authz.errors import PolicyConfigError
from ext_authz_server.authz.registry import DEFAULT_ACCOUNT_ID, DEFAULT_PLAN

# Sample registry used when no policy file is given.
SAMPLE_USERS: dict[str, int] = {
    "Scott": 1,
    "Yuval": 1,
    "Jonathan": 2,
    "Yuliia": 2,
    "Bill": 3,
}
SAMPLE_ACCOUNTS: dict[int, dict[str, str]] = {
    1: {"service1": "BASIC", "service2": "NONE"},
    2: {"service1": "PLUS", "service2": "BASIC"},
    3: {"service1": "NONE", "service2": "PLUS"},
}

DEFAULT_PREFIX = "/api/pets"
ECHO_HEADERS: dict[str, str] = {f"x-auth-{c}": f"x-req-{c}" for c in "abcde"}
STATIC_HEADERS: dict[str, str] = {f"x-auth-{c}": c for c in "abcde"}


class _PolicyConfigBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class AccountPlanPolicyConfig(_PolicyConfigBase):
    kind: Literal["account_plan"] = "account_plan"
    identity_header: str = Field(default="user", min_length=1)
    path_pattern: str = DEFAULT_SERVICE_PATTERN
    users: dict[str, int] = Field(default_factory=lambda: dict(SAMPLE_USERS))
    accounts: dict[int, dict[str, str]] = Field(
        default_factory=lambda: {k: dict(v) for k, v in SAMPLE_ACCOUNTS.items()}
    )
    # Fallbacks for registry misses; the defaults allow (see `authz.registry`).
    default_account_id: int = DEFAULT_ACCOUNT_ID
    default_plan: str = DEFAULT_PLAN
    strict_lookups: bool = False

    @field_validator("path_pattern")
    @classmethod
    def _check_pattern(cls, v: str) -> str:
        try:
            compile_service_pattern(v)
        except PolicyConfigError as e:
            raise ValueError(str(e)) from e
        return v


class PathPrefixPolicyConfig(_PolicyConfigBase):
    kind: Literal["path_prefix"] = "path_prefix"
    prefix: str = DEFAULT_PREFIX
    # `null` disables the bypass check (prefix-only deployments).
    bypass_header: str | None = "always-approve"
    bypass_value: str = "true"
    # Output header -> source request header, in emission order.
    echo_headers: dict[str, str] = Field(default_factory=lambda: dict(ECHO_HEADERS))
    missing_header_value: str = ""
    omit_missing_headers: bool = False


class StaticPolicyConfig(_PolicyConfigBase):
    kind: Literal["static"] = "static"
    prefix: str = DEFAULT_PREFIX
    headers: dict[str, str] = Field(default_factory=lambda: dict(STATIC_HEADERS))


PolicyConfig = Annotated[
    AccountPlanPolicyConfig | PathPrefixPolicyConfig | StaticPolicyConfig,
    Field(discriminator="kind"),
]

_adapter: TypeAdapter[PolicyConfig] = TypeAdapter(PolicyConfig)


def default_policy_config(kind: str) -> PolicyConfig:
    try:
        return _adapter.validate_python({"kind": kind})
    except ValidationError as e:
        raise PolicyConfigError(f"unknown policy kind {kind!r}") from e


def parse_policy_config(data: dict, *, kind: str | None = None) -> PolicyConfig:
    if not isinstance(data, dict):
        raise PolicyConfigError("policy document must be a JSON object")
    data = dict(data)
    if kind is not None:
        declared = data.setdefault("kind", kind)
        if declared != kind:
            raise PolicyConfigError(
                f"policy document declares kind {declared!r} but {kind!r} is configured"
            )
    try:
        return _adapter.validate_python(data)
    except ValidationError as e:
        raise PolicyConfigError(f"invalid policy document: {e}") from e


def load_policy_config(*, kind: str, path: str | None = None) -> PolicyConfig:
    if path is None:
        return default_policy_config(kind)
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise PolicyConfigError(f"cannot read policy file {path!r}: {e}") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PolicyConfigError(f"policy file {path!r} is not valid JSON: {e}") from e
    return parse_policy_config(data, kind=kind)


# --- Module Notes -----------------------------------------------------------
# Models are frozen; `policies.build_policy` copies them into immutable runtime objects.
