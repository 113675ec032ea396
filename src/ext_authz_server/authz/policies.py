"""
ext_authz_server.authz.policies

Policy engine: one pluggable `Policy` capability, three concrete variants.

Responsibilities:
- Account/plan lookup policy (identity header -> account -> plan for the routed service).
- Path-prefix policy with optional bypass flag and request-header echoing.
- Static enrichment policy (fixed header values, prefix-only allow rule).
- Build the single active policy from the validated startup configuration.

Every traffic-time failure is resolved into a `Decision` here; nothing escapes to the
transport layer.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Protocol

from starlette.status import HTTP_400_BAD_REQUEST, HTTP_403_FORBIDDEN

from ext_authz_server.authz.config import (
    AccountPlanPolicyConfig,
    PathPrefixPolicyConfig,
    PolicyConfig,
    StaticPolicyConfig,
)
from ext_authz_server.authz.errors import (
    MissingIdentity,
    PatternMismatch,
    PolicyConfigError,
    UnknownIdentity,
    UnknownService,
)
from ext_authz_server.authz.models import Decision, PlanTier, RequestContext
from ext_authz_server.authz.registry import PolicyRegistry
from ext_authz_server.observability.logging import get_logger

log = get_logger(__name__)

MSG_NO_USER = "no user specified"
MSG_NO_SERVICE = "no service specified"
MSG_UNKNOWN_USER = "unknown user"
MSG_UNKNOWN_SERVICE = "unknown service"
MSG_DENIED = "denied"


def denial_body(msg: str) -> str:
    return json.dumps({"msg": msg})


class Policy(Protocol):
    name: str

    def evaluate(self, ctx: RequestContext) -> Decision: ...


class AccountPlanPolicy:
    """
    Allow iff the plan of the caller's account for the routed service is not "NONE".

    `x-account-id`, `x-plan` and `x-service` are attached to both outcomes once the
    identity and service are known; the early denials carry no headers.
    """

    name = "account_plan"

    def __init__(self, *, registry: PolicyRegistry, identity_header: str = "user") -> None:
        self._registry = registry
        self._identity_header = identity_header

    def evaluate(self, ctx: RequestContext) -> Decision:
        try:
            return self._evaluate(ctx)
        except MissingIdentity:
            log.info("denied_no_identity", header=self._identity_header)
            return Decision.deny(status_code=HTTP_403_FORBIDDEN, body=denial_body(MSG_NO_USER))
        except PatternMismatch as e:
            log.warning("pattern_mismatch", request_path=e.path, pattern=e.pattern)
            return Decision.deny(
                status_code=HTTP_400_BAD_REQUEST, body=denial_body(MSG_NO_SERVICE)
            )
        except UnknownIdentity as e:
            log.info("denied_unknown_identity", user=e.user)
            return Decision.deny(
                status_code=HTTP_403_FORBIDDEN, body=denial_body(MSG_UNKNOWN_USER)
            )
        except UnknownService as e:
            log.info("denied_unknown_service", account_id=e.account_id, service=e.service)
            return Decision.deny(
                status_code=HTTP_403_FORBIDDEN, body=denial_body(MSG_UNKNOWN_SERVICE)
            )

    def _evaluate(self, ctx: RequestContext) -> Decision:
        user = ctx.header(self._identity_header)
        if user is None:
            raise MissingIdentity(self._identity_header)
        service = ctx.require_service()

        account_id = self._registry.account_for(user)
        if not self._registry.is_known_user(user):
            log.info("unknown_identity", user=user, account_id=account_id)
        plan = self._registry.plan_for(account_id, service)
        if not self._registry.is_known_service(account_id, service):
            log.info("unknown_service", account_id=account_id, service=service, plan=plan)

        headers = (
            ("x-account-id", str(account_id)),
            ("x-plan", plan),
            ("x-service", service),
        )
        if plan != PlanTier.none.value:
            return Decision.allow(headers)
        return Decision.deny(
            status_code=HTTP_403_FORBIDDEN, body=denial_body(MSG_DENIED), headers=headers
        )


class _PrefixPolicy:
    def __init__(self, *, prefix: str) -> None:
        self._prefix = prefix

    def _prefix_matches(self, ctx: RequestContext) -> bool:
        return ctx.path.startswith(self._prefix)

    @staticmethod
    def _verdict(allowed: bool, headers: tuple[tuple[str, str], ...]) -> Decision:
        if allowed:
            return Decision.allow(headers)
        return Decision.deny(
            status_code=HTTP_403_FORBIDDEN, body=denial_body(MSG_DENIED), headers=headers
        )


class PathPrefixPolicy(_PrefixPolicy):
    """
    Allow iff the path starts with `prefix` OR the bypass header equals `bypass_value`.

    Each `(output, source)` pair echoes a request header. A missing source header becomes
    `missing_header_value` (so "absent" and "sent empty" look the same downstream) unless
    `omit_missing_headers` is set, in which case the output header is left out.
    """

    name = "path_prefix"

    def __init__(
        self,
        *,
        prefix: str,
        echo_headers: Iterable[tuple[str, str]],
        bypass_header: str | None = "always-approve",
        bypass_value: str = "true",
        missing_header_value: str = "",
        omit_missing_headers: bool = False,
    ) -> None:
        super().__init__(prefix=prefix)
        self._echo_headers = tuple(echo_headers)
        self._bypass_header = bypass_header
        self._bypass_value = bypass_value
        self._missing_header_value = missing_header_value
        self._omit_missing_headers = omit_missing_headers

    def _bypassed(self, ctx: RequestContext) -> bool:
        if self._bypass_header is None:
            return False
        return ctx.header(self._bypass_header) == self._bypass_value

    def _echo(self, ctx: RequestContext) -> tuple[tuple[str, str], ...]:
        pairs: list[tuple[str, str]] = []
        for out_key, source_key in self._echo_headers:
            value = ctx.header(source_key)
            if value is None:
                if self._omit_missing_headers:
                    continue
                value = self._missing_header_value
            pairs.append((out_key, value))
        return tuple(pairs)

    def evaluate(self, ctx: RequestContext) -> Decision:
        allowed = self._prefix_matches(ctx) or self._bypassed(ctx)
        return self._verdict(allowed, self._echo(ctx))


class StaticEnrichmentPolicy(_PrefixPolicy):
    name = "static"

    def __init__(self, *, prefix: str, headers: Iterable[tuple[str, str]]) -> None:
        super().__init__(prefix=prefix)
        self._headers = tuple(headers)

    def evaluate(self, ctx: RequestContext) -> Decision:
        return self._verdict(self._prefix_matches(ctx), self._headers)


def build_policy(config: PolicyConfig) -> Policy:
    if isinstance(config, AccountPlanPolicyConfig):
        registry = PolicyRegistry(
            users=config.users,
            accounts=config.accounts,
            default_account_id=config.default_account_id,
            default_plan=config.default_plan,
            strict=config.strict_lookups,
        )
        return AccountPlanPolicy(registry=registry, identity_header=config.identity_header)
    if isinstance(config, PathPrefixPolicyConfig):
        return PathPrefixPolicy(
            prefix=config.prefix,
            echo_headers=config.echo_headers.items(),
            bypass_header=config.bypass_header,
            bypass_value=config.bypass_value,
            missing_header_value=config.missing_header_value,
            omit_missing_headers=config.omit_missing_headers,
        )
    if isinstance(config, StaticPolicyConfig):
        return StaticEnrichmentPolicy(prefix=config.prefix, headers=config.headers.items())
    raise PolicyConfigError(f"unsupported policy config {type(config).__name__}")


# --- Module Notes -----------------------------------------------------------
# Policies hold only immutable state, so `evaluate` is idempotent and thread-safe.
