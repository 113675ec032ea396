"""
ext_authz_server.services.decision_service

Check-call service (composition of the decision engine).

Responsibilities:
- Run Extractor -> Policy -> Header builder -> Responder for one call.
- Guarantee that no traffic-time error escapes as anything other than a denial.
- Emit one structured decision log event per call.
"""

from __future__ import annotations

from typing import Any

from starlette.status import HTTP_403_FORBIDDEN

from ext_authz_server.authz import wire
from ext_authz_server.authz.config import AccountPlanPolicyConfig, PolicyConfig
from ext_authz_server.authz.context import HeaderInput, RequestContextExtractor
from ext_authz_server.authz.errors import AuthzError
from ext_authz_server.authz.models import Decision, RequestContext
from ext_authz_server.authz.policies import MSG_DENIED, Policy, build_policy, denial_body
from ext_authz_server.authz.responder import respond
from ext_authz_server.observability.logging import get_logger

log = get_logger(__name__)


class DecisionService:
    def __init__(self, *, policy: Policy, extractor: RequestContextExtractor) -> None:
        self._policy = policy
        self._extractor = extractor

    @classmethod
    def from_config(cls, config: PolicyConfig) -> DecisionService:
        # Only the account-plan policy routes on a path segment.
        pattern = config.path_pattern if isinstance(config, AccountPlanPolicyConfig) else None
        return cls(policy=build_policy(config), extractor=RequestContextExtractor(pattern))

    @property
    def policy_name(self) -> str:
        return self._policy.name

    def decide(
        self,
        *,
        path: str,
        headers: HeaderInput | None,
        source_attributes: Any = None,
    ) -> Decision:
        ctx = self._extractor.extract(path, headers, source_attributes)
        decision = self._evaluate(ctx)
        log.info(
            "authz_decision",
            policy=self._policy.name,
            allowed=decision.allowed,
            status=decision.denial_status_code,
            service=ctx.extracted_service,
        )
        return decision

    def check(
        self,
        *,
        path: str,
        headers: HeaderInput | None,
        source_attributes: Any = None,
    ) -> wire.CheckResponse:
        return respond(self.decide(path=path, headers=headers, source_attributes=source_attributes))

    def _evaluate(self, ctx: RequestContext) -> Decision:
        try:
            return self._policy.evaluate(ctx)
        except AuthzError as e:
            # Policies resolve their own failures; this only catches ones they did not expect.
            log.warning("unresolved_authz_error", policy=self._policy.name, error=str(e))
            return Decision.deny(status_code=HTTP_403_FORBIDDEN, body=denial_body(MSG_DENIED))


# --- Module Notes -----------------------------------------------------------
# One instance is built at startup and shared by all requests; it holds no per-call state.
