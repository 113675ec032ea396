"""
ext_authz_server.authz.registry

Immutable user/account registry for the account-plan policy.

Responsibilities:
- Hold username -> account id and account id -> (service -> plan) as a read-only snapshot.
- Make the "unknown user" and "unknown service" fallbacks explicit and configurable.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from ext_authz_server.authz.errors import UnknownIdentity, UnknownService

# Zero-value fallbacks: account 0 is the "unassigned" sentinel and
# an empty plan is not "NONE", so both misses end up allowed.
DEFAULT_ACCOUNT_ID = 0
DEFAULT_PLAN = ""


class PolicyRegistry:
    """
    Read-only lookups over a frozen copy of the registries.

    With `strict=True` misses raise `UnknownIdentity`/`UnknownService` instead of
    falling back to `default_account_id`/`default_plan`.
    """

    __slots__ = ("_users", "_accounts", "default_account_id", "default_plan", "strict")

    def __init__(
        self,
        *,
        users: Mapping[str, int],
        accounts: Mapping[int, Mapping[str, str]],
        default_account_id: int = DEFAULT_ACCOUNT_ID,
        default_plan: str = DEFAULT_PLAN,
        strict: bool = False,
    ) -> None:
        self._users: Mapping[str, int] = MappingProxyType(dict(users))
        self._accounts: Mapping[int, Mapping[str, str]] = MappingProxyType(
            {int(k): MappingProxyType(dict(v)) for k, v in accounts.items()}
        )
        self.default_account_id = default_account_id
        self.default_plan = default_plan
        self.strict = strict

    @property
    def users(self) -> Mapping[str, int]:
        return self._users

    @property
    def accounts(self) -> Mapping[int, Mapping[str, str]]:
        return self._accounts

    def is_known_user(self, user: str) -> bool:
        return user in self._users

    def is_known_service(self, account_id: int, service: str) -> bool:
        return service in self._accounts.get(account_id, {})

    def account_for(self, user: str) -> int:
        try:
            return self._users[user]
        except KeyError:
            if self.strict:
                raise UnknownIdentity(user) from None
            return self.default_account_id

    def plan_for(self, account_id: int, service: str) -> str:
        plans = self._accounts.get(account_id)
        if plans is not None and service in plans:
            return plans[service]
        if self.strict:
            raise UnknownService(account_id, service)
        return self.default_plan


# --- Module Notes -----------------------------------------------------------
# No write API: concurrent check calls read this without locking.
