"""
ext_authz_server.authz.errors

Error taxonomy for the decision engine.

Responsibilities:
- Name every failure a check call can hit, so policies resolve them into explicit denials.
- Separate startup configuration errors (fatal) from traffic-time errors (never fatal).
"""

from __future__ import annotations


class AuthzError(Exception):
    """Base class for traffic-time failures; always resolved into a `Decision`."""


class MissingIdentity(AuthzError):
    def __init__(self, header: str) -> None:
        super().__init__(f"identity header {header!r} not present")
        self.header = header


class BadRequest(AuthzError):
    pass


class PatternMismatch(BadRequest):
    def __init__(self, path: str, pattern: str | None) -> None:
        super().__init__(f"path {path!r} does not match {pattern!r}")
        self.path = path
        self.pattern = pattern


class UnknownIdentity(AuthzError):
    def __init__(self, user: str) -> None:
        super().__init__(f"unknown user {user!r}")
        self.user = user


class UnknownService(AuthzError):
    def __init__(self, account_id: int, service: str) -> None:
        super().__init__(f"account {account_id} has no plan for service {service!r}")
        self.account_id = account_id
        self.service = service


class PolicyConfigError(Exception):
    """
    Raised while building the policy snapshot at startup.
    Not an `AuthzError`: it must abort process start instead of becoming a denial.
    """


# --- Module Notes -----------------------------------------------------------
# `UnknownIdentity`/`UnknownService` are only raised by a registry built with
# `strict=True`; otherwise it substitutes the configured defaults and policies log the miss.
