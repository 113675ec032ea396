"""
ext_authz_server.authz.models

Decision-engine domain models.

Responsibilities:
- `RequestContext`: per-call request facts, created fresh and never shared.
- `Decision`: policy verdict plus enrichment data, consumed once by the responder.
- `HeaderValueOption`: one header to inject, with its append/replace semantic.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ext_authz_server.authz.errors import PatternMismatch


class PlanTier(str, enum.Enum):
    none = "NONE"
    basic = "BASIC"
    plus = "PLUS"


@dataclass(frozen=True, slots=True)
class RequestContext:
    path: str
    headers: Mapping[str, str]
    extracted_service: str | None = None
    source_attributes: Any = None
    # Pattern the extractor applied; kept for error reporting only.
    path_pattern: str | None = field(default=None, compare=False, repr=False)

    def header(self, name: str) -> str | None:
        """
        Exact, case-sensitive lookup. `None` means "not present"; an empty string means
        the header was sent with an empty value.
        """

        return self.headers.get(name)

    def require_service(self) -> str:
        if self.extracted_service is None:
            raise PatternMismatch(self.path, self.path_pattern)
        return self.extracted_service


@dataclass(frozen=True, slots=True)
class HeaderValueOption:
    key: str
    value: str
    append: bool = False


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    enrichment_headers: tuple[tuple[str, str], ...] = ()
    denial_body: str | None = None
    denial_status_code: int | None = None

    @classmethod
    def allow(cls, headers: tuple[tuple[str, str], ...] = ()) -> Decision:
        return cls(allowed=True, enrichment_headers=headers)

    @classmethod
    def deny(
        cls,
        *,
        status_code: int,
        body: str,
        headers: tuple[tuple[str, str], ...] = (),
    ) -> Decision:
        return cls(
            allowed=False,
            enrichment_headers=headers,
            denial_body=body,
            denial_status_code=status_code,
        )


def freeze_headers(headers: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(headers))


# --- Module Notes -----------------------------------------------------------
# Everything here is frozen: contexts and decisions are owned by exactly one call and
# equality-comparable, which is what makes repeated evaluation observably idempotent.
