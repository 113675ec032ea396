"""
ext_authz_server.authz.headers

Header enrichment builder.

Responsibilities:
- Turn a policy's raw (key, value) enrichment pairs into ordered `HeaderValueOption`s.
"""

from __future__ import annotations

from collections.abc import Iterable

from ext_authz_server.authz.models import HeaderValueOption

# Injected headers replace any same-named header at the proxy; never appended.
APPEND = False


def build_headers(pairs: Iterable[tuple[str, str]]) -> tuple[HeaderValueOption, ...]:
    return tuple(HeaderValueOption(key=key, value=value, append=APPEND) for key, value in pairs)
