"""
ext_authz_server.authz.context

RequestContext extractor.

Responsibilities:
- Normalize raw check-call facts (path + headers) into a `RequestContext`.
- Apply the configured path pattern to pull the routed service name.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from ext_authz_server.authz.errors import PolicyConfigError
from ext_authz_server.authz.models import RequestContext, freeze_headers

DEFAULT_SERVICE_PATTERN = "/service/(.*)"

HeaderInput = Mapping[str, str] | Iterable[tuple[str, str]]


def compile_service_pattern(pattern: str) -> re.Pattern[str]:
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise PolicyConfigError(f"invalid path pattern {pattern!r}: {e}") from e
    if compiled.groups != 1:
        raise PolicyConfigError(
            f"path pattern {pattern!r} must have exactly one capture group, has {compiled.groups}"
        )
    return compiled


def forwarded_path(raw_path: bytes, query_string: bytes = b"", prefix: str = "") -> str:
    """
    Path as the proxy sent it: still percent-encoded, query string included, with the
    mount `prefix` removed. Returns `""` if `raw_path` is not under `prefix`.
    """

    # latin-1 maps every byte to one code point, so nothing is lost or re-decoded.
    path = raw_path.split(b"?", 1)[0].decode("latin-1")
    if prefix:
        if path != prefix and not path.startswith(prefix + "/"):
            return ""
        path = path[len(prefix) :] or "/"
    if query_string:
        path += "?" + query_string.decode("latin-1")
    return path


def collect_headers(headers: HeaderInput | None) -> dict[str, str]:
    # Keys are kept verbatim (case-sensitive); a repeated key keeps its last value.
    if headers is None:
        return {}
    items = headers.items() if isinstance(headers, Mapping) else headers
    out: dict[str, str] = {}
    for key, value in items:
        out[str(key)] = str(value)
    return out


class RequestContextExtractor:
    """
    Built once at startup. `path_pattern=None` disables service extraction for policies
    that never look at it.
    """

    def __init__(self, path_pattern: str | None = None) -> None:
        self._pattern = compile_service_pattern(path_pattern) if path_pattern is not None else None

    @property
    def path_pattern(self) -> str | None:
        return self._pattern.pattern if self._pattern is not None else None

    def extract_service(self, path: str) -> str | None:
        if self._pattern is None:
            return None
        # Unanchored search: "/v1/service/foo" still yields "foo".
        match = self._pattern.search(path)
        if match is None:
            return None
        return match.group(1)

    def extract(
        self,
        path: str,
        headers: HeaderInput | None = None,
        source_attributes: Any = None,
    ) -> RequestContext:
        return RequestContext(
            path=path,
            headers=freeze_headers(collect_headers(headers)),
            extracted_service=self.extract_service(path),
            source_attributes=source_attributes,
            path_pattern=self.path_pattern,
        )
