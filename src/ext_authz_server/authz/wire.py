"""
ext_authz_server.authz.wire

Verdict models for the external authorization check call.

Responsibilities:
- Shape the verdict after Envoy's `envoy.service.auth.v2` `CheckResponse` (coarse RPC
  code, numeric HTTP status, headers with an explicit append flag).
- Give the HTTP transport one structured value to render.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RpcCode(enum.IntEnum):
    """Subset of `google.rpc.Code` used for the coarse verdict."""

    ok = 0
    permission_denied = 7


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RpcStatus(_WireModel):
    code: int = RpcCode.ok
    message: str = ""


class HeaderValue(_WireModel):
    key: str
    value: str


class HeaderValueOption(_WireModel):
    header: HeaderValue
    append: bool = False


class HttpStatus(_WireModel):
    # Envoy's StatusCode enum uses the numeric HTTP status directly.
    code: int


class OkHttpResponse(_WireModel):
    headers: list[HeaderValueOption] = Field(default_factory=list)


class DeniedHttpResponse(_WireModel):
    status: HttpStatus
    headers: list[HeaderValueOption] = Field(default_factory=list)
    body: str = ""


class CheckResponse(_WireModel):
    status: RpcStatus
    # Exactly one of these is set (proto oneof `http_response`).
    denied_response: DeniedHttpResponse | None = None
    ok_response: OkHttpResponse | None = None

    @property
    def allowed(self) -> bool:
        return self.status.code == RpcCode.ok


# --- Module Notes -----------------------------------------------------------
# `model_dump(by_alias=True, exclude_none=True)` emits only the active oneof branch, as a
# protobuf JSON encoder would; the HTTP transport renders the same fields as a response.
