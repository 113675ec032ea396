"""
ext_authz_server.authz.responder

Decision responder.

Responsibilities:
- Map a `Decision` onto the ext_authz `CheckResponse` (coarse RPC status + HTTP verdict).
- Apply the denial defaults (403 / empty JSON object) so every denial is well-formed.
"""

from __future__ import annotations

from starlette.status import HTTP_403_FORBIDDEN

from ext_authz_server.authz import wire
from ext_authz_server.authz.headers import build_headers
from ext_authz_server.authz.models import Decision

DEFAULT_DENIAL_STATUS = HTTP_403_FORBIDDEN
DEFAULT_DENIAL_BODY = "{}"


def respond(decision: Decision) -> wire.CheckResponse:
    headers = [
        wire.HeaderValueOption(
            header=wire.HeaderValue(key=h.key, value=h.value),
            append=h.append,
        )
        for h in build_headers(decision.enrichment_headers)
    ]

    if decision.allowed:
        return wire.CheckResponse(
            status=wire.RpcStatus(code=wire.RpcCode.ok),
            ok_response=wire.OkHttpResponse(headers=headers),
        )

    status_code = decision.denial_status_code or DEFAULT_DENIAL_STATUS
    body = decision.denial_body if decision.denial_body is not None else DEFAULT_DENIAL_BODY
    return wire.CheckResponse(
        status=wire.RpcStatus(code=wire.RpcCode.permission_denied),
        denied_response=wire.DeniedHttpResponse(
            status=wire.HttpStatus(code=status_code),
            headers=headers,
            body=body,
        ),
    )


# --- Module Notes -----------------------------------------------------------
# Total function: policies have already turned every failure into a Decision.
