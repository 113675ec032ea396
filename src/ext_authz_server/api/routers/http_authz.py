"""
ext_authz_server.api.routers.http_authz

Envoy HTTP-service ext_authz mode, the service's transport.

Responsibilities:
- Treat every request under the configured prefix as a check of the forwarded path.
- Answer 200 + enrichment headers on allow; denial status, JSON body and headers on deny.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response
from starlette.status import HTTP_200_OK, HTTP_400_BAD_REQUEST

from ext_authz_server.api.deps import decision_service_dep
from ext_authz_server.authz.context import forwarded_path
from ext_authz_server.authz.policies import denial_body
from ext_authz_server.authz.wire import CheckResponse, HeaderValueOption
from ext_authz_server.observability.logging import get_logger
from ext_authz_server.services.decision_service import DecisionService

log = get_logger(__name__)

router = APIRouter(tags=["http-authz"])

_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

MSG_BAD_HEADER = "enrichment header not encodable"


def checked_path(request: Request) -> str:
    # Envoy checks the raw (still percent-encoded) path, query string included.
    prefix = request.app.state.settings.http_authz_prefix
    raw_path = request.scope.get("raw_path") or request.url.path.encode("utf-8")
    return forwarded_path(raw_path, request.scope.get("query_string", b""), prefix) or "/"


def _encodable(value: str) -> bool:
    # Starlette writes header values as latin-1; CR/LF would split the header block.
    if "\r" in value or "\n" in value:
        return False
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return True


def _header_map(options: list[HeaderValueOption]) -> dict[str, str] | None:
    headers: dict[str, str] = {}
    for h in options:
        if not (_encodable(h.header.key) and _encodable(h.header.value)):
            log.warning("unencodable_enrichment_header", header=h.header.key)
            return None
        headers[h.header.key] = h.header.value
    return headers


def to_http_response(verdict: CheckResponse) -> Response:
    if verdict.ok_response is not None:
        headers = _header_map(verdict.ok_response.headers)
        if headers is not None:
            return Response(status_code=HTTP_200_OK, headers=headers)
    elif verdict.denied_response is not None:
        denied = verdict.denied_response
        headers = _header_map(denied.headers)
        if headers is not None:
            return Response(
                content=denied.body,
                status_code=denied.status.code,
                headers=headers,
                media_type="application/json",
            )

    return Response(
        content=denial_body(MSG_BAD_HEADER),
        status_code=HTTP_400_BAD_REQUEST,
        media_type="application/json",
    )


@router.api_route("/{path:path}", methods=_METHODS, include_in_schema=False)
async def http_check(
    request: Request,
    service: DecisionService = Depends(decision_service_dep),
) -> Response:
    verdict = service.check(
        path=checked_path(request),
        headers=request.headers.items(),
        source_attributes={"method": request.method, "host": request.url.hostname},
    )
    return to_http_response(verdict)
