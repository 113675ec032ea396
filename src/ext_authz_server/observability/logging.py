"""
ext_authz_server.observability.logging

Structured logging configuration for the decision service.

Responsibilities:
- Configure `structlog` (JSON in deployments, console rendering for local dev).
- Stamp every event with the service and the active policy.
- Mask caller identities in decision logs unless explicitly enabled.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Event keys that carry caller identity (usernames from the identity header).
IDENTITY_KEYS = frozenset({"user"})
MASK = "***"


def configure_logging(
    *,
    service_name: str,
    level: str,
    policy: str | None = None,
    json_logs: bool = True,
    log_identities: bool = False,
) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    static = {"service": service_name}
    if policy is not None:
        static["policy"] = policy

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_static_fields(static),
    ]
    if not log_identities:
        processors.append(_mask_identities)
    if json_logs:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _add_static_fields(fields: dict[str, str]):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        for key, value in fields.items():
            event_dict.setdefault(key, value)
        return event_dict

    return processor


def _mask_identities(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in IDENTITY_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = MASK
    return event_dict


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
