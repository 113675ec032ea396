"""
tests.test_logging

Decision-log processor chain: static fields and identity masking.
"""

from __future__ import annotations

import structlog

from ext_authz_server.observability.logging import (
    _add_static_fields,
    _mask_identities,
    configure_logging,
)


def _run_chain(event: dict) -> dict:
    # Configured processors minus the renderer; add_logger_name needs a real logger.
    for processor in structlog.get_config()["processors"][:-1]:
        if processor is structlog.stdlib.add_logger_name:
            continue
        event = processor(None, "info", event)
    return event


def test_identities_are_masked_by_default() -> None:
    configure_logging(service_name="svc", level="INFO", policy="account_plan")
    event = _run_chain({"event": "unknown_identity", "user": "Mallory", "account_id": 0})

    assert event["user"] == "***"
    assert event["account_id"] == 0
    assert event["service"] == "svc"
    assert event["policy"] == "account_plan"


def test_identities_can_be_logged() -> None:
    configure_logging(service_name="svc", level="INFO", log_identities=True)
    assert _mask_identities not in structlog.get_config()["processors"]

    event = _run_chain({"event": "unknown_identity", "user": "Mallory"})
    assert event["user"] == "Mallory"
    assert "policy" not in event


def test_console_rendering_for_dev() -> None:
    configure_logging(service_name="svc", level="INFO", json_logs=False)
    assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)
    configure_logging(service_name="svc", level="INFO")


def test_processors_leave_other_fields_alone() -> None:
    assert _mask_identities(None, "info", {"user": "", "x": 1}) == {"user": "", "x": 1}
    add = _add_static_fields({"service": "svc"})
    assert add(None, "info", {"service": "override"}) == {"service": "override"}
