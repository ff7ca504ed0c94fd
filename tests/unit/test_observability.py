"""Unit tests for request tracing and structured logging"""

import json
import logging

from rahnu_gateway.api.middleware import MAX_REQUEST_ID_LENGTH, resolve_request_id
from rahnu_gateway.config import settings
from rahnu_gateway.infrastructure.observability.logging import CustomJsonFormatter, request_id_var


def _format(record: logging.LogRecord) -> dict:
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    return json.loads(formatter.format(record))


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("rahnu_gateway.test", logging.INFO, __file__, 1, "hello", None, None)
    record.__dict__.update(extra)
    return record


def test_caller_request_id_is_reused():
    assert resolve_request_id("req-123") == "req-123"


def test_missing_or_oversized_request_id_is_replaced():
    oversized = "x" * (MAX_REQUEST_ID_LENGTH + 1)

    assert len(resolve_request_id("")) == 36
    assert resolve_request_id(oversized) != oversized
    assert resolve_request_id("bad\nid") != "bad\nid"


def test_log_lines_carry_current_request_id():
    token = request_id_var.set("req-abc")
    try:
        data = _format(_record())
    finally:
        request_id_var.reset(token)

    assert data["request_id"] == "req-abc"
    assert data["service"] == settings.service_name
    assert data["level"] == "INFO"


def test_explicit_request_id_wins():
    token = request_id_var.set("req-abc")
    try:
        data = _format(_record(request_id="req-explicit"))
    finally:
        request_id_var.reset(token)

    assert data["request_id"] == "req-explicit"


def test_no_request_id_outside_a_request():
    assert "request_id" not in _format(_record())
