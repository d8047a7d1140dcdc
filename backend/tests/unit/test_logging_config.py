"""Unit tests for structured JSON logging and the per-request context"""

import json
import logging

from observability.context import (
    NO_REQUEST_ID,
    accept_request_id,
    bind_actor,
    current_context,
    get_request_id,
    request_context,
)
from observability.logging_config import JSONFormatter, RequestContextFilter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="domain.kyc.upload_pipeline",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="KYC doc upload failed (attempt %d)",
        args=(2,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def _format(record: logging.LogRecord) -> dict:
    RequestContextFilter().filter(record)
    return json.loads(JSONFormatter().format(record))


def test_json_line_carries_request_id_and_context():
    with request_context("req-42"):
        line = _format(_record(seller_id="seller-1", doc_type="id_document", attempt=2))

    assert line["request_id"] == "req-42"
    assert line["level"] == "WARNING"
    assert line["message"] == "KYC doc upload failed (attempt 2)"
    assert line["seller_id"] == "seller-1"
    assert line["doc_type"] == "id_document"
    assert line["attempt"] == 2
    assert line["timestamp"].endswith("Z")
    assert "actor_id" not in line


def test_bound_actor_appears_on_later_lines():
    with request_context("req-7"):
        bind_actor("admin-1", "admin")
        line = _format(_record(kyc_id="kyc-1"))

    assert line["actor_id"] == "admin-1"
    assert line["actor_role"] == "admin"
    assert line["kyc_id"] == "kyc-1"


def test_outside_a_request():
    bind_actor("seller-1", "seller")
    line = _format(_record())

    assert line["request_id"] == NO_REQUEST_ID
    assert "actor_id" not in line
    assert "seller_id" not in line


def test_context_is_reset_after_the_block():
    with request_context() as context:
        assert get_request_id() == context.request_id
        assert len(context.request_id) == 32

    assert current_context() is None
    assert get_request_id() == NO_REQUEST_ID


def test_incoming_request_id_is_validated():
    assert accept_request_id("req-123") == "req-123"
    assert accept_request_id("trace:abc.01") == "trace:abc.01"

    for bad in (None, "", "has space", "x" * 129, "line\nbreak"):
        generated = accept_request_id(bad)
        assert generated != bad
        assert len(generated) == 32
