"""Tests for request context identifiers."""

from rotwave.core.context import (
    RequestContext,
    clear_context,
    get_context,
    get_request_id,
    get_trace_id,
    set_correlation_id,
    set_request_id,
)


def test_set_request_id_generates_when_missing() -> None:
    rid = set_request_id(None)
    assert rid
    assert get_request_id() == rid
    clear_context()


def test_get_context_skips_empty_values() -> None:
    clear_context()
    assert get_context() == {}

    set_request_id("req-1")
    set_correlation_id("corr-1")
    assert get_context() == {"request_id": "req-1", "correlation_id": "corr-1"}
    clear_context()


def test_request_context_restores_previous_values() -> None:
    clear_context()
    set_request_id("outer")

    with RequestContext(request_id="inner", trace_id="trace-1"):
        assert get_request_id() == "inner"
        assert get_trace_id() == "trace-1"

    assert get_request_id() == "outer"
    assert get_trace_id() is None
    clear_context()
