"""Tests for correlation IDs bound into the logging context."""

import structlog

from assistant_core.core.logging import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


class TestCorrelationId:
    def teardown_method(self):
        structlog.contextvars.clear_contextvars()

    def test_explicit_id(self):
        assert set_correlation_id("run-42") == "run-42"
        assert get_correlation_id() == "run-42"
        assert structlog.contextvars.get_contextvars()["correlation_id"] == "run-42"

    def test_generated_id(self):
        generated = set_correlation_id()
        assert len(generated) == 8
        assert get_correlation_id() == generated

    def test_clear(self):
        set_correlation_id("run-1")
        clear_correlation_id()
        assert get_correlation_id() is None
