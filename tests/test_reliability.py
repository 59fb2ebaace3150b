"""
Test suite for reliability patterns.

Validates the circuit breaker, its registry, and retry logic.
"""

import time

import pytest

from assistant_core.core.exceptions import CircuitBreakerError
from assistant_core.utils.reliability import (
    CircuitBreaker,
    get_circuit_breaker,
    get_circuit_breaker_status,
    reset_circuit_breaker,
    with_circuit_breaker,
    with_retry,
)


class TestCircuitBreaker:
    """Test circuit breaker functionality."""

    def test_circuit_breaker_closed_state(self):
        """Test circuit breaker allows calls when closed."""
        breaker = CircuitBreaker("test", failure_threshold=3)

        result = breaker.call(lambda: "success")
        assert result == "success"
        assert breaker.state.value == "closed"

    def test_circuit_breaker_opens_on_failures(self):
        """Test circuit breaker opens after threshold failures."""
        breaker = CircuitBreaker("test", failure_threshold=2)

        def failing_func():
            raise RuntimeError("Test failure")

        with pytest.raises(RuntimeError):
            breaker.call(failing_func)
        assert breaker.failure_count == 1

        with pytest.raises(RuntimeError):
            breaker.call(failing_func)
        assert breaker.failure_count == 2
        assert breaker.state.value == "open"

        # Blocked without calling the function
        with pytest.raises(CircuitBreakerError):
            breaker.call(failing_func)

    def test_circuit_breaker_recovery(self):
        """Test circuit breaker closes again after a successful trial call."""
        breaker = CircuitBreaker("test", failure_threshold=1, recovery_timeout=0.1)

        def failing_func():
            raise RuntimeError("Test failure")

        with pytest.raises(RuntimeError):
            breaker.call(failing_func)
        assert breaker.state.value == "open"

        time.sleep(0.2)

        assert breaker.call(lambda: "recovered") == "recovered"
        assert breaker.state.value == "closed"

    def test_unexpected_exceptions_do_not_count(self):
        """Only the expected exception type counts as a failure."""
        breaker = CircuitBreaker("test", failure_threshold=1, expected_exception=ValueError)

        def raises_type_error():
            raise TypeError("not a backend failure")

        with pytest.raises(TypeError):
            breaker.call(raises_type_error)
        assert breaker.failure_count == 0
        assert breaker.state.value == "closed"


class TestCircuitBreakerRegistry:
    """Test named breakers shared through the registry."""

    def test_decorator_uses_registered_breaker(self):
        @with_circuit_breaker("registry-test", failure_threshold=1, recovery_timeout=60.0)
        def always_fail():
            raise RuntimeError("down")

        with pytest.raises(RuntimeError):
            always_fail()
        with pytest.raises(CircuitBreakerError):
            always_fail()

        assert always_fail.circuit_breaker is get_circuit_breaker("registry-test")
        assert get_circuit_breaker_status()["registry-test"]["state"] == "open"

        assert reset_circuit_breaker("registry-test") is True
        assert get_circuit_breaker_status()["registry-test"]["state"] == "closed"

    def test_reset_unknown_breaker(self):
        assert reset_circuit_breaker("never-registered") is False


class TestRetryLogic:
    """Test retry decorator functionality."""

    def test_retry_succeeds_eventually(self):
        """Test retry succeeds after initial failures."""
        call_count = 0

        @with_retry(max_attempts=3, retry_exceptions=(ValueError,))
        def flaky_func():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ValueError("Not ready yet")
            return "success"

        assert flaky_func() == "success"
        assert call_count == 3

    def test_retry_gives_up_after_max_attempts(self):
        """The last error is re-raised once attempts run out."""
        call_count = 0

        @with_retry(max_attempts=2, retry_exceptions=(ValueError,))
        def always_fail():
            nonlocal call_count
            call_count += 1
            raise ValueError("Always fails")

        with pytest.raises(ValueError, match="Always fails"):
            always_fail()
        assert call_count == 2

    def test_retry_ignores_non_retry_exceptions(self):
        """Test retry doesn't retry non-specified exceptions."""
        call_count = 0

        @with_retry(max_attempts=3, retry_exceptions=(ValueError,))
        def wrong_exception():
            nonlocal call_count
            call_count += 1
            raise TypeError("Wrong exception type")

        with pytest.raises(TypeError):
            wrong_exception()
        assert call_count == 1
