"""
Reliability helpers for calls to the assistant backend.

A named circuit breaker stops hammering a backend that keeps failing, and
``with_retry`` retries transient failures with exponential backoff. Breakers
live in a process-wide registry so the CLI can report their state.
"""

import threading
import time
from enum import Enum
from functools import wraps
from typing import Any, Callable, Dict, Optional, Tuple, Type

import structlog
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from assistant_core.core.exceptions import CircuitBreakerError

logger = structlog.get_logger(__name__)


class CircuitBreakerState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Fail fast once a backend has failed ``failure_threshold`` times in a row.

    After ``recovery_timeout`` seconds one trial call is let through
    (half-open). Success closes the breaker; failure opens it again.
    Only ``expected_exception`` counts as a failure.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        expected_exception: Type[Exception] = Exception,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception

        self.state = CircuitBreakerState.CLOSED
        self.failure_count = 0
        self.opened_at: Optional[float] = None
        self._lock = threading.Lock()

    def _retry_at(self) -> Optional[float]:
        if self.opened_at is None:
            return None
        return self.opened_at + self.recovery_timeout

    def _admit(self) -> None:
        with self._lock:
            if self.state != CircuitBreakerState.OPEN:
                return
            remaining = self._retry_at() - time.monotonic()
            if remaining > 0:
                raise CircuitBreakerError(
                    f"Circuit breaker '{self.name}' is open",
                    details={"retry_in_seconds": round(remaining, 1)},
                )
            self.state = CircuitBreakerState.HALF_OPEN
            logger.info("Circuit breaker half-open", name=self.name)

    def _record(self, failed: bool) -> None:
        with self._lock:
            if not failed:
                if self.state == CircuitBreakerState.HALF_OPEN:
                    logger.info("Circuit breaker closed", name=self.name)
                self.state = CircuitBreakerState.CLOSED
                self.failure_count = 0
                self.opened_at = None
                return

            self.failure_count += 1
            trial_failed = self.state == CircuitBreakerState.HALF_OPEN
            if trial_failed or self.failure_count >= self.failure_threshold:
                self.state = CircuitBreakerState.OPEN
                self.opened_at = time.monotonic()
                logger.warning(
                    "Circuit breaker opened",
                    name=self.name,
                    failure_count=self.failure_count,
                    threshold=self.failure_threshold,
                )

    def call(self, func: Callable, *args, **kwargs) -> Any:
        """Run ``func`` unless the breaker is open."""
        self._admit()
        try:
            result = func(*args, **kwargs)
        except self.expected_exception:
            self._record(failed=True)
            raise
        self._record(failed=False)
        return result

    def reset(self) -> None:
        with self._lock:
            self.state = CircuitBreakerState.CLOSED
            self.failure_count = 0
            self.opened_at = None

    @property
    def status(self) -> Dict[str, Any]:
        with self._lock:
            retry_at = self._retry_at()
            return {
                "name": self.name,
                "state": self.state.value,
                "failure_count": self.failure_count,
                "failure_threshold": self.failure_threshold,
                "retry_in_seconds": (
                    max(0.0, round(retry_at - time.monotonic(), 1)) if retry_at else None
                ),
            }


_breakers: Dict[str, CircuitBreaker] = {}
_registry_lock = threading.Lock()


def get_circuit_breaker(
    name: str,
    failure_threshold: int = 5,
    recovery_timeout: float = 60.0,
    expected_exception: Type[Exception] = Exception,
) -> CircuitBreaker:
    """Return the breaker registered as ``name``, creating it on first use."""
    with _registry_lock:
        breaker = _breakers.get(name)
        if breaker is None:
            breaker = CircuitBreaker(name, failure_threshold, recovery_timeout, expected_exception)
            _breakers[name] = breaker
        return breaker


def with_circuit_breaker(
    name: str,
    failure_threshold: int = 5,
    recovery_timeout: float = 60.0,
    expected_exception: Type[Exception] = Exception,
):
    """Guard a function with the named breaker; exposed as ``wrapper.circuit_breaker``."""
    breaker = get_circuit_breaker(name, failure_threshold, recovery_timeout, expected_exception)

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            return breaker.call(func, *args, **kwargs)

        wrapper.circuit_breaker = breaker
        return wrapper

    return decorator


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception()
    logger.warning(
        "Retrying backend call",
        function=getattr(retry_state.fn, "__name__", "call"),
        attempt=retry_state.attempt_number,
        wait_seconds=round(retry_state.next_action.sleep, 2),
        error=str(error),
        error_type=type(error).__name__,
    )


def with_retry(
    max_attempts: int = 3,
    backoff_max: float = 30.0,
    retry_exceptions: Tuple[Type[Exception], ...] = (Exception,),
):
    """Retry ``retry_exceptions`` with exponential backoff; the last error is re-raised."""
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=0.5, max=backoff_max),
        retry=retry_if_exception_type(retry_exceptions),
        before_sleep=_log_retry,
        reraise=True,
    )


def get_circuit_breaker_status() -> Dict[str, Dict[str, Any]]:
    with _registry_lock:
        breakers = list(_breakers.values())
    return {breaker.name: breaker.status for breaker in breakers}


def reset_circuit_breaker(name: str) -> bool:
    """Close the named breaker; False when no such breaker is registered."""
    with _registry_lock:
        breaker = _breakers.get(name)
    if breaker is None:
        return False
    breaker.reset()
    logger.info("Circuit breaker reset", name=name)
    return True
