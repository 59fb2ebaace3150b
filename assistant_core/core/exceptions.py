"""
Custom exceptions for the assistant core.

Provides a hierarchy of exceptions for better error handling and debugging.
"""

from typing import Any, Dict, List, Optional


class AssistantError(Exception):
    """Base exception for all assistant core errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(AssistantError):
    """Raised when there are configuration issues."""

    pass


class ContractError(AssistantError):
    """Base class for wire contract errors."""

    pass


class UnknownContractError(ContractError):
    """Raised when a contract name is not registered."""

    pass


class SchemaViolation(ContractError):
    """
    A payload does not match the shape its contract expects.

    ``path`` and ``expected`` describe the first offending field;
    ``violations`` lists every problem found in the payload.
    """

    kind = "SchemaViolation"

    def __init__(
        self,
        contract: str,
        path: str,
        expected: str,
        violations: Optional[List[Dict[str, str]]] = None,
    ):
        location = path or "<root>"
        super().__init__(
            f"{contract}: {location} expected {expected}",
            details={"contract": contract, "path": path, "expected": expected},
        )
        self.contract = contract
        self.path = path
        self.expected = expected
        self.violations = violations or [{"path": path, "expected": expected}]


class DataAccessError(AssistantError):
    """Base class for data access errors."""

    pass


class ApiError(DataAccessError):
    """Assistant backend API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class CircuitBreakerError(DataAccessError):
    """Circuit breaker is open, preventing calls."""

    pass


class SnapshotError(DataAccessError):
    """State snapshot could not be read or written."""

    pass
