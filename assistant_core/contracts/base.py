"""
Base models and error translation for wire contracts.

Primitive fields use pydantic's strict types so a payload is never silently
coerced (``"0.92"`` is not a number, ``1`` is not a string). Enum fields are
closed sets. Nested models accept plain mappings.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

from assistant_core.core.exceptions import SchemaViolation

# Readable names for pydantic error types, used as the "expected" shape
_EXPECTED_BY_ERROR_TYPE = {
    "missing": "required field",
    "string_type": "string",
    "int_type": "integer",
    "float_type": "number",
    "bool_type": "boolean",
    "list_type": "array",
    "tuple_type": "array",
    "dict_type": "object",
    "model_type": "object",
    "model_attributes_type": "object",
    "datetime_type": "ISO-8601 datetime",
    "datetime_parsing": "ISO-8601 datetime",
    "datetime_from_date_parsing": "ISO-8601 datetime",
    "extra_forbidden": "no such field",
    "json_invalid": "valid JSON",
    "json_type": "JSON document",
}


class WireModel(BaseModel):
    """Base class for every payload that crosses the backend boundary."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        extra="ignore",
    )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to a JSON-ready mapping using wire field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RequestModel(WireModel):
    """Outgoing payloads; unknown keys are a construction error."""

    model_config = ConfigDict(extra="forbid")


class ResponseModel(WireModel):
    """Incoming payloads; unknown server keys are dropped."""

    model_config = ConfigDict(extra="ignore")


def format_path(loc: Tuple[Any, ...]) -> str:
    """Render a pydantic error location as ``results[0].score``."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path


def _expected(error: Dict[str, Any]) -> str:
    error_type = error.get("type", "")
    if error_type in _EXPECTED_BY_ERROR_TYPE:
        return _EXPECTED_BY_ERROR_TYPE[error_type]
    return error.get("msg", error_type)


def violation_from_error(contract: str, error: ValidationError) -> SchemaViolation:
    """Translate a pydantic ``ValidationError`` into a ``SchemaViolation``."""
    violations: List[Dict[str, str]] = []
    for err in error.errors(include_url=False):
        ctx = err.get("ctx") or {}
        path = ctx.get("path") or format_path(err.get("loc", ()))
        violations.append({"path": path, "expected": _expected(err), "message": err.get("msg", "")})

    first = violations[0] if violations else {"path": "", "expected": "valid payload"}
    return SchemaViolation(contract, first["path"], first["expected"], violations=violations)
