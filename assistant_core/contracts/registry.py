"""
Contract registry: the named request/response pair for every backend operation.

The network client calls ``encode(name, value)`` before sending a request and
``decode(name, raw)`` on every response before anything is dispatched to the
store. Both raise ``SchemaViolation`` instead of passing malformed data on.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Type, Union

import structlog
from pydantic import TypeAdapter, ValidationError

from assistant_core.contracts.base import WireModel, violation_from_error
from assistant_core.contracts.chat import (
    ChatHistoryResponse,
    ChatSendRequest,
    ChatSendResponse,
    ChatThreadsResponse,
)
from assistant_core.contracts.ingestion import IngestRequest, IngestResponse, UploadResponse
from assistant_core.contracts.knowledge import KBGraphResponse, KBSearchRequest, KBSearchResponse
from assistant_core.contracts.projects import (
    DigestRequest,
    DigestResponse,
    KanbanResponse,
    ProjectDetail,
    ProjectsResponse,
    TimelineResponse,
)
from assistant_core.contracts.snapshot import ErikaSnapshot, MarvinSnapshot
from assistant_core.contracts.system import EmailsResponse, HealthStatus, MeetingsResponse
from assistant_core.contracts.watch import (
    ScheduleUpdateRequest,
    SuccessResponse,
    WatchAddRequest,
    WatchAddResponse,
    WatchListResponse,
    WatchRemoveRequest,
)
from assistant_core.core.exceptions import SchemaViolation, UnknownContractError

logger = structlog.get_logger(__name__)

Payload = Union[Mapping[str, Any], str, bytes, WireModel]


class Direction(str, Enum):
    REQUEST = "request"
    RESPONSE = "response"


@dataclass(frozen=True)
class Contract:
    """Request schema (``None`` for reads) and response schema of one operation."""

    name: str
    response: Type[WireModel]
    request: Optional[Type[WireModel]] = None

    def schema_for(self, direction: Direction) -> Optional[Type[WireModel]]:
        return self.request if direction == Direction.REQUEST else self.response


CONTRACTS: Dict[str, Contract] = {
    contract.name: contract
    for contract in (
        Contract("upload", UploadResponse),
        Contract("ingest", IngestResponse, IngestRequest),
        Contract("kb.search", KBSearchResponse, KBSearchRequest),
        Contract("kb.graph", KBGraphResponse),
        Contract("chat.threads", ChatThreadsResponse),
        Contract("chat.history", ChatHistoryResponse),
        Contract("chat.send", ChatSendResponse, ChatSendRequest),
        Contract("projects.list", ProjectsResponse),
        Contract("projects.detail", ProjectDetail),
        Contract("projects.kanban", KanbanResponse),
        Contract("projects.timeline", TimelineResponse),
        Contract("digest", DigestResponse, DigestRequest),
        Contract("watch.list", WatchListResponse),
        Contract("watch.add", WatchAddResponse, WatchAddRequest),
        Contract("watch.remove", SuccessResponse, WatchRemoveRequest),
        Contract("schedule.update", SuccessResponse, ScheduleUpdateRequest),
        Contract("meetings.list", MeetingsResponse),
        Contract("emails.list", EmailsResponse),
        Contract("health", HealthStatus),
        Contract("snapshot.erika", ErikaSnapshot, ErikaSnapshot),
        Contract("snapshot.marvin", MarvinSnapshot, MarvinSnapshot),
    )
}


def get_contract(name: str) -> Contract:
    """Look up a contract by name."""
    try:
        return CONTRACTS[name]
    except KeyError:
        raise UnknownContractError(
            f"Unknown contract '{name}'", details={"known": sorted(CONTRACTS)}
        ) from None


def validate(schema: Type[WireModel], raw: Payload, contract: str) -> WireModel:
    """Validate ``raw`` against ``schema``, raising ``SchemaViolation`` on mismatch."""
    if isinstance(raw, schema):
        return raw
    if isinstance(raw, WireModel):
        raw = raw.to_wire()

    try:
        if isinstance(raw, (str, bytes, bytearray)):
            return schema.model_validate_json(raw)
        if not isinstance(raw, Mapping):
            raise SchemaViolation(contract, "", "object")
        return schema.model_validate(dict(raw))
    except ValidationError as e:
        violation = violation_from_error(contract, e)
        logger.warning(
            "Contract violation",
            contract=contract,
            path=violation.path,
            expected=violation.expected,
            violation_count=len(violation.violations),
        )
        raise violation from e


def decode(name: str, raw: Payload, direction: Direction = Direction.RESPONSE) -> WireModel:
    """
    Decode an untrusted payload for contract ``name``.

    Args:
        name: Contract name, e.g. ``"kb.search"``
        raw: Mapping or JSON text received from the transport
        direction: Which side of the contract the payload belongs to

    Returns:
        The validated, immutable model instance

    Raises:
        SchemaViolation: The payload does not match the schema
        UnknownContractError: ``name`` is not registered
    """
    contract = get_contract(name)
    schema = contract.schema_for(direction)
    if schema is None:
        raise SchemaViolation(name, "", "no request body")
    return validate(schema, raw, name)


def encode(
    name: str, value: Optional[Payload], direction: Direction = Direction.REQUEST
) -> Optional[Dict[str, Any]]:
    """
    Build the JSON payload for contract ``name`` from a model or mapping.

    Read-only operations have no request body: encoding ``None`` for them
    returns ``None`` and anything else is a violation.
    """
    contract = get_contract(name)
    schema = contract.schema_for(direction)
    if schema is None:
        if value is None:
            return None
        raise SchemaViolation(name, "", "no request body")
    if value is None:
        raise SchemaViolation(name, "", "object")
    return validate(schema, value, name).to_wire()


@lru_cache(maxsize=None)
def _field_adapter(model: Type[WireModel], field_name: str) -> TypeAdapter:
    field = model.model_fields[field_name]
    return TypeAdapter(field.rebuild_annotation())


def _field_names(model: Type[WireModel]) -> Dict[str, str]:
    names = {}
    for name, field in model.model_fields.items():
        names[name] = name
        if field.alias:
            names[field.alias] = name
    return names


def validate_patch(model: Type[WireModel], updates: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate a partial update for ``model`` field by field.

    Keys may be field names or wire aliases; the result is keyed by field
    name. ``id`` and unknown keys are rejected.
    """
    contract = f"patch.{model.__name__}"
    if not isinstance(updates, Mapping):
        raise SchemaViolation(contract, "updates", "object")

    names = _field_names(model)
    clean: Dict[str, Any] = {}
    violations = []
    for key, value in updates.items():
        field_name = names.get(key)
        if field_name is None or field_name == "id":
            violations.append({"path": f"updates.{key}", "expected": "no such field"})
            continue
        try:
            validated = _field_adapter(model, field_name).validate_python(value)
        except ValidationError as e:
            nested = violation_from_error(contract, e)
            for item in nested.violations:
                suffix = item["path"]
                path = f"updates.{key}{'' if not suffix or suffix.startswith('[') else '.'}{suffix}"
                violations.append({"path": path, "expected": item["expected"]})
            continue
        clean[field_name] = validated.value if isinstance(validated, Enum) else validated

    if violations:
        first = violations[0]
        raise SchemaViolation(contract, first["path"], first["expected"], violations=violations)
    return clean


