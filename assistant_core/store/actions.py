"""
State transition actions.

Actions are plain immutable records. Helpers build them from already-valid
entities; ``action_from_dict`` is the boundary that turns a wire-shaped
``{"type": ..., "payload": ...}`` mapping into an action, validating the
payload against the entity contracts first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Tuple, Union

from assistant_core.contracts.base import WireModel
from assistant_core.contracts.entities import DataMode
from assistant_core.contracts.registry import decode, validate, validate_patch
from assistant_core.core.exceptions import SchemaViolation
from assistant_core.store.state import AppState, EntityKind, Operation, ProductProfile


@dataclass(frozen=True)
class AddEntity:
    kind: EntityKind
    entity: WireModel

    @property
    def type(self) -> str:
        return f"ADD_{self.kind.value}"


@dataclass(frozen=True)
class UpdateEntity:
    kind: EntityKind
    id: str
    updates: Mapping[str, Any] = field(default_factory=dict)

    @property
    def type(self) -> str:
        return f"UPDATE_{self.kind.value}"


@dataclass(frozen=True)
class DeleteEntity:
    kind: EntityKind
    id: str

    @property
    def type(self) -> str:
        return f"DELETE_{self.kind.value}"


@dataclass(frozen=True)
class SetEntities:
    kind: EntityKind
    entities: Tuple[WireModel, ...]

    @property
    def type(self) -> str:
        return f"SET_{self.kind.value}S"


@dataclass(frozen=True)
class LoadState:
    state: AppState
    type: str = field(default="LOAD_STATE", init=False)


@dataclass(frozen=True)
class SetDataMode:
    mode: DataMode
    type: str = field(default="SET_DATA_MODE", init=False)


Action = Union[AddEntity, UpdateEntity, DeleteEntity, SetEntities, LoadState, SetDataMode]


def add(kind: EntityKind, entity: WireModel) -> AddEntity:
    return AddEntity(kind, entity)


def update(kind: EntityKind, entity_id: str, updates: Mapping[str, Any]) -> UpdateEntity:
    return UpdateEntity(kind, entity_id, dict(updates))


def delete(kind: EntityKind, entity_id: str) -> DeleteEntity:
    return DeleteEntity(kind, entity_id)


def set_all(kind: EntityKind, entities: Iterable[WireModel]) -> SetEntities:
    return SetEntities(kind, tuple(entities))


def load_state(state: AppState) -> LoadState:
    return LoadState(state)


def set_data_mode(mode: Union[DataMode, str]) -> SetDataMode:
    return SetDataMode(DataMode(mode))


def _parse_type(profile: ProductProfile, action_type: str) -> Tuple[Operation, EntityKind]:
    for spec in profile.collections:
        if action_type == spec.set_action and Operation.SET in spec.operations:
            return Operation.SET, spec.kind
        for operation in (Operation.ADD, Operation.UPDATE, Operation.DELETE):
            if action_type == f"{operation.value}_{spec.kind.value}" and operation in spec.operations:
                return operation, spec.kind
    raise SchemaViolation(
        f"action.{profile.name}", "type", f"action supported by {profile.name}"
    )


def action_from_dict(profile: ProductProfile, raw: Mapping[str, Any]) -> Action:
    """
    Decode a wire-shaped action for ``profile``.

    Raises:
        SchemaViolation: Unknown action type or a payload that does not match
    """
    contract = f"action.{profile.name}"
    if not isinstance(raw, Mapping) or not isinstance(raw.get("type"), str):
        raise SchemaViolation(contract, "type", "string")

    action_type = raw["type"]
    payload = raw.get("payload")

    if action_type == "LOAD_STATE":
        if not isinstance(payload, Mapping):
            raise SchemaViolation(contract, "payload", "snapshot object")
        snapshot = decode(profile.snapshot_contract, payload)
        return LoadState(AppState.from_snapshot(profile, snapshot))

    if action_type == "SET_DATA_MODE":
        if not profile.has_data_mode:
            raise SchemaViolation(contract, "type", f"action supported by {profile.name}")
        try:
            return SetDataMode(DataMode(payload))
        except ValueError:
            raise SchemaViolation(
                contract, "payload", " or ".join(repr(m.value) for m in DataMode)
            ) from None

    operation, kind = _parse_type(profile, action_type)
    model = profile.spec(kind).model

    if operation == Operation.ADD:
        return AddEntity(kind, validate(model, payload, contract))

    if operation == Operation.SET:
        if not isinstance(payload, (list, tuple)):
            raise SchemaViolation(contract, "payload", "array")
        entities = []
        for index, item in enumerate(payload):
            try:
                entities.append(validate(model, item, contract))
            except SchemaViolation as e:
                path = f"payload[{index}].{e.path}" if e.path else f"payload[{index}]"
                raise SchemaViolation(contract, path, e.expected, violations=e.violations) from e
        return SetEntities(kind, tuple(entities))

    if operation == Operation.DELETE:
        if not isinstance(payload, str):
            raise SchemaViolation(contract, "payload", "string")
        return DeleteEntity(kind, payload)

    if not isinstance(payload, Mapping) or not isinstance(payload.get("id"), str):
        raise SchemaViolation(contract, "payload.id", "string")
    return UpdateEntity(kind, payload["id"], validate_patch(model, payload.get("updates") or {}))

