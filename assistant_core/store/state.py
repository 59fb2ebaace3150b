"""
Application state and the product profiles that shape it.

One generic container serves both products; a ``ProductProfile`` names the
collections a product holds, which transitions each collection accepts, the
seed data, and the snapshot contract used to persist and restore it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Type

from assistant_core.contracts.base import WireModel
from assistant_core.contracts.entities import (
    BehaviorRule,
    ChatThread,
    DataMode,
    EmailSummary,
    MeetingSummary,
    ProcessedFile,
    Topic,
)
from assistant_core.store.collection import EntityCollection


class EntityKind(str, Enum):
    """Entity kinds, valued by the suffix used in action types (``ADD_FILE``)."""

    FILE = "FILE"
    TOPIC = "TOPIC"
    BEHAVIOR_RULE = "BEHAVIOR_RULE"
    CHAT_THREAD = "CHAT_THREAD"
    MEETING = "MEETING"
    EMAIL = "EMAIL"


class Operation(str, Enum):
    ADD = "ADD"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SET = "SET"


@dataclass(frozen=True)
class CollectionSpec:
    """How one entity kind is stored and which transitions touch it."""

    kind: EntityKind
    key: str
    model: Type[WireModel]
    operations: FrozenSet[Operation]

    @property
    def set_action(self) -> str:
        # SET actions name the collection in the plural: SET_CHAT_THREADS
        return f"SET_{self.kind.value}S"


CRUD = frozenset({Operation.ADD, Operation.UPDATE, Operation.DELETE})

FILES = CollectionSpec(EntityKind.FILE, "files", ProcessedFile, CRUD)
TOPICS = CollectionSpec(EntityKind.TOPIC, "topics", Topic, CRUD)
BEHAVIOR_RULES = CollectionSpec(EntityKind.BEHAVIOR_RULE, "behaviorRules", BehaviorRule, CRUD)
CHAT_THREADS = CollectionSpec(
    EntityKind.CHAT_THREAD, "chatThreads", ChatThread, CRUD | {Operation.SET}
)
MEETINGS = CollectionSpec(EntityKind.MEETING, "meetings", MeetingSummary, frozenset({Operation.SET}))
EMAILS = CollectionSpec(EntityKind.EMAIL, "emails", EmailSummary, frozenset({Operation.SET}))


@dataclass(frozen=True)
class ProductProfile:
    """Shape of one product's store."""

    name: str
    collections: Tuple[CollectionSpec, ...]
    snapshot_contract: str
    has_data_mode: bool = False
    seed: Callable[[], Mapping[EntityKind, Iterable[WireModel]]] = field(
        default=lambda: {}, compare=False, repr=False
    )

    def spec(self, kind: EntityKind) -> Optional[CollectionSpec]:
        for spec in self.collections:
            if spec.kind == kind:
                return spec
        return None

    def supports(self, kind: EntityKind, operation: Operation) -> bool:
        spec = self.spec(kind)
        return spec is not None and operation in spec.operations

    def initial_state(self, data_mode: DataMode = DataMode.MOCK) -> "AppState":
        seeds = self.seed()
        collections = {
            spec.kind: EntityCollection(seeds.get(spec.kind, ())) for spec in self.collections
        }
        return AppState(
            profile=self,
            collections=collections,
            data_mode=DataMode(data_mode) if self.has_data_mode else None,
        )


@dataclass(frozen=True)
class AppState:
    """Immutable snapshot of a product's store."""

    profile: ProductProfile
    collections: Mapping[EntityKind, EntityCollection]
    data_mode: Optional[DataMode] = None

    def collection(self, kind: EntityKind) -> EntityCollection:
        return self.collections.get(kind, EntityCollection())

    def with_collection(self, kind: EntityKind, collection: EntityCollection) -> "AppState":
        collections = dict(self.collections)
        collections[kind] = collection
        return replace(self, collections=collections)

    @property
    def files(self) -> Tuple[ProcessedFile, ...]:
        return self.collection(EntityKind.FILE).as_tuple()

    @property
    def topics(self) -> Tuple[Topic, ...]:
        return self.collection(EntityKind.TOPIC).as_tuple()

    @property
    def behavior_rules(self) -> Tuple[BehaviorRule, ...]:
        return self.collection(EntityKind.BEHAVIOR_RULE).as_tuple()

    @property
    def chat_threads(self) -> Tuple[ChatThread, ...]:
        return self.collection(EntityKind.CHAT_THREAD).as_tuple()

    @property
    def meetings(self) -> Tuple[MeetingSummary, ...]:
        return self.collection(EntityKind.MEETING).as_tuple()

    @property
    def emails(self) -> Tuple[EmailSummary, ...]:
        return self.collection(EntityKind.EMAIL).as_tuple()

    def to_snapshot(self) -> Dict[str, Any]:
        """JSON-ready image of the state, keyed the way the snapshot contract expects."""
        snapshot: Dict[str, Any] = {
            spec.key: [entity.to_wire() for entity in self.collection(spec.kind)]
            for spec in self.profile.collections
        }
        if self.profile.has_data_mode:
            snapshot["dataMode"] = DataMode(self.data_mode or DataMode.MOCK).value
        return snapshot

    @classmethod
    def from_snapshot(cls, profile: ProductProfile, snapshot: WireModel) -> "AppState":
        """Build a state from an already-decoded snapshot model."""
        collections = {}
        for spec in profile.collections:
            field_name = _snapshot_field(type(snapshot), spec.key)
            collections[spec.kind] = EntityCollection(getattr(snapshot, field_name, ()))

        data_mode = None
        if profile.has_data_mode:
            data_mode = DataMode(getattr(snapshot, "data_mode", DataMode.MOCK))
        return cls(profile=profile, collections=collections, data_mode=data_mode)


def _snapshot_field(model: Type[WireModel], key: str) -> str:
    for name, info in model.model_fields.items():
        if key in (name, info.alias):
            return name
    return key
