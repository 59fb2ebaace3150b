"""
Immutable, id-keyed entity collection.

Entities live in a dict keyed by id, whose insertion order is the display
order. Every operation returns a new collection; the receiver is never
mutated, so states handed out earlier stay valid.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Generic, Iterable, Iterator, Mapping, Optional, Tuple, TypeVar

from pydantic import ValidationError

from assistant_core.contracts.base import WireModel

E = TypeVar("E", bound=WireModel)


class EntityCollection(Generic[E]):
    """Ordered collection of entities with unique ids."""

    __slots__ = ("_items",)

    def __init__(self, entities: Iterable[E] = ()):
        items: Dict[str, E] = {}
        for entity in entities:
            items[entity.id] = entity
        self._items = items

    @classmethod
    def _wrap(cls, items: Dict[str, E]) -> "EntityCollection[E]":
        collection = cls.__new__(cls)
        collection._items = items
        return collection

    # Views

    def __iter__(self) -> Iterator[E]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntityCollection):
            return NotImplemented
        return list(self._items.items()) == list(other._items.items())

    def __repr__(self) -> str:
        return f"EntityCollection({list(self._items)})"

    def get(self, entity_id: str) -> Optional[E]:
        return self._items.get(entity_id)

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(self._items)

    def as_tuple(self) -> Tuple[E, ...]:
        return tuple(self._items.values())

    def as_mapping(self) -> Mapping[str, E]:
        return MappingProxyType(self._items)

    # Transitions

    def add(self, entity: E) -> "EntityCollection[E]":
        """Append ``entity``; an existing id is overwritten at its current position."""
        items = dict(self._items)
        items[entity.id] = entity
        return self._wrap(items)

    def update(self, entity_id: str, updates: Mapping[str, Any]) -> "EntityCollection[E]":
        """
        Merge ``updates`` into the entity with ``entity_id``.

        The merged entity is validated as a whole, so normalising validators
        run again. Unknown ids and patches the entity rejects are a no-op.
        """
        current = self._items.get(entity_id)
        if current is None:
            return self

        fields = type(current).model_fields
        patch = {key: value for key, value in updates.items() if key in fields and key != "id"}
        if not patch:
            return self

        try:
            merged = type(current).model_validate({**current.model_dump(), **patch})
        except ValidationError:
            return self

        items = dict(self._items)
        items[entity_id] = merged
        return self._wrap(items)

    def delete(self, entity_id: str) -> "EntityCollection[E]":
        """Drop the entity with ``entity_id``; unknown ids are a no-op."""
        if entity_id not in self._items:
            return self
        items = dict(self._items)
        del items[entity_id]
        return self._wrap(items)

    def replace(self, entities: Iterable[E]) -> "EntityCollection[E]":
        """Discard every entity and hold ``entities`` instead."""
        return type(self)(entities)
