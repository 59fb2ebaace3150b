"""
The reducer: ``(state, action) -> state``.

Total and pure. Every action either has a defined effect or returns the
state unchanged; nothing here raises, logs or touches I/O.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from assistant_core.store.actions import (
    Action,
    AddEntity,
    DeleteEntity,
    LoadState,
    SetDataMode,
    SetEntities,
    UpdateEntity,
)
from assistant_core.store.state import AppState, Operation, ProductProfile


def reduce(state: AppState, action: Action) -> AppState:
    """Compute the state that follows ``action``."""
    profile = state.profile

    if isinstance(action, AddEntity):
        if not profile.supports(action.kind, Operation.ADD):
            return state
        collection = state.collection(action.kind)
        return state.with_collection(action.kind, collection.add(action.entity))

    if isinstance(action, UpdateEntity):
        if not profile.supports(action.kind, Operation.UPDATE):
            return state
        collection = state.collection(action.kind)
        updated = collection.update(action.id, action.updates)
        if updated is collection:
            return state
        return state.with_collection(action.kind, updated)

    if isinstance(action, DeleteEntity):
        if not profile.supports(action.kind, Operation.DELETE):
            return state
        collection = state.collection(action.kind)
        remaining = collection.delete(action.id)
        if remaining is collection:
            return state
        return state.with_collection(action.kind, remaining)

    if isinstance(action, SetEntities):
        if not profile.supports(action.kind, Operation.SET):
            return state
        collection = state.collection(action.kind)
        return state.with_collection(action.kind, collection.replace(action.entities))

    if isinstance(action, LoadState):
        if action.state.profile.name != profile.name:
            return state
        return action.state

    if isinstance(action, SetDataMode):
        if not profile.has_data_mode or state.data_mode == action.mode:
            return state
        return replace(state, data_mode=action.mode)

    return state


def replay(
    profile: ProductProfile, actions: Iterable[Action], initial: Optional[AppState] = None
) -> AppState:
    """Fold ``actions`` over ``initial`` (or the profile's seeded state)."""
    state = initial if initial is not None else profile.initial_state()
    for action in actions:
        state = reduce(state, action)
    return state
