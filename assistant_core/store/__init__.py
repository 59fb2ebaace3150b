"""
Reducer-driven state store shared by the Erika and Marvin products.
"""

from assistant_core.store.products import ERIKA, MARVIN, get_profile
from assistant_core.store.reducer import reduce, replay
from assistant_core.store.state import AppState, EntityKind
from assistant_core.store.store import Store, create_store

__all__ = [
    "ERIKA",
    "MARVIN",
    "AppState",
    "EntityKind",
    "Store",
    "create_store",
    "get_profile",
    "reduce",
    "replay",
]
