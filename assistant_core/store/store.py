"""
The store: single owner of a product's state.

``dispatch`` runs one reducer call at a time, in arrival order. Observers
are called after each transition with ``(action, previous, current)``.
"""

from __future__ import annotations

import threading
from typing import Callable, List, Optional

import structlog

from assistant_core.contracts.entities import DataMode
from assistant_core.store.actions import Action
from assistant_core.store.products import get_profile
from assistant_core.store.reducer import reduce
from assistant_core.store.state import AppState, ProductProfile

logger = structlog.get_logger(__name__)

Listener = Callable[[Action, AppState, AppState], None]


class Store:
    """State container for one product instance."""

    def __init__(
        self,
        profile: ProductProfile,
        initial: Optional[AppState] = None,
        data_mode: DataMode = DataMode.MOCK,
    ):
        self.profile = profile
        self._state = initial if initial is not None else profile.initial_state(data_mode)
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        """Apply ``action`` and return the new state."""
        with self._lock:
            previous = self._state
            current = reduce(previous, action)
            self._state = current

            logger.debug(
                "Action dispatched",
                product=self.profile.name,
                action=action.type,
                changed=current is not previous,
            )

            for listener in list(self._listeners):
                try:
                    listener(action, previous, current)
                except Exception as e:
                    logger.error(
                        "State listener failed",
                        product=self.profile.name,
                        action=action.type,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
            return current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe


def create_store(product: str, data_mode: DataMode = DataMode.MOCK) -> Store:
    """Build a store seeded for ``product`` ("erika" or "marvin")."""
    return Store(get_profile(product), data_mode=data_mode)
