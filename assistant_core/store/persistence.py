"""JSON snapshot persistence for a store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Optional

import structlog

from assistant_core.contracts.registry import decode
from assistant_core.core.exceptions import SnapshotError
from assistant_core.store.actions import Action, load_state
from assistant_core.store.state import AppState, ProductProfile
from assistant_core.store.store import Store

logger = structlog.get_logger(__name__)


class SnapshotFile:
    """A single JSON file holding one product's state snapshot."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def save(self, state: AppState) -> None:
        """Persist ``state``; the file is replaced atomically."""
        payload = json.dumps(state.to_snapshot(), indent=2, ensure_ascii=False)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error("Failed to write snapshot", path=str(self.path), error=str(e))
            raise SnapshotError(f"Cannot write snapshot {self.path}: {e}") from e

        logger.debug("Snapshot saved", path=str(self.path), product=state.profile.name)

    def load(self, profile: ProductProfile) -> Optional[AppState]:
        """
        Read and validate the snapshot for ``profile``.

        Returns:
            The restored state, or None when no snapshot exists yet

        Raises:
            SchemaViolation: The file does not match the snapshot contract
            SnapshotError: The file exists but cannot be read
        """
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise SnapshotError(f"Cannot read snapshot {self.path}: {e}") from e

        snapshot = decode(profile.snapshot_contract, raw)
        logger.info("Snapshot loaded", path=str(self.path), product=profile.name)
        return AppState.from_snapshot(profile, snapshot)

    def restore(self, store: Store) -> bool:
        """Dispatch ``LOAD_STATE`` with the saved snapshot; False if there is none."""
        state = self.load(store.profile)
        if state is None:
            return False
        store.dispatch(load_state(state))
        return True

    def attach(self, store: Store) -> Callable[[], None]:
        """Save after every transition that changed the state."""

        def on_transition(action: Action, previous: AppState, current: AppState) -> None:
            if current is not previous:
                self.save(current)

        return store.subscribe(on_transition)
