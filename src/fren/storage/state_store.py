"""
State store - durable key/value state over a whole-blob collaborator.

The underlying ``BlobStore`` only offers get-all/replace-all, so every
key-level operation here is a full read-modify-write. Each one runs as a
single critical section under a lock: the read happens immediately before
the write and nothing else (no dialog, no provider call) happens in between.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

from .blob_store import BlobStore, InMemoryBlobStore


logger = logging.getLogger(__name__)

State = Dict[str, Any]


class StateStore:
    """
    Read-modify-write state handle passed explicitly to every component.

    Example:
        >>> store = StateStore(InMemoryBlobStore())
        >>> store.set("hello", 1)
        >>> store.get("hello")
        1
    """

    def __init__(self, blob_store: Optional[BlobStore] = None):
        self.blob_store = blob_store or InMemoryBlobStore()
        self._lock = threading.RLock()

    def get_all(self) -> State:
        """Return the full state, or ``{}`` if nothing has been persisted yet."""
        state = self.blob_store.get()
        return state if state else {}

    def replace_all(self, state: State) -> None:
        """Persist ``state`` as the full state."""
        with self._lock:
            self.blob_store.set(state)

    def update(self, mutate: Callable[[State], Any]) -> Any:
        """
        Apply one logical change as an atomic read-modify-write.

        ``mutate`` receives the current full state, changes it in place and
        may return a value, which is passed back to the caller. If ``mutate``
        raises, nothing is written.

        Args:
            mutate: Pure in-memory mutation; must not block on collaborators

        Returns:
            Whatever ``mutate`` returned
        """
        with self._lock:
            state = self.get_all()
            result = mutate(state)
            self.blob_store.set(state)
            return result

    def get(self, key: str, default: Any = None) -> Any:
        """Read one key; absent keys return ``default``."""
        return self.get_all().get(key, default)

    def contains(self, key: str) -> bool:
        return key in self.get_all()

    def set(self, key: str, value: Any) -> None:
        """Set one key."""
        def _set(state: State) -> None:
            state[key] = value

        self.update(_set)
        logger.debug(f"Set state key: {key}")

    def remove(self, key: str) -> None:
        """Remove one key; removing an absent key is a no-op."""
        def _remove(state: State) -> None:
            state.pop(key, None)

        self.update(_remove)
        logger.debug(f"Removed state key: {key}")

    def clear(self) -> None:
        """Persist an empty state."""
        self.replace_all({})
        logger.debug("Cleared state")
