"""
Blob store backends - the host's persistent storage primitive.

A blob store persists one opaque JSON object per user. It offers only
whole-blob ``get``/``set``; there are no key-level operations and no
transactions. ``StateStore`` builds read-modify-write on top of it.
"""

import copy
import json
import logging
import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..core.exceptions import StorageError


logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """
    Abstract base class for blob stores.

    Implementations must return a fresh object from ``get`` so that callers
    mutating it never touch what is persisted.
    """

    @abstractmethod
    def get(self) -> Optional[Dict[str, Any]]:
        """
        Read the persisted blob.

        Returns:
            The blob, or None if nothing has been persisted yet
        """
        pass

    @abstractmethod
    def set(self, state: Dict[str, Any]) -> None:
        """
        Replace the persisted blob.

        Args:
            state: The new blob (must be JSON-serializable)
        """
        pass

    def close(self) -> None:
        """Close any open resources. Optional."""
        pass


class InMemoryBlobStore(BlobStore):
    """Blob store held in process memory. Used for tests and ephemeral hosts."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._blob = copy.deepcopy(initial) if initial is not None else None

    def get(self) -> Optional[Dict[str, Any]]:
        if self._blob is None:
            return None
        return copy.deepcopy(self._blob)

    def set(self, state: Dict[str, Any]) -> None:
        self._blob = copy.deepcopy(state)


class JsonFileBlobStore(BlobStore):
    """
    Blob store persisted as a single JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash mid-write never leaves a truncated blob.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def get(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                blob = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read state file {self.path}: {e}") from e

        if not isinstance(blob, dict):
            raise StorageError(f"State file {self.path} does not contain a JSON object")
        return blob

    def set(self, state: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(state, f, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write state file {self.path}: {e}") from e

        logger.debug(f"Wrote state blob to {self.path}")


class SqliteBlobStore(BlobStore):
    """
    Blob store persisted in a single-row SQLite table.

    The blob is stored as JSON text under a fixed row id.
    """

    ROW_ID = 1

    def __init__(self, db_path: Union[str, Path], auto_init: bool = True):
        """
        Initialize the SQLite blob store.

        Args:
            db_path: Path to the SQLite database file (':memory:' allowed)
            auto_init: Whether to create the table automatically
        """
        self.db_path = str(db_path)
        self.conn = None
        self._connect()

        if auto_init:
            self._init_schema()

    def _connect(self) -> None:
        """Establish database connection."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        logger.debug(f"Connected to SQLite blob store: {self.db_path}")

    def _init_schema(self) -> None:
        """Initialize database schema."""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS state_blob (
                id INTEGER PRIMARY KEY,
                body TEXT NOT NULL
            )
        """)
        self.conn.commit()

    def get(self) -> Optional[Dict[str, Any]]:
        try:
            row = self.conn.execute(
                "SELECT body FROM state_blob WHERE id = ?", (self.ROW_ID,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read state blob: {e}") from e

        if row is None:
            return None

        try:
            blob = json.loads(row[0])
        except json.JSONDecodeError as e:
            raise StorageError(f"Stored state blob is not valid JSON: {e}") from e

        if not isinstance(blob, dict):
            raise StorageError("Stored state blob is not a JSON object")
        return blob

    def set(self, state: Dict[str, Any]) -> None:
        try:
            body = json.dumps(state, ensure_ascii=False)
            self.conn.execute(
                """
                INSERT INTO state_blob (id, body) VALUES (?, ?)
                ON CONFLICT(id) DO UPDATE SET body = excluded.body
                """,
                (self.ROW_ID, body),
            )
            self.conn.commit()
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write state blob: {e}") from e

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None


def create_blob_store(
    backend: str = "memory",
    path: Optional[Union[str, Path]] = None,
) -> BlobStore:
    """
    Factory function to create a blob store for the configured backend.

    Args:
        backend: 'memory', 'json' or 'sqlite'
        path: File path for the 'json' and 'sqlite' backends

    Returns:
        BlobStore instance

    Raises:
        ValueError: If backend is not recognized or a path is missing
    """
    backend = (backend or "memory").lower()

    if backend == "memory":
        return InMemoryBlobStore()

    if backend in ("json", "sqlite") and path is None:
        raise ValueError(f"The '{backend}' backend requires a state path")

    if backend == "json":
        return JsonFileBlobStore(path)

    if backend == "sqlite":
        return SqliteBlobStore(path)

    raise ValueError(
        f"Unknown backend: {backend}. "
        "Supported backends: 'memory', 'json', 'sqlite'"
    )
