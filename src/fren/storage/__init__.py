"""
Storage subpackage: blob store backends and the read-modify-write state store.

Select a backend with ``create_blob_store``:
    - 'memory' (default): process memory, lost on exit
    - 'json': a single JSON file
    - 'sqlite': a single-row SQLite table
"""

from .blob_store import (
    BlobStore,
    InMemoryBlobStore,
    JsonFileBlobStore,
    SqliteBlobStore,
    create_blob_store,
)
from .state_store import State, StateStore

__all__ = [
    "BlobStore",
    "InMemoryBlobStore",
    "JsonFileBlobStore",
    "SqliteBlobStore",
    "create_blob_store",
    "State",
    "StateStore",
]
