"""
Retrieval module for informed queries.

This module provides:
- Index: Persist document embeddings and find the nearest one
- Engine: Splice the nearest document into a chat before asking the provider
"""

from .index import EmbeddingIndex, NearestDocument, euclidean_distance
from .engine import RetrievalEngine

__all__ = [
    "EmbeddingIndex",
    "NearestDocument",
    "euclidean_distance",
    "RetrievalEngine",
]
