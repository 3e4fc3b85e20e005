"""
Embedding Index - document text → embedding vector, with exact nearest-neighbour lookup.

Implements:
- Euclidean distance scoring
- Exhaustive nearest-neighbour scan (no approximate indexing)
- Deterministic tie-breaking: first document in stored iteration order wins

The whole index is one value (``embeddingsIndex``) in the state blob. A
document's text is its own key, so inserting identical text again
overwrites the vector but keeps the document's original position.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..contracts.request_contracts import to_vector, validate_vector
from ..core.exceptions import DimensionMismatch, FrenError, ProviderError
from ..core.types import EMBEDDINGS_INDEX_KEY, Vector
from ..storage.state_store import State, StateStore


logger = logging.getLogger(__name__)


def euclidean_distance(vec_a: List[float], vec_b: List[float]) -> float:
    """
    Compute the Euclidean distance between two vectors.

    Args:
        vec_a: First vector
        vec_b: Second vector

    Returns:
        sqrt(sum((a_i - b_i)^2))

    Raises:
        DimensionMismatch: If vectors have different lengths
    """
    if len(vec_a) != len(vec_b):
        raise DimensionMismatch(
            f"Vector dimensions must match: {len(vec_a)} != {len(vec_b)}",
            expected=len(vec_a),
            actual=len(vec_b),
        )

    return math.sqrt(sum((a - b) ** 2 for a, b in zip(vec_a, vec_b)))


@dataclass(frozen=True)
class NearestDocument:
    """
    Result of a nearest-neighbour lookup.

    Attributes:
        document: Text of the closest stored document
        distance: Euclidean distance between its vector and the query
    """
    document: str
    distance: float


class EmbeddingIndex:
    """
    Persistent map from document text to its embedding.

    Example:
        >>> index = EmbeddingIndex(StateStore())
        >>> index.insert("hello world", lambda text: [1, 2, 3])
        >>> index.nearest([1, 2, 3])
        NearestDocument(document='hello world', distance=0.0)
    """

    def __init__(self, state: StateStore):
        self.state = state

    def _read_index(self) -> Dict[str, Any]:
        stored = self.state.get(EMBEDDINGS_INDEX_KEY)
        return stored if isinstance(stored, dict) else {}

    def insert(self, document: str, embed: Callable[[str], Any]) -> Vector:
        """
        Embed ``document`` and store it.

        The provider call happens first; the index is then updated in a
        single read-modify-write.

        Args:
            document: Document text (also its key)
            embed: Provider embedding function

        Returns:
            The stored vector

        Raises:
            ProviderError: If the provider fails or returns a non-numeric sequence
            DimensionMismatch: If the vector's length differs from the stored vectors'
        """
        try:
            raw = embed(document)
        except FrenError:
            raise
        except Exception as e:
            logger.error(f"Embedding provider failed: {e}")
            raise ProviderError(f"Embedding provider failed: {e}") from e

        errors = validate_vector(raw)
        if errors:
            raise ProviderError(f"Invalid embedding from provider: {'; '.join(errors)}")
        vector = to_vector(raw)

        def _insert(state: State) -> None:
            index = state.get(EMBEDDINGS_INDEX_KEY)
            if not isinstance(index, dict):
                index = {}
            # All stored vectors share one length, so any other entry is the reference
            reference = next(
                ((other, stored) for other, stored in index.items()
                 if other != document and isinstance(stored, list)),
                None,
            )
            if reference is not None and len(reference[1]) != len(vector):
                raise DimensionMismatch(
                    f"Embedding has {len(vector)} dimensions but the index holds "
                    f"{len(reference[1])}-dimensional vectors",
                    expected=len(reference[1]),
                    actual=len(vector),
                    document=reference[0],
                )
            index[document] = vector
            state[EMBEDDINGS_INDEX_KEY] = index

        self.state.update(_insert)
        logger.info(f"Loaded document into embeddings ({len(vector)} dims, {len(document)} chars)")
        return vector

    def clear(self) -> None:
        """Persist an empty index."""
        self.state.set(EMBEDDINGS_INDEX_KEY, {})
        logger.info("Cleared embeddings index")

    def nearest(self, query_vector: List[float]) -> Optional[NearestDocument]:
        """
        Find the stored document closest to ``query_vector``.

        Scans every stored document. The strictly smallest distance wins, so
        on ties the first document in iteration order is kept.

        Returns:
            The nearest document, or None if the index is empty

        Raises:
            DimensionMismatch: If any stored vector's length differs from the query's
        """
        best: Optional[NearestDocument] = None

        for document, vector in self._read_index().items():
            if not isinstance(vector, list) or len(vector) != len(query_vector):
                actual = len(vector) if isinstance(vector, list) else None
                raise DimensionMismatch(
                    f"Stored embedding has {actual} dimensions, query has {len(query_vector)}",
                    expected=len(query_vector),
                    actual=actual,
                    document=document,
                )

            distance = euclidean_distance(query_vector, vector)
            if best is None or distance < best.distance:
                best = NearestDocument(document=document, distance=distance)

        if best is not None:
            logger.debug(f"Nearest document at distance {best.distance:.6f}")
        return best

    def size(self) -> int:
        """Number of stored documents."""
        return len(self._read_index())

    def documents(self) -> List[str]:
        """Stored document texts in iteration order."""
        return list(self._read_index().keys())
