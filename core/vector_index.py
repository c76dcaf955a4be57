"""
Brute-force cosine-similarity vector index.

Records are keyed by entity id and carry a denormalised metadata
snapshot. Search scores every record with numpy in one matrix product,
which is fast enough for catalog-sized collections.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from core.structured_logging import get_logger

_logger = get_logger("core.vector_index")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors; 0.0 if either norm is zero.

    Example:
        >>> cosine_similarity([1, 0], [1, 1])
        0.7071...
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        return 0.0
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom == 0:
        return 0.0
    return float(np.dot(va, vb) / denom)


@dataclass
class VectorRecord:
    """Embedding record: entity id, fixed-length vector, metadata snapshot."""
    entity_id: str
    vector: np.ndarray
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class VectorHit:
    entity_id: str
    similarity: float
    metadata: Dict[str, Any]


class VectorIndex:
    """
    Upsert-by-id store with top-k cosine retrieval.

    Args:
        dimension: Required vector length
        min_similarity: Hits must score strictly above this floor

    Usage:
        index = VectorIndex(dimension=384)
        index.upsert("p-1", vector, {"title": "HP Pavilion 14"})
        hits = index.top_k(query_vector, k=5)
    """

    def __init__(self, dimension: int = 384, min_similarity: float = 0.3):
        self.dimension = dimension
        self.min_similarity = min_similarity
        self._records: Dict[str, VectorRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, entity_id: str) -> bool:
        return str(entity_id) in self._records

    def get(self, entity_id: str) -> Optional[VectorRecord]:
        return self._records.get(str(entity_id))

    def upsert(self, entity_id: str, vector: Sequence[float], metadata: Optional[Dict[str, Any]] = None) -> VectorRecord:
        """
        Insert or overwrite the record for an entity.

        Repeated calls with the same id leave exactly one record holding
        the latest vector and metadata.

        Raises:
            ValueError: If the vector length differs from the index dimension
                or any component is not finite
        """
        arr = np.asarray(vector, dtype=np.float64).ravel()
        if arr.shape != (self.dimension,):
            raise ValueError(
                f"Vector for {entity_id!r} has length {arr.size}, expected {self.dimension}"
            )
        if not np.all(np.isfinite(arr)):
            raise ValueError(f"Vector for {entity_id!r} has non-finite components")
        record = VectorRecord(entity_id=str(entity_id), vector=arr, metadata=dict(metadata or {}))
        self._records[record.entity_id] = record
        _logger.debug(
            f"Upserted vector {record.entity_id}",
            extra={"event": "vector_upsert", "dimension": self.dimension},
        )
        return record

    def remove(self, entity_id: str) -> bool:
        return self._records.pop(str(entity_id), None) is not None

    def _query_array(self, query_vector: Optional[Sequence[float]]) -> Optional[np.ndarray]:
        """Query as an array, or None when degenerate (zero, non-finite, wrong length)."""
        if query_vector is None:
            return None
        try:
            q = np.asarray(query_vector, dtype=np.float64).ravel()
        except (TypeError, ValueError):
            return None
        if q.shape != (self.dimension,) or not np.all(np.isfinite(q)):
            return None
        if np.linalg.norm(q) == 0:
            return None
        return q

    def top_k(
        self,
        query_vector: Optional[Sequence[float]],
        k: int = 10,
        predicate: Optional[Callable[[VectorRecord], bool]] = None,
    ) -> List[VectorHit]:
        """
        Records most similar to the query, descending by cosine similarity.

        Only hits scoring above min_similarity are kept, then the list is
        truncated to k. Empty index, degenerate query or k <= 0 give [].

        Args:
            query_vector: Query embedding
            k: Maximum hits
            predicate: Optional record filter applied before scoring
        """
        if k <= 0:
            return []
        q = self._query_array(query_vector)
        if q is None:
            return []

        records = list(self._records.values())
        if predicate is not None:
            records = [r for r in records if predicate(r)]
        if not records:
            return []

        matrix = np.vstack([r.vector for r in records])
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
        dots = matrix @ q
        sims = np.divide(dots, norms, out=np.zeros_like(dots), where=norms != 0)
        sims[~np.isfinite(sims)] = -np.inf

        order = np.argsort(-sims, kind="stable")
        hits = []
        for idx in order:
            score = float(sims[idx])
            if score <= self.min_similarity:
                break
            record = records[idx]
            hits.append(VectorHit(entity_id=record.entity_id, similarity=score, metadata=dict(record.metadata)))
            if len(hits) >= k:
                break
        return hits


class OrderVectorIndex(VectorIndex):
    """
    Order embeddings; search can be scoped to one owner.

    Metadata must carry the owning user under "user_id".
    """

    def top_k(
        self,
        query_vector: Optional[Sequence[float]],
        k: int = 10,
        predicate: Optional[Callable[[VectorRecord], bool]] = None,
        owner_id: Optional[str] = None,
    ) -> List[VectorHit]:
        if owner_id is None:
            return super().top_k(query_vector, k, predicate)
        owner = str(owner_id)

        def owned(record: VectorRecord) -> bool:
            if str(record.metadata.get("user_id")) != owner:
                return False
            return predicate(record) if predicate is not None else True

        return super().top_k(query_vector, k, owned)
