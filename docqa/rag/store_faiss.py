"""FAISS vector index for semantic search.

Handles:
- Explicit open/close lifecycle
- Dimension validation on insert and query
- Cosine similarity search with deterministic tie-breaking
- Lock discipline so queries never observe a half-applied insert
"""
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import faiss
import numpy as np
import structlog

from docqa.errors import VectorIndexError
from docqa.rag.chunker import Passage

logger = structlog.get_logger()


@dataclass(frozen=True)
class IndexEntry:
    """A passage paired with its embedding, the unit stored in the index."""

    passage: Passage
    embedding: Sequence[float]


@dataclass(frozen=True)
class RetrievalResult:
    """A single retrieved passage with its similarity to the query."""

    passage: Passage
    score: float

    @property
    def distance(self) -> float:
        """Cosine distance, 0 for identical direction."""
        return 1.0 - self.score


class FAISSVectorIndex:
    """Append-only, in-memory FAISS index over passage embeddings.

    Vectors are L2-normalized before insertion, so the inner product computed
    by ``IndexFlatIP`` is the cosine similarity. Search is exhaustive, which
    keeps the top-k ordering exact.
    """

    def __init__(self, dimension: int):
        """Initialize the vector index.

        Args:
            dimension: Embedding dimension every entry must match
        """
        if dimension < 1:
            raise ValueError(f"dimension must be positive, got {dimension}")

        self.dimension = dimension
        self.index: Optional[faiss.Index] = None
        self._passages: List[Passage] = []
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self.index is not None

    def open(self) -> "FAISSVectorIndex":
        """Create the underlying FAISS index. Opening twice is a no-op."""
        with self._lock:
            if self.index is None:
                self.index = faiss.IndexFlatIP(self.dimension)
                self._passages = []
                logger.info(
                    "faiss_index_opened",
                    dimension=self.dimension,
                    index_type="IndexFlatIP",
                )
        return self

    def close(self) -> None:
        """Release the index and every stored entry."""
        with self._lock:
            if self.index is not None:
                logger.info("faiss_index_closed", vector_count=self.index.ntotal)
            self.index = None
            self._passages = []

    def __enter__(self) -> "FAISSVectorIndex":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._passages)

    def _require_open(self) -> faiss.Index:
        if self.index is None:
            raise VectorIndexError("Vector index is not open. Call open() first.")
        return self.index

    def _to_matrix(self, vectors: Sequence[Sequence[float]], what: str) -> np.ndarray:
        for vector in vectors:
            if len(vector) != self.dimension:
                logger.error(
                    "dimension_mismatch",
                    what=what,
                    expected=self.dimension,
                    got=len(vector),
                )
                raise VectorIndexError(
                    f"{what} dimension mismatch: expected {self.dimension}, "
                    f"got {len(vector)}"
                )

        matrix = np.array(vectors, dtype=np.float32).reshape(len(vectors), self.dimension)
        faiss.normalize_L2(matrix)
        return matrix

    def add(self, entries: Sequence[IndexEntry]) -> int:
        """Append entries to the index.

        Every entry is validated before any is inserted, so a bad batch leaves
        the index untouched.

        Args:
            entries: Passages with their embeddings

        Returns:
            Total number of entries held after the insert

        Raises:
            VectorIndexError: If the index is not open or a dimension mismatches
        """
        self._require_open()

        if not entries:
            return len(self)

        vectors = self._to_matrix([e.embedding for e in entries], "Embedding")

        with self._lock:
            index = self._require_open()
            index.add(vectors)
            self._passages.extend(e.passage for e in entries)
            total = index.ntotal

        logger.info("vectors_added", count=len(entries), total_vectors=total)

        return total

    def query(self, query_embedding: Sequence[float], k: int) -> List[RetrievalResult]:
        """Return up to k entries most similar to the query embedding.

        Results are sorted by descending cosine similarity; equal scores keep
        insertion order. An empty index yields an empty list.

        Args:
            query_embedding: Query vector
            k: Maximum number of results

        Returns:
            List of RetrievalResult objects, best first

        Raises:
            ValueError: If k is smaller than 1
            VectorIndexError: If the index is not open or the dimension mismatches
        """
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")

        self._require_open()
        query_vector = self._to_matrix([query_embedding], "Query")

        with self._lock:
            index = self._require_open()
            total = index.ntotal
            if total == 0:
                logger.info("query_on_empty_index")
                return []

            # Rank every entry so ties at the k-th place resolve by position
            scores, positions = index.search(query_vector, total)
            passages = self._passages

        ranked = sorted(
            (
                (float(score), int(position))
                for score, position in zip(scores[0], positions[0])
                if position >= 0
            ),
            key=lambda pair: (-pair[0], pair[1]),
        )

        results = [
            RetrievalResult(passage=passages[position], score=score)
            for score, position in ranked[:k]
        ]

        logger.info(
            "vector_search_completed",
            top_k=k,
            results_found=len(results),
            top_score=results[0].score if results else None,
        )

        return results

    def passages(self) -> List[Passage]:
        """Snapshot of the stored passages in insertion order."""
        with self._lock:
            return list(self._passages)

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about the vector index.

        Returns:
            Dictionary with index statistics
        """
        return {
            "initialized": self.is_open,
            "vector_count": len(self),
            "dimension": self.dimension,
            "index_type": "IndexFlatIP",
        }
