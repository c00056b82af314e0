"""
Answer confidence scoring.

Derives a bounded confidence score from retrieval relevance.
"""

from typing import Protocol, Sequence

from docqa.rag.store_faiss import RetrievalResult


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


class ConfidenceEstimator(Protocol):
    def estimate(self, results: Sequence[RetrievalResult]) -> float:
        ...


class MeanSimilarityConfidence:
    """Mean of ``1 - distance`` over the results actually retrieved."""

    def estimate(self, results: Sequence[RetrievalResult]) -> float:
        if not results:
            return 0.0

        mean = sum(1.0 - r.distance for r in results) / len(results)
        return _clamp(mean)


class RankWeightedConfidence:
    """Similarity averaged with ``1 / rank`` weights, so the top hit counts most."""

    def estimate(self, results: Sequence[RetrievalResult]) -> float:
        if not results:
            return 0.0

        weights = [1.0 / rank for rank in range(1, len(results) + 1)]
        weighted = sum(w * (1.0 - r.distance) for w, r in zip(weights, results))
        return _clamp(weighted / sum(weights))
