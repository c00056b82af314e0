"""Retriever for semantic search over the indexed document.

Handles:
- Query embedding generation
- Vector index search
"""
from typing import List, Optional

import structlog

from docqa import config
from docqa.rag.embeddings import EmbeddingGateway
from docqa.rag.store_faiss import FAISSVectorIndex, RetrievalResult

logger = structlog.get_logger()


class Retriever:
    """Semantic retriever for RAG pipeline."""

    def __init__(
        self,
        gateway: EmbeddingGateway,
        index: FAISSVectorIndex,
        top_k: int = None,
    ):
        """Initialize the retriever.

        Args:
            gateway: Embedding gateway used for the question
            index: Vector index to search
            top_k: Number of results to retrieve (default from config)
        """
        self.gateway = gateway
        self.index = index
        self.top_k = top_k if top_k is not None else config.RETRIEVAL_TOP_K

        logger.debug("retriever_initialized", top_k=self.top_k)

    async def retrieve(
        self,
        question: str,
        top_k: Optional[int] = None,
    ) -> List[RetrievalResult]:
        """Retrieve the passages most relevant to a question.

        No re-ranking is applied on top of the index ordering.

        Args:
            question: User question text
            top_k: Number of results to return (overrides default)

        Returns:
            List of RetrievalResult objects, sorted by relevance (best first)

        Raises:
            EmbeddingError: If the question cannot be embedded
            VectorIndexError: If the question embedding does not fit the index
        """
        if not question or not question.strip():
            logger.warning("empty_query_provided")
            return []

        top_k = top_k if top_k is not None else self.top_k

        logger.info("retrieval_started", query_length=len(question), top_k=top_k)

        query_embedding = await self.gateway.embed(question)
        results = self.index.query(query_embedding, top_k)

        logger.info(
            "retrieval_completed",
            query_length=len(question),
            results_returned=len(results),
            top_score=results[0].score if results else None,
        )

        return results
