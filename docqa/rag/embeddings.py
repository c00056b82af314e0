"""Embedding gateway in front of the Ollama embedding model.

Handles:
- Batching texts into bounded requests
- Runtime embedding dimension detection
- Mapping transport and payload failures onto EmbeddingError
"""
from typing import List, Optional

import httpx
import structlog

from docqa import config
from docqa.errors import EmbeddingError
from docqa.llm_client import OllamaClient, is_transient

logger = structlog.get_logger()


class EmbeddingGateway:
    """Maps texts to fixed-length vectors through an external model."""

    def __init__(
        self,
        client: Optional[OllamaClient] = None,
        model: str = None,
        batch_size: int = None,
    ):
        """Initialize the gateway.

        Args:
            client: Ollama client (a default one is created if not provided)
            model: Embedding model name (default from config)
            batch_size: Maximum texts per request (default from config)
        """
        self.client = client or OllamaClient()
        self.model = model or config.EMBEDDING_MODEL
        self.batch_size = batch_size or config.EMBEDDING_BATCH_SIZE
        self._dimension: Optional[int] = None

        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")

    async def _embed_request(self, texts: List[str]) -> List[List[float]]:
        try:
            data = await self.client.embed(texts, model=self.model)
        except httpx.HTTPError as e:
            transient = is_transient(e)
            logger.error(
                "embedding_request_failed",
                model=self.model,
                batch_size=len(texts),
                transient=transient,
                error=str(e),
            )
            raise EmbeddingError(f"Embedding request failed: {e}", transient=transient) from e
        except ValueError as e:
            raise EmbeddingError(f"Malformed embedding response: {e}") from e

        if not isinstance(data, dict):
            raise EmbeddingError("Malformed embedding response: expected a JSON object")

        vectors = data.get("embeddings") or []
        if not isinstance(vectors, list):
            raise EmbeddingError("Malformed embedding response: 'embeddings' is not a list")

        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"Expected {len(texts)} embeddings, got {len(vectors)}"
            )

        for vector in vectors:
            if not isinstance(vector, list):
                raise EmbeddingError("Malformed embedding response: vector is not a list")
            if not vector:
                raise EmbeddingError("Empty embedding returned from model")
            if len(vector) != len(vectors[0]):
                raise EmbeddingError("Embedding model returned vectors of mixed dimension")

        try:
            return [[float(x) for x in vector] for vector in vectors]
        except (TypeError, ValueError) as e:
            raise EmbeddingError(f"Malformed embedding response: {e}") from e

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Embed texts, preserving input order.

        Args:
            texts: Texts to embed

        Returns:
            One vector per input text

        Raises:
            EmbeddingError: If the model fails or returns unusable vectors
        """
        if not texts:
            return []

        embeddings: List[List[float]] = []

        for i in range(0, len(texts), self.batch_size):
            batch = texts[i : i + self.batch_size]
            embeddings.extend(await self._embed_request(batch))

            logger.debug(
                "embeddings_batch_generated",
                batch_size=len(batch),
                total_so_far=len(embeddings),
            )

        dimensions = {len(v) for v in embeddings}
        if len(dimensions) > 1:
            raise EmbeddingError(
                f"Embedding model returned inconsistent dimensions: {sorted(dimensions)}"
            )

        if self._dimension is None:
            self._dimension = len(embeddings[0])

        return embeddings

    async def embed(self, text: str) -> List[float]:
        """Embed a single text.

        Raises:
            EmbeddingError: If the model fails or returns an unusable vector
        """
        return (await self.embed_batch([text]))[0]

    async def dimension(self) -> int:
        """Detect the embedding dimension by embedding a probe string.

        The value is cached after the first successful embedding.

        Raises:
            EmbeddingError: If the probe fails
        """
        if self._dimension is None:
            logger.info("detecting_embedding_dimension", model=self.model)
            await self.embed("dimension probe")
            logger.info(
                "embedding_dimension_detected",
                model=self.model,
                dimension=self._dimension,
            )
        return self._dimension
