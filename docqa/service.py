"""Document question answering service.

Wires one shared vector index into the ingestion and answering pipelines and
exposes the two operations a transport layer binds to: ``ingest`` and
``answer``.
"""
from typing import Optional

import structlog

from docqa import config
from docqa.errors import VectorIndexError
from docqa.llm_client import OllamaClient
from docqa.logging_config import log_latency
from docqa.rag.answer import Answer, AnswerPipeline
from docqa.rag.chunker import TextChunker
from docqa.rag.confidence import ConfidenceEstimator
from docqa.rag.embeddings import EmbeddingGateway
from docqa.rag.generator import AnswerGenerator
from docqa.rag.ingest import IngestPipeline, IngestResult
from docqa.rag.prompt import PASSAGE_HEADER_CHARS, PromptComposer
from docqa.rag.retriever import Retriever
from docqa.rag.store_faiss import FAISSVectorIndex

logger = structlog.get_logger()


class DocumentQA:
    """Single-document RAG service with an explicit open/close lifecycle.

    Use as an async context manager::

        async with DocumentQA() as qa:
            await qa.ingest(pdf_bytes, "application/pdf")
            answer = await qa.answer("What is the warranty period?")
    """

    def __init__(
        self,
        client: Optional[OllamaClient] = None,
        gateway: Optional[EmbeddingGateway] = None,
        generator: Optional[AnswerGenerator] = None,
        index: Optional[FAISSVectorIndex] = None,
        dimension: Optional[int] = None,
        max_chunk_chars: Optional[int] = None,
        top_k: Optional[int] = None,
        max_context_chars: Optional[int] = None,
        estimator: Optional[ConfidenceEstimator] = None,
    ):
        """Initialize the service. Nothing touches the network until open().

        Args:
            client: Ollama client shared by the default gateway and generator
            gateway: Embedding gateway (default built on ``client``)
            generator: Answer generator (default built on ``client``)
            index: Vector index to use (default created at open())
            dimension: Embedding dimension (default from config, else detected)
            max_chunk_chars: Passage size bound (default from config)
            top_k: Passages retrieved per question (default from config)
            max_context_chars: Prompt context budget (default from config); must
                leave room for one full-size passage and its header
            estimator: Confidence strategy (default mean similarity)
        """
        self.client = client or OllamaClient()
        self.gateway = gateway or EmbeddingGateway(client=self.client)
        self.generator = generator or AnswerGenerator(client=self.client)
        self.index = index
        self.dimension = dimension or config.EMBEDDING_DIMENSION

        self.chunker = TextChunker(max_chunk_chars=max_chunk_chars)
        self.composer = PromptComposer(max_context_chars=max_context_chars)

        budget_needed = self.chunker.max_chunk_chars + PASSAGE_HEADER_CHARS
        if self.composer.max_context_chars < budget_needed:
            raise ValueError(
                f"max_context_chars ({self.composer.max_context_chars}) must be at least "
                f"max_chunk_chars + {PASSAGE_HEADER_CHARS} ({budget_needed}) so a "
                f"full-size passage fits the prompt"
            )

        self.top_k = top_k
        self.estimator = estimator

        self._ingest_pipeline: Optional[IngestPipeline] = None
        self._answer_pipeline: Optional[AnswerPipeline] = None

    async def open(self) -> "DocumentQA":
        """Open the vector index and build both pipelines around it.

        Raises:
            EmbeddingError: If the embedding dimension has to be detected and
                the embedding model cannot be reached
        """
        if self._ingest_pipeline is not None:
            return self

        if self.index is None:
            dimension = self.dimension or await self.gateway.dimension()
            self.index = FAISSVectorIndex(dimension)

        self.index.open()

        self._ingest_pipeline = IngestPipeline(
            index=self.index,
            gateway=self.gateway,
            chunker=self.chunker,
        )
        self._answer_pipeline = AnswerPipeline(
            retriever=Retriever(self.gateway, self.index, top_k=self.top_k),
            generator=self.generator,
            composer=self.composer,
            estimator=self.estimator,
        )

        logger.info(
            "document_qa_opened",
            dimension=self.index.dimension,
            embedding_model=self.gateway.model,
            chat_model=self.generator.model,
        )
        return self

    async def close(self) -> None:
        """Close the vector index; its entries are discarded."""
        if self.index is not None:
            self.index.close()
        self._ingest_pipeline = None
        self._answer_pipeline = None
        logger.info("document_qa_closed")

    async def __aenter__(self) -> "DocumentQA":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _require_open(self) -> None:
        if self._ingest_pipeline is None or self._answer_pipeline is None:
            raise VectorIndexError("DocumentQA is not open. Call open() first.")

    @log_latency("docqa.ingest")
    async def ingest(self, data: bytes, content_type: str) -> IngestResult:
        """Index a document so later questions can be answered from it.

        Raises:
            ExtractionError: If the document cannot be read or has no text
            EmbeddingError: If embedding fails
            VectorIndexError: If the service is not open or dimensions mismatch
        """
        self._require_open()
        return await self._ingest_pipeline.ingest(data, content_type)

    @log_latency("docqa.answer")
    async def answer(self, question: str) -> Answer:
        """Answer a question about the ingested document.

        Raises:
            EmbeddingError: If the question cannot be embedded
            VectorIndexError: If the service is not open or dimensions mismatch
            GenerationError: If the model fails or refuses
        """
        self._require_open()
        return await self._answer_pipeline.answer(question)
