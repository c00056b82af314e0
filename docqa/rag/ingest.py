"""Ingest pipeline for indexing an uploaded document.

Orchestrates:
- Text extraction
- Text chunking
- Embedding generation
- Vector storage
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional

import structlog

from docqa.errors import ExtractionError
from docqa.rag.chunker import TextChunker
from docqa.rag.embeddings import EmbeddingGateway
from docqa.rag.pdf_parser import PDFTextExtractor
from docqa.rag.store_faiss import FAISSVectorIndex, IndexEntry

logger = structlog.get_logger()


@dataclass(frozen=True)
class IngestResult:
    """Outcome of a successful ingestion."""

    chunk_count: int
    character_count: int
    page_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chunk_count": self.chunk_count,
            "character_count": self.character_count,
            "page_count": self.page_count,
        }


class IngestPipeline:
    """Pipeline for ingesting a document into the RAG system."""

    def __init__(
        self,
        index: FAISSVectorIndex,
        gateway: EmbeddingGateway,
        extractor: Optional[PDFTextExtractor] = None,
        chunker: Optional[TextChunker] = None,
    ):
        """Initialize the ingest pipeline.

        Args:
            index: Vector index receiving the passages
            gateway: Embedding gateway for passage texts
            extractor: Text extractor (default PDF extractor)
            chunker: Text chunker (default from config)
        """
        self.index = index
        self.gateway = gateway
        self.extractor = extractor or PDFTextExtractor()
        self.chunker = chunker or TextChunker()

        self.stats = {
            "documents_processed": 0,
            "chunks_created": 0,
            "embeddings_generated": 0,
        }

    async def ingest(self, data: bytes, content_type: str) -> IngestResult:
        """Extract, chunk, embed and index a document.

        Nothing is added to the index unless every passage was embedded.

        Args:
            data: Raw document bytes
            content_type: MIME type of the document

        Returns:
            IngestResult with the number of passages indexed

        Raises:
            ExtractionError: If the document cannot be read or yields no passages
            EmbeddingError: If embedding fails
            VectorIndexError: If the embeddings do not fit the index
        """
        logger.info("ingesting_document", content_type=content_type, size_bytes=len(data))

        # PyMuPDF parsing is CPU-bound; keep it off the event loop
        extracted = await asyncio.to_thread(self.extractor.extract, data, content_type)

        passages = self.chunker.chunk(extracted.text)
        if not passages:
            raise ExtractionError("Document produced no passages")

        embeddings = await self.gateway.embed_batch([p.text for p in passages])
        self.stats["embeddings_generated"] += len(embeddings)

        entries = [
            IndexEntry(passage=passage, embedding=embedding)
            for passage, embedding in zip(passages, embeddings)
        ]
        total = self.index.add(entries)

        self.stats["chunks_created"] += len(passages)
        self.stats["documents_processed"] += 1

        logger.info(
            "document_ingested",
            chunks_created=len(passages),
            page_count=extracted.page_count,
            total_vectors=total,
        )

        return IngestResult(
            chunk_count=len(passages),
            character_count=len(extracted.text),
            page_count=extracted.page_count,
        )
