"""Question answering over an uploaded document."""

from docqa.errors import (
    DocQAError,
    EmbeddingError,
    ExtractionError,
    GenerationError,
    VectorIndexError,
)
from docqa.rag.answer import Answer
from docqa.rag.ingest import IngestResult
from docqa.service import DocumentQA

__version__ = "0.1.0"

__all__ = [
    "Answer",
    "DocQAError",
    "DocumentQA",
    "EmbeddingError",
    "ExtractionError",
    "GenerationError",
    "IngestResult",
    "VectorIndexError",
]
