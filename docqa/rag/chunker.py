"""Text chunking for RAG pipeline.

Implements greedy, character-bounded chunking over whitespace tokens to avoid
tokenizer dependencies. Boundaries may fall mid-sentence; tokens are never cut.
"""
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from docqa import config

logger = structlog.get_logger()


def _new_passage_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Passage:
    """A bounded excerpt of a document, the unit of retrieval."""

    text: str
    source_order: int
    id: str = field(default_factory=_new_passage_id, compare=False)


class TextChunker:
    """Whitespace-token chunker with a maximum passage length in characters."""

    def __init__(self, max_chunk_chars: Optional[int] = None):
        """Initialize the text chunker.

        Args:
            max_chunk_chars: Upper bound on passage length (default from config)
        """
        self.max_chunk_chars = (
            max_chunk_chars if max_chunk_chars is not None else config.MAX_CHUNK_CHARS
        )

        if self.max_chunk_chars < 1:
            raise ValueError(
                f"max_chunk_chars must be positive, got {self.max_chunk_chars}"
            )

        logger.debug("chunker_initialized", max_chunk_chars=self.max_chunk_chars)

    def chunk(self, text: str) -> List[Passage]:
        """Split text into passages in document order.

        A token longer than ``max_chunk_chars`` becomes a passage of its own
        and is left whole, so the bound holds for every other passage.

        Args:
            text: Text to chunk

        Returns:
            List of Passage objects (empty for empty or blank text)
        """
        tokens = text.split() if text else []
        if not tokens:
            return []

        pieces: List[str] = []
        buffer = ""

        for token in tokens:
            if buffer and len(buffer) + 1 + len(token) > self.max_chunk_chars:
                pieces.append(buffer)
                buffer = token
            elif buffer:
                buffer = f"{buffer} {token}"
            else:
                buffer = token

        if buffer:
            pieces.append(buffer)

        passages = [Passage(text=piece, source_order=i) for i, piece in enumerate(pieces)]

        logger.info(
            "text_chunked",
            text_length=len(text),
            **self.get_chunk_stats(passages),
        )

        return passages

    def get_chunk_stats(self, passages: List[Passage]) -> dict:
        """Get statistics about a set of passages.

        Args:
            passages: List of Passage objects

        Returns:
            Dictionary with chunk statistics
        """
        if not passages:
            return {
                "chunk_count": 0,
                "total_chars": 0,
                "avg_chunk_size": 0,
                "min_chunk_size": 0,
                "max_chunk_size": 0,
            }

        sizes = [len(p.text) for p in passages]

        return {
            "chunk_count": len(passages),
            "total_chars": sum(sizes),
            "avg_chunk_size": sum(sizes) // len(passages),
            "min_chunk_size": min(sizes),
            "max_chunk_size": max(sizes),
        }


def chunk_text(text: str, max_chunk_chars: Optional[int] = None) -> List[Passage]:
    """Chunk text with a fresh chunker (convenience function).

    Args:
        text: Text to chunk
        max_chunk_chars: Upper bound on passage length (default from config)

    Returns:
        List of Passage objects
    """
    return TextChunker(max_chunk_chars=max_chunk_chars).chunk(text)
