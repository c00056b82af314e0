"""PDF parser for extracting plain text from uploaded documents.

Handles:
- Content type validation
- Page-by-page text extraction in reading order
- Whitespace normalization across page boundaries
"""
import re
from dataclasses import dataclass
from typing import List

import fitz  # PyMuPDF
import structlog

from docqa.errors import ExtractionError

logger = structlog.get_logger()

PDF_CONTENT_TYPES = frozenset({"application/pdf", "application/x-pdf"})

WHITESPACE_PATTERN = re.compile(r"\s+")


@dataclass(frozen=True)
class ExtractedText:
    """Plain text pulled out of a document."""

    text: str
    page_count: int


class PDFTextExtractor:
    """Extracts the text of a PDF byte stream as a single string."""

    @staticmethod
    def _normalize_content_type(content_type: str) -> str:
        return (content_type or "").split(";", 1)[0].strip().lower()

    def extract(self, data: bytes, content_type: str = "application/pdf") -> ExtractedText:
        """Extract all text from a PDF document.

        Page boundaries and internal whitespace runs collapse to single spaces.
        Extraction is all-or-nothing: on any failure no text is returned.

        Args:
            data: Raw document bytes
            content_type: MIME type reported for the document

        Returns:
            ExtractedText with the joined text and the page count

        Raises:
            ExtractionError: If the content type is unsupported, the bytes are
                not a readable PDF, or the document holds no text
        """
        media_type = self._normalize_content_type(content_type)
        if media_type not in PDF_CONTENT_TYPES:
            logger.warning("unsupported_content_type", content_type=content_type)
            raise ExtractionError(f"Unsupported content type: {content_type!r}")

        if not data:
            raise ExtractionError("Document is empty")

        try:
            with fitz.open(stream=data, filetype="pdf") as doc:
                if doc.needs_pass:
                    raise ExtractionError("Document is password protected")

                page_count = doc.page_count
                pages: List[str] = [page.get_text("text", sort=True) for page in doc]

        except ExtractionError:
            raise
        except Exception as e:
            logger.error(
                "pdf_parse_failed",
                error=str(e),
                error_type=type(e).__name__,
                size_bytes=len(data),
            )
            raise ExtractionError(f"Could not parse document as PDF: {e}") from e

        text = WHITESPACE_PATTERN.sub(" ", " ".join(pages)).strip()

        if not text:
            logger.warning("pdf_has_no_text", page_count=page_count)
            raise ExtractionError("Document contains no extractable text")

        logger.info(
            "pdf_text_extracted",
            page_count=page_count,
            text_length=len(text),
        )

        return ExtractedText(text=text, page_count=page_count)


def extract_text(data: bytes, content_type: str = "application/pdf") -> str:
    """Extract text using a default extractor (convenience function).

    Args:
        data: Raw document bytes
        content_type: MIME type reported for the document

    Returns:
        Extracted plain text
    """
    return PDFTextExtractor().extract(data, content_type).text
