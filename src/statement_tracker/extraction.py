"""Text extraction from statement PDFs.

The processor accepts any object conforming to the ``TextExtractor``
protocol.  ``PdfPlumberExtractor`` is the concrete implementation; tests
use a fake that returns canned text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Protocol

import pdfplumber

logger = logging.getLogger(__name__)


@dataclass
class ExtractedText:
    """Plain text of a document plus its page count."""

    text: str
    page_count: int


class TextExtractor(Protocol):
    """Protocol that text extractors must implement."""

    def extract(self, data: bytes) -> ExtractedText:
        """Return the document's text and page count.

        May raise any exception on failure; the processor wraps it into an
        ``ExtractionError``.
        """
        ...


class PdfPlumberExtractor:
    """Extract text from PDF bytes with pdfplumber.

    ``layout=True`` keeps the horizontal spacing between columns, which is
    what lets the date-at-start strategy split a row into columns on runs
    of two or more spaces.
    """

    def __init__(self, x_tolerance: float = 2, y_tolerance: float = 3, layout: bool = True):
        self.x_tolerance = x_tolerance
        self.y_tolerance = y_tolerance
        self.layout = layout

    def extract(self, data: bytes) -> ExtractedText:
        pages_text: list[str] = []
        with pdfplumber.open(BytesIO(data)) as pdf:
            for page_num, page in enumerate(pdf.pages, start=1):
                text = page.extract_text(
                    x_tolerance=self.x_tolerance,
                    y_tolerance=self.y_tolerance,
                    layout=self.layout,
                ) or ""
                pages_text.append(text)
                logger.debug("Extracted %d chars from page %d", len(text), page_num)

        full_text = "\n".join(pages_text)
        logger.info(
            "Extracted %d chars of text from %d page(s)", len(full_text), len(pages_text)
        )
        return ExtractedText(text=full_text, page_count=len(pages_text))
