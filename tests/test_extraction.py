"""Tests for statement_tracker.extraction with pdfplumber mocked out."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from statement_tracker.extraction import ExtractedText, PdfPlumberExtractor


def _fake_pdf(page_texts: list[str | None]) -> MagicMock:
    """Build a mock pdfplumber document usable as a context manager."""
    pages = []
    for text in page_texts:
        page = MagicMock()
        page.extract_text.return_value = text
        pages.append(page)

    pdf = MagicMock()
    pdf.pages = pages
    pdf.__enter__.return_value = pdf
    pdf.__exit__.return_value = False
    return pdf


class TestPdfPlumberExtractor:
    def test_joins_pages(self):
        pdf = _fake_pdf(["page one", "page two"])
        with patch("statement_tracker.extraction.pdfplumber.open", return_value=pdf):
            extracted = PdfPlumberExtractor().extract(b"%PDF")

        assert extracted == ExtractedText(text="page one\npage two", page_count=2)

    def test_empty_page_text(self):
        pdf = _fake_pdf([None, "only text"])
        with patch("statement_tracker.extraction.pdfplumber.open", return_value=pdf):
            extracted = PdfPlumberExtractor().extract(b"%PDF")

        assert extracted.text == "\nonly text"
        assert extracted.page_count == 2

    def test_passes_layout_options(self):
        pdf = _fake_pdf(["text"])
        with patch("statement_tracker.extraction.pdfplumber.open", return_value=pdf):
            PdfPlumberExtractor(x_tolerance=1, y_tolerance=4, layout=False).extract(b"%PDF")

        pdf.pages[0].extract_text.assert_called_once_with(
            x_tolerance=1, y_tolerance=4, layout=False
        )

    def test_opens_bytes_buffer(self):
        pdf = _fake_pdf(["text"])
        with patch("statement_tracker.extraction.pdfplumber.open", return_value=pdf) as mock_open:
            PdfPlumberExtractor().extract(b"%PDF-1.7")

        buffer = mock_open.call_args.args[0]
        assert buffer.read() == b"%PDF-1.7"

    def test_errors_propagate(self):
        with patch(
            "statement_tracker.extraction.pdfplumber.open",
            side_effect=ValueError("not a PDF"),
        ):
            with pytest.raises(ValueError, match="not a PDF"):
                PdfPlumberExtractor().extract(b"garbage")
