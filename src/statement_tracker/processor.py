"""Statement processing: from uploaded bytes to a categorized result.

:func:`process_statement` composes the processing steps:

1. Reject empty input.
2. Extract text and page count through a ``TextExtractor``.
3. Reject empty or implausibly short text; log (but accept) text that
   lacks every issuer keyword.
4. Split into lines and run the record-extraction cascade.
5. Fail if no records were found.
6. Compute the summary and assemble the :class:`StatementResult`.

Fatal conditions raise the typed errors in ``errors.py``; everything else
is reported in ``StatementResult.warnings``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import PurePath

from statement_tracker.errors import (
    ExtractionError,
    InputValidationError,
    NoRecordsError,
    StatementError,
)
from statement_tracker.extraction import ExtractedText, TextExtractor
from statement_tracker.models import (
    IN,
    OUT,
    CategoryConfig,
    ParserSettings,
    Record,
    StatementResult,
    StatementSummary,
)
from statement_tracker.parsers import extract_records, split_lines

logger = logging.getLogger(__name__)

MAX_FILE_NAME_LENGTH = 1000
PDF_CONTENT_TYPES = {"application/pdf"}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_upload(
    file_name: str,
    data: bytes,
    content_type: str | None = None,
    max_bytes: int | None = None,
) -> None:
    """Check an uploaded statement before any processing.

    Args:
        file_name: Name the file was uploaded under.
        data: Raw file content.
        content_type: Declared MIME type, if the caller has one.
        max_bytes: Largest accepted size, or ``None`` for no limit.

    Raises:
        InputValidationError: If the file is empty, too large, not a PDF,
            or has an unusable name.
    """
    if not data:
        raise InputValidationError("document buffer is empty")
    if max_bytes is not None and len(data) > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise InputValidationError(f"File size too large. Maximum {limit_mb:g}MB allowed.")
    if content_type is not None and content_type not in PDF_CONTENT_TYPES:
        raise InputValidationError(f"Only PDF files are allowed (got {content_type!r})")
    if not file_name or len(file_name.strip()) < 4:
        raise InputValidationError("Invalid file name")
    if PurePath(file_name).suffix.lower() != ".pdf":
        raise InputValidationError(f"Only PDF files are allowed: {file_name!r}")


def process_statement(
    data: bytes,
    file_name: str,
    extractor: TextExtractor,
    categories: CategoryConfig,
    settings: ParserSettings | None = None,
) -> StatementResult:
    """Parse one statement document into categorized records.

    Args:
        data: Raw document bytes.
        file_name: Original file name; sanitized before it is stored.
        extractor: Text extraction collaborator.
        categories: Category snapshot used for the whole run.
        settings: Parser vocabulary and limits; defaults apply if omitted.

    Returns:
        A :class:`StatementResult` with records, summary, and provenance.

    Raises:
        InputValidationError: If *data* is empty.
        ExtractionError: If extraction fails or yields unusable text.
        NoRecordsError: If no transactions could be found.
    """
    if settings is None:
        settings = ParserSettings()

    if not data:
        raise InputValidationError("document buffer is empty")

    logger.info("Processing statement %r (%d bytes)", file_name, len(data))
    extracted = _extract(data, extractor)
    warnings = validate_text(extracted.text, settings)

    lines = split_lines(extracted.text)
    extraction = extract_records(lines, settings, categories)
    warnings.extend(extraction.warnings)

    if not extraction.records:
        logger.info("No transactions found; text sample: %r", extracted.text[:2000])
        raise NoRecordsError(
            "No transactions were found in the document. It may not be a "
            "supported bank statement format."
        )

    result = StatementResult(
        records=extraction.records,
        summary=compute_summary(extraction.records),
        file_name=sanitize_file_name(file_name),
        total_pages=extracted.page_count,
        parse_date=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        warnings=warnings,
    )
    logger.info(
        "Parsed %d record(s) from %r: out=%s in=%s",
        result.summary.total_records,
        result.file_name,
        result.summary.total_out,
        result.summary.total_in,
    )
    return result


def validate_text(text: str, settings: ParserSettings) -> list[str]:
    """Check that extracted text can plausibly be a statement.

    Returns:
        Advisory warnings (currently only the missing-issuer notice).

    Raises:
        ExtractionError: If *text* is blank or shorter than
            ``settings.min_text_length``.
    """
    if not text or not text.strip():
        raise ExtractionError("Document appears to be empty or unreadable")
    if len(text) < settings.min_text_length:
        raise ExtractionError("Document content is too short to be a valid bank statement")

    upper = text.upper()
    if not any(keyword.upper() in upper for keyword in settings.issuer_keywords):
        message = "Document may not be a supported statement: no issuer keywords found"
        logger.warning(message)
        return [message]
    return []


def compute_summary(records: list[Record]) -> StatementSummary:
    """Count records and total them by direction; net is IN minus OUT."""
    total_out = sum((r.amount for r in records if r.direction == OUT), Decimal("0.00"))
    total_in = sum((r.amount for r in records if r.direction == IN), Decimal("0.00"))
    return StatementSummary(
        total_records=len(records),
        total_out=total_out,
        total_in=total_in,
        net=total_in - total_out,
    )


def sanitize_file_name(file_name: str) -> str:
    """Strip angle brackets and surrounding whitespace, cap the length."""
    return file_name.strip().replace("<", "").replace(">", "")[:MAX_FILE_NAME_LENGTH]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _extract(data: bytes, extractor: TextExtractor) -> ExtractedText:
    """Call the extractor, turning any failure into an ExtractionError."""
    try:
        extracted = extractor.extract(data)
    except StatementError:
        raise
    except Exception as exc:
        logger.error("Text extraction failed: %s", exc)
        raise ExtractionError(f"Failed to extract text from document: {exc}") from exc

    if extracted is None or not extracted.text:
        raise ExtractionError("Could not extract text from document")
    return extracted
