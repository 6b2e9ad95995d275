"""Typed failures raised by the statement processor.

Callers catch :class:`StatementError` and use ``kind`` (or the subclass) to
pick a user-facing message.  Lines that cannot be parsed never raise; they
are dropped and reported as warnings instead.
"""

from __future__ import annotations


class StatementError(Exception):
    """Base class for fatal statement-processing failures."""

    kind = "statement"
    http_status = 500


class InputValidationError(StatementError):
    """The uploaded document is empty, of the wrong type, or too large."""

    kind = "input_validation"
    http_status = 400


class ExtractionError(StatementError):
    """Text extraction failed or produced unusable text."""

    kind = "extraction"
    http_status = 422


class NoRecordsError(StatementError):
    """Parsing finished but found no transactions."""

    kind = "no_records"
    http_status = 422


_PREFIXES = {
    InputValidationError: "Upload Error",
    ExtractionError: "Extraction Error",
    NoRecordsError: "No Transactions",
}


def user_message(error: BaseException) -> str:
    """Render *error* as a message suitable for showing to the user."""
    for cls, prefix in _PREFIXES.items():
        if isinstance(error, cls):
            return f"{prefix}: {error}"
    if isinstance(error, StatementError):
        return f"Statement Error: {error}"
    return (
        "An unexpected error occurred. Please try again or report the problem "
        "if it persists."
    )
