"""Core data models for Statement Tracker.

This module defines all dataclasses and utility functions used throughout the
parser, categorizer, and processor. It has zero internal imports -- everything
depends on it, but it depends on nothing within the package.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from decimal import Decimal

# Internal direction vocabulary.
IN = "IN"
OUT = "OUT"
DIRECTIONS = (IN, OUT)

# External (wire) direction vocabulary.
WIRE_STATUS = {IN: "Incoming", OUT: "Outgoing"}
STATUS_TO_DIRECTION = {v: k for k, v in WIRE_STATUS.items()}

UNKNOWN_DESCRIPTION = "Unknown Operation"


def generate_record_id(record_date: str, description: str, amount: Decimal) -> str:
    """Generate a deterministic record ID from ``(date, description, amount)``.

    The ID is ``"txn_"`` followed by the first 12 hex characters of a SHA-256
    hash of the pipe-delimited concatenation of the three fields.  Identical
    input always yields the same ID.  Two genuinely distinct transactions on
    the same day with the same description and amount collide; that is a
    known limitation of statement text, which carries no row identity.

    Args:
        record_date: Date string in ``DD/MM/YYYY`` form.
        description: Cleaned description text.
        amount: Transaction amount.

    Returns:
        A string such as ``"txn_3f0a1b2c4d5e"``.
    """
    raw = f"{record_date}|{description}|{amount}"
    return "txn_" + hashlib.sha256(raw.encode()).hexdigest()[:12]


@dataclass
class Record:
    """A single transaction extracted from statement text.

    Attributes:
        record_id: Deterministic ID, see :func:`generate_record_id`.
        date: Transaction date as ``DD/MM/YYYY``.
        description: Whitespace-normalized operation text.  Never empty;
            :data:`UNKNOWN_DESCRIPTION` when nothing usable was found.
        amount: Non-negative amount with two decimal places.
        direction: :data:`IN` (money received) or :data:`OUT` (money spent).
        category: Category ID assigned by the categorizer.
        raw_text: The source line the record was built from.
    """

    record_id: str
    date: str
    description: str
    amount: Decimal
    direction: str = OUT
    category: str = ""
    raw_text: str = ""


@dataclass(frozen=True)
class Category:
    """A keyword-based classification bucket.

    A record matches when its description contains any keyword
    (case-insensitive substring).  ``applicable_for`` restricts the
    category to the listed directions; ``None`` means both.  Instances are
    immutable so a :class:`CategoryConfig` snapshot cannot change under a
    running classification.
    """

    id: str
    name: str
    color: str = "#6B7280"
    keywords: tuple[str, ...] = ()
    description: str = ""
    applicable_for: tuple[str, ...] | None = None

    def applies_to(self, direction: str | None) -> bool:
        """Return True if this category may be assigned to *direction*."""
        if direction is None or not self.applicable_for:
            return True
        return direction in self.applicable_for


@dataclass(frozen=True)
class CategoryConfig:
    """An ordered, read-only snapshot of the category list.

    List order is classification priority: the first category with a
    matching keyword wins.  Edits go through the functions in
    ``config.py``, which return a new snapshot instead of mutating this one.

    Attributes:
        categories: Categories in priority order.
        default_out: Category ID used for unmatched OUT records.
        default_in: Category ID used for unmatched IN records.
    """

    categories: tuple[Category, ...] = ()
    default_out: str = "other_expense"
    default_in: str = "other_income"

    def default_for(self, direction: str | None) -> str:
        """Return the fallback category ID for *direction* (OUT if unknown)."""
        if direction == IN:
            return self.default_in
        return self.default_out

    def get(self, category_id: str) -> Category | None:
        """Look up a category by ID."""
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def is_default(self, category_id: str) -> bool:
        return category_id in (self.default_out, self.default_in)


@dataclass
class ParserSettings:
    """Vocabulary and limits used by the statement-text parser.

    Attributes:
        transaction_keywords: Terms that mark a line as a money movement
            (payment, transfer, withdrawal, card, merchant brands).
        income_keywords: Phrases that flip a record's direction to IN.
        issuer_keywords: Phrases expected somewhere in a supported
            statement.  Their absence is only logged.
        neighbor_window: Lines searched before and after a keyword-only
            line for a date.
        min_text_length: Extracted text shorter than this is rejected.
        scan_budget_seconds: Wall-clock budget for the whole strategy
            cascade.  ``None`` or ``0`` disables the check.
    """

    transaction_keywords: list[str] = field(
        default_factory=lambda: [
            "PAIEMENT", "VIREMENT", "VIRT", "RETRAIT", "FACTURE", "CARTE",
            "BIM", "WIN", "INWI", "RESTAURANT", "STORE", "CLUB", "BANQUE",
            "RECU", "EMIS", "NATIONAL", "INTERNATIONAL",
        ]
    )
    income_keywords: list[str] = field(
        default_factory=lambda: [
            "VIREMENT RECU", "DEPOT", "CREDIT", "SALAIRE",
            "TRANSFER RECEIVED", "DEPOSIT", "SALARY",
        ]
    )
    issuer_keywords: list[str] = field(
        default_factory=lambda: ["CIH", "CREDIT IMMOBILIER", "RELEVE", "COMPTE", "SOLDE"]
    )
    neighbor_window: int = 3
    min_text_length: int = 100
    scan_budget_seconds: float | None = 30.0


@dataclass
class AppConfig:
    """Top-level application configuration loaded from ``config.toml``.

    Attributes:
        store_dir: Directory holding saved statement results.
        output_dir: Directory for CSV exports.
        max_upload_mb: Largest accepted statement file, in megabytes.
        parser: Parser vocabulary and limits.
    """

    store_dir: str = "store"
    output_dir: str = "output"
    max_upload_mb: int = 10
    parser: ParserSettings = field(default_factory=ParserSettings)


@dataclass
class StrategyResult:
    """Return type for every extraction strategy.

    Attributes:
        records: Records built by the strategy, in line order.
        matched: Number of lines that qualified as candidates, whether or
            not a record could be built from them.
        warnings: Diagnostics for candidate lines that were dropped, and
            for an exhausted time budget.
        exhausted: True if the time budget ran out during the scan.
    """

    records: list[Record] = field(default_factory=list)
    matched: int = 0
    warnings: list[str] = field(default_factory=list)
    exhausted: bool = False


@dataclass
class StatementSummary:
    """Aggregate totals over a statement's records."""

    total_records: int = 0
    total_out: Decimal = Decimal("0.00")
    total_in: Decimal = Decimal("0.00")
    net: Decimal = Decimal("0.00")


@dataclass
class StatementResult:
    """Full output of processing one statement document.

    Attributes:
        records: Categorized records.
        summary: Count and totals.
        file_name: Sanitized source file name.
        total_pages: Page count reported by the text extractor.
        parse_date: ISO-8601 timestamp of when the document was parsed.
        warnings: Non-fatal diagnostics collected while parsing.
    """

    records: list[Record] = field(default_factory=list)
    summary: StatementSummary = field(default_factory=StatementSummary)
    file_name: str = ""
    total_pages: int = 0
    parse_date: str = ""
    warnings: list[str] = field(default_factory=list)


@dataclass
class StoredStatement:
    """A statement result as held by the persistence layer."""

    result_id: str
    file_name: str
    saved_at: str
    result: StatementResult
    metadata: dict = field(default_factory=dict)


@dataclass
class CategoryStats:
    """Per-category aggregate for summaries."""

    category_id: str
    name: str
    color: str
    count: int
    total: Decimal
    percentage: float
