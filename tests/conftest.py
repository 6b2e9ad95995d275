"""Shared pytest fixtures for Statement Tracker tests.

Provides reusable fixtures for:
- statement_text: realistic extracted text of a one-page CIH statement.
- category_config: the default category list, loaded from the TOML that
  ``initialize`` writes.
- settings: default parser settings with the time budget disabled.
- FakeExtractor: a stand-in for the PDF text extractor.
- tmp_project_dir: a temporary initialized project directory.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from statement_tracker.config import initialize, load_categories
from statement_tracker.extraction import ExtractedText
from statement_tracker.models import CategoryConfig, ParserSettings

# ---------------------------------------------------------------------------
# Sample statement text
# ---------------------------------------------------------------------------

STATEMENT_HEADER = """\
CREDIT IMMOBILIER ET HOTELIER
RELEVE DE COMPTE
Compte: 123456789
Periode: 01/01/2024 au 31/01/2024

DATE        OPERATION                                    DEBIT      CREDIT
"""

STATEMENT_ROWS = """\
01/01/2024  SOLDE PRECEDENT                                        5000.00
02/01/2024  PAIEMENT PAR CARTE 4112 BIM 1714           150.50
03/01/2024  VIREMENT RECU DE ENTREPRISE ABC                        3000.00
10/01/2024  RETRAIT DISTRIBUTEUR ATM AGDAL              500.00
15/01/2024  PAIEMENT PAR CARTE 4112 MARJANE RABAT      245.75
25/01/2024  PAIEMENT PAR CARTE 4112 RESTAURANT SUSHI    85.00
"""

STATEMENT_FOOTER = """\
SAUF ERREUR OU OMISSION DE NOTRE PART
0001/0001
"""

STATEMENT_TEXT = STATEMENT_HEADER + STATEMENT_ROWS + STATEMENT_FOOTER


class FakeExtractor:
    """Text extractor returning canned text, or raising a canned error."""

    def __init__(self, text: str = STATEMENT_TEXT, page_count: int = 1, error=None):
        self.text = text
        self.page_count = page_count
        self.error = error
        self.calls = 0

    def extract(self, data: bytes) -> ExtractedText:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return ExtractedText(text=self.text, page_count=self.page_count)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def statement_text() -> str:
    """Extracted text of a one-page statement with five transactions."""
    return STATEMENT_TEXT


@pytest.fixture
def statement_lines() -> list[str]:
    """STATEMENT_TEXT as trimmed, non-empty lines."""
    return [line.strip() for line in STATEMENT_TEXT.splitlines() if line.strip()]


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """A temporary directory initialized with the default project layout."""
    project = tmp_path / "statement-project"
    initialize(project)
    return project


@pytest.fixture
def category_config(tmp_project_dir: Path) -> CategoryConfig:
    """The default category list as written by ``initialize``."""
    return load_categories(tmp_project_dir)


@pytest.fixture
def settings() -> ParserSettings:
    """Default parser settings without a scan time budget."""
    return ParserSettings(scan_budget_seconds=None)


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()
