"""Tests for statement_tracker.export — wire shape, CSV export, summary printer.

Covers:
- record_to_wire / result_to_wire: field names, Incoming/Outgoing status,
  optional rawText, summary keys.
- *_from_wire: rebuilding records and results from the wire shape.
- export_csv: column schema, date ordering, directory creation, overwrite.
- print_summary: totals, per-direction category breakdowns, warnings.
"""

from __future__ import annotations

import csv
from decimal import Decimal
from pathlib import Path

import pytest

from statement_tracker.export import (
    CSV_COLUMNS,
    export_csv,
    print_summary,
    record_from_wire,
    record_to_wire,
    result_from_wire,
    result_to_wire,
)
from statement_tracker.models import (
    IN,
    OUT,
    Record,
    StatementResult,
    StatementSummary,
    generate_record_id,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_record(
    record_date: str = "02/01/2024",
    description: str = "PAIEMENT PAR CARTE BIM",
    amount: str = "150.50",
    direction: str = OUT,
    category: str = "shopping",
) -> Record:
    """Build a Record with a deterministic ID."""
    value = Decimal(amount)
    return Record(
        record_id=generate_record_id(record_date, description, value),
        date=record_date,
        description=description,
        amount=value,
        direction=direction,
        category=category,
        raw_text=f"{record_date}  {description}  {amount}",
    )


def _make_result(records: list[Record] | None = None, warnings: list[str] | None = None):
    if records is None:
        records = [
            _make_record(),
            _make_record("03/01/2024", "VIREMENT RECU ACME", "3000.00", IN, "transfer"),
            _make_record("25/01/2024", "RESTAURANT SUSHI", "85.00", OUT, "restaurants"),
        ]
    return StatementResult(
        records=records,
        summary=StatementSummary(
            total_records=3,
            total_out=Decimal("235.50"),
            total_in=Decimal("3000.00"),
            net=Decimal("2764.50"),
        ),
        file_name="releve.pdf",
        total_pages=2,
        parse_date="2024-02-01T10:00:00+00:00",
        warnings=warnings or [],
    )


# ---------------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------------


class TestRecordWire:
    def test_shape(self):
        record = _make_record()
        payload = record_to_wire(record)

        assert payload == {
            "id": record.record_id,
            "date": "02/01/2024",
            "operation": "PAIEMENT PAR CARTE BIM",
            "amount": 150.5,
            "status": "Outgoing",
            "category": "shopping",
        }

    def test_incoming_status(self):
        payload = record_to_wire(_make_record(direction=IN))
        assert payload["status"] == "Incoming"

    def test_include_raw(self):
        payload = record_to_wire(_make_record(), include_raw=True)
        assert payload["rawText"] == "02/01/2024  PAIEMENT PAR CARTE BIM  150.50"

    def test_from_wire(self):
        record = _make_record(direction=IN)
        rebuilt = record_from_wire(record_to_wire(record, include_raw=True))
        assert rebuilt == record

    def test_from_wire_unknown_status(self):
        payload = record_to_wire(_make_record())
        payload["status"] = "Sideways"
        with pytest.raises(KeyError):
            record_from_wire(payload)


class TestResultWire:
    def test_shape(self):
        payload = result_to_wire(_make_result(warnings=["line 9: no amount found"]))

        assert payload["fileName"] == "releve.pdf"
        assert payload["totalPages"] == 2
        assert payload["parseDate"] == "2024-02-01T10:00:00+00:00"
        assert payload["summary"] == {
            "totalTransactions": 3,
            "totalDebits": 235.5,
            "totalCredits": 3000.0,
            "balance": 2764.5,
        }
        assert len(payload["operations"]) == 3
        assert "rawText" not in payload["operations"][0]
        assert payload["warnings"] == ["line 9: no amount found"]

    def test_from_wire(self):
        result = _make_result()
        rebuilt = result_from_wire(result_to_wire(result, include_raw=True))
        assert rebuilt == result


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------


class TestExportCsv:
    def test_columns_and_rows(self, tmp_path: Path):
        path = export_csv(_make_result().records, tmp_path, "releve")

        assert path == tmp_path / "releve.csv"
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            assert reader.fieldnames == CSV_COLUMNS
            rows = list(reader)

        assert len(rows) == 3
        assert rows[0]["amount"] == "150.50"
        assert rows[1]["status"] == "Incoming"

    def test_sorted_by_real_date(self, tmp_path: Path):
        """DD/MM/YYYY must sort chronologically, not as text."""
        records = [
            _make_record("01/02/2024", "B", "1.00"),
            _make_record("15/01/2024", "A", "1.00"),
        ]
        path = export_csv(records, tmp_path, "sorted")
        with open(path, newline="", encoding="utf-8") as f:
            dates = [row["date"] for row in csv.DictReader(f)]
        assert dates == ["15/01/2024", "01/02/2024"]

    def test_creates_directory_and_overwrites(self, tmp_path: Path):
        output_dir = tmp_path / "nested" / "output"
        export_csv(_make_result().records, output_dir, "releve")
        path = export_csv([_make_record()], output_dir, "releve")

        with open(path, newline="", encoding="utf-8") as f:
            assert len(list(csv.DictReader(f))) == 1


# ---------------------------------------------------------------------------
# Summary printer
# ---------------------------------------------------------------------------


class TestPrintSummary:
    def test_totals(self, capsys, category_config):
        print_summary(_make_result(), category_config)
        output = capsys.readouterr().out

        assert "== Statement Summary: releve.pdf ==" in output
        assert "Pages:    2" in output
        assert "Records:  3" in output
        assert "Out:      235.50" in output
        assert "In:       3,000.00" in output
        assert "Net:      2,764.50" in output

    def test_breakdowns(self, capsys, category_config):
        print_summary(_make_result(), category_config)
        output = capsys.readouterr().out

        spending = output.split("Spending by category:")[1].split("Income by category:")[0]
        assert "Shopping:" in spending
        assert "Restaurants:" in spending
        assert "Transfer:" not in spending
        income = output.split("Income by category:")[1]
        assert "Transfer:" in income

    def test_warnings(self, capsys, category_config):
        print_summary(_make_result(warnings=["something odd"]), category_config)
        output = capsys.readouterr().out

        assert "Warnings: 1" in output
        assert "  - something odd" in output

    def test_no_warnings_section_when_clean(self, capsys, category_config):
        print_summary(_make_result(), category_config)
        assert "Warnings" not in capsys.readouterr().out
