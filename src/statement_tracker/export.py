"""CSV export, wire serialization, and processing summary printer.

- :func:`record_to_wire` / :func:`result_to_wire` produce the JSON shape the
  dashboard consumes, where direction is spelled ``"Incoming"`` /
  ``"Outgoing"`` instead of ``IN`` / ``OUT``.  The ``*_from_wire``
  functions are their inverses and are used by the result store.
- :func:`export_csv` writes records to a CSV file with a fixed column order.
- :func:`print_summary` prints a human-readable summary to stdout.
"""

from __future__ import annotations

import csv
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from statement_tracker.categorizer import income_breakdown, spending_breakdown
from statement_tracker.models import (
    STATUS_TO_DIRECTION,
    WIRE_STATUS,
    CategoryConfig,
    Record,
    StatementResult,
    StatementSummary,
)

CSV_COLUMNS = [
    "id",
    "date",
    "operation",
    "amount",
    "status",
    "category",
]


# ---------------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------------


def record_to_wire(record: Record, include_raw: bool = False) -> dict:
    """Serialize a record to its JSON wire shape.

    With *include_raw*, the source line is kept under ``rawText`` (the
    result store does this; the dashboard payload does not).
    """
    payload = {
        "id": record.record_id,
        "date": record.date,
        "operation": record.description,
        "amount": float(record.amount),
        "status": WIRE_STATUS[record.direction],
        "category": record.category,
    }
    if include_raw:
        payload["rawText"] = record.raw_text
    return payload


def record_from_wire(payload: dict) -> Record:
    """Rebuild a Record from its wire shape.

    ``rawText`` is not part of the wire shape; a stored ``rawText`` key is
    honoured when present.
    """
    return Record(
        record_id=payload["id"],
        date=payload["date"],
        description=payload["operation"],
        amount=Decimal(str(payload["amount"])).quantize(Decimal("0.01")),
        direction=STATUS_TO_DIRECTION[payload["status"]],
        category=payload.get("category", ""),
        raw_text=payload.get("rawText", ""),
    )


def result_to_wire(result: StatementResult, include_raw: bool = False) -> dict:
    """Serialize a full statement result to its JSON wire shape."""
    summary = result.summary
    return {
        "operations": [record_to_wire(r, include_raw) for r in result.records],
        "totalPages": result.total_pages,
        "fileName": result.file_name,
        "parseDate": result.parse_date,
        "summary": {
            "totalTransactions": summary.total_records,
            "totalDebits": float(summary.total_out),
            "totalCredits": float(summary.total_in),
            "balance": float(summary.net),
        },
        "warnings": list(result.warnings),
    }


def result_from_wire(payload: dict) -> StatementResult:
    summary = payload.get("summary", {})
    return StatementResult(
        records=[record_from_wire(r) for r in payload.get("operations", [])],
        summary=StatementSummary(
            total_records=summary.get("totalTransactions", 0),
            total_out=_money(summary.get("totalDebits", 0)),
            total_in=_money(summary.get("totalCredits", 0)),
            net=_money(summary.get("balance", 0)),
        ),
        file_name=payload.get("fileName", ""),
        total_pages=payload.get("totalPages", 0),
        parse_date=payload.get("parseDate", ""),
        warnings=list(payload.get("warnings", [])),
    )


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------


def export_csv(records: list[Record], output_dir: str | Path, stem: str) -> Path:
    """Write *records* to ``output_dir/{stem}.csv``.

    Rows are sorted by date (oldest first), then amount.  The directory is
    created if needed and an existing file is overwritten.

    Returns:
        The :class:`~pathlib.Path` to the written CSV file.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{stem}.csv"

    ordered = sorted(records, key=lambda r: (_sort_date(r.date), r.amount))

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for record in ordered:
            writer.writerow(
                {
                    "id": record.record_id,
                    "date": record.date,
                    "operation": record.description,
                    "amount": str(record.amount),
                    "status": WIRE_STATUS[record.direction],
                    "category": record.category,
                }
            )

    return output_path


# ---------------------------------------------------------------------------
# Summary printer
# ---------------------------------------------------------------------------


def print_summary(result: StatementResult, categories: CategoryConfig) -> None:
    """Print a human-readable summary of *result* to stdout.

    Includes page and record counts, totals by direction, spending and
    income by category, and any warnings.
    """
    summary = result.summary

    print()
    print(f"== Statement Summary: {result.file_name} ==")
    print(f"Pages:    {result.total_pages}")
    print(f"Records:  {summary.total_records}")
    print(f"Out:      {summary.total_out:,.2f}")
    print(f"In:       {summary.total_in:,.2f}")
    print(f"Net:      {summary.net:,.2f}")

    spending = spending_breakdown(result.records, categories)
    if spending:
        print()
        print("Spending by category:")
        for stat in spending:
            label = stat.name + ":"
            print(f"  {label:<25} {stat.total:>12,.2f}  ({stat.count} txns, {stat.percentage:.1f}%)")

    income = income_breakdown(result.records, categories)
    if income:
        print()
        print("Income by category:")
        for stat in income:
            label = stat.name + ":"
            print(f"  {label:<25} {stat.total:>12,.2f}  ({stat.count} txns)")

    if result.warnings:
        print()
        print(f"Warnings: {len(result.warnings)}")
        for w in result.warnings:
            print(f"  - {w}")

    print()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


def _sort_date(value: str) -> datetime:
    """Sort key for ``DD/MM/YYYY`` strings; unparseable dates sort first."""
    try:
        return datetime.strptime(value, "%d/%m/%Y")
    except ValueError:
        return datetime.min
