"""Record extraction strategies, strictest first.

Each strategy is a pure function ``(lines, context) -> StrategyResult`` over
the trimmed, non-empty lines of a statement.  They differ only in how a line
qualifies as a transaction and how its description is cut out:

- :func:`date_at_start` -- the line starts with a date and has a
  transaction keyword or an amount.  The description is the first column
  of the tabular layout (columns are separated by runs of 2+ spaces).
- :func:`date_anywhere` -- a date somewhere in the line plus a transaction
  keyword.  The description is the line minus all dates and amounts.
- :func:`keyword_with_nearby_date` -- a transaction keyword alone; the date
  is borrowed from the closest lines around it.

In every strategy the amount is the last amount on the line, and lines
without an amount are dropped with a warning.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass

from statement_tracker.categorizer import classify_category, classify_direction
from statement_tracker.models import (
    UNKNOWN_DESCRIPTION,
    CategoryConfig,
    ParserSettings,
    Record,
    StrategyResult,
    generate_record_id,
)
from statement_tracker.parsers.amounts import AMOUNT_RE, find_amounts, last_amount, parse_amount
from statement_tracker.parsers.lines import (
    clean_description,
    find_date,
    is_excluded,
    leading_date,
    strip_dates_and_amounts,
)

logger = logging.getLogger(__name__)

COLUMN_SEPARATOR_RE = re.compile(r"\s{2,}|\t+")


@dataclass
class ExtractionContext:
    """Read-only inputs shared by every strategy during one extraction.

    Attributes:
        settings: Parser vocabulary and limits.
        categories: Category snapshot used to classify each record.
        deadline: ``time.monotonic()`` value after which scanning stops,
            or ``None`` for no limit.
    """

    settings: ParserSettings
    categories: CategoryConfig
    deadline: float | None = None

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() > self.deadline

    def has_keyword(self, line: str) -> bool:
        upper = line.upper()
        return any(keyword.upper() in upper for keyword in self.settings.transaction_keywords)


# ---------------------------------------------------------------------------
# Shared record building
# ---------------------------------------------------------------------------


def _build_record(
    line: str,
    record_date: str,
    description: str,
    context: ExtractionContext,
) -> Record | None:
    """Turn one qualifying line into a Record, or None if it has no amount."""
    amount_text = last_amount(line)
    if amount_text is None:
        return None

    amount = parse_amount(amount_text)
    description = clean_description(description) or UNKNOWN_DESCRIPTION
    direction = classify_direction(line, context.settings.income_keywords)
    category = classify_category(description, context.categories, direction)

    return Record(
        record_id=generate_record_id(record_date, description, amount),
        date=record_date,
        description=description,
        amount=amount,
        direction=direction,
        category=category,
        raw_text=line,
    )


def _table_description(remainder: str) -> str:
    """Pick the description column from the text following a leading date.

    Takes the first column that is not just an amount.  If there is none,
    falls back to everything before the last amount, then to the whole
    remainder.
    """
    for part in COLUMN_SEPARATOR_RE.split(remainder):
        part = part.strip()
        if part and not AMOUNT_RE.fullmatch(part):
            return part

    amounts = find_amounts(remainder)
    if amounts:
        before = remainder[: remainder.rfind(amounts[-1])].strip()
        if before:
            return before
    return remainder


def _scan(
    name: str,
    lines: list[str],
    context: ExtractionContext,
    qualify,
) -> StrategyResult:
    """Run *qualify* over *lines* and collect records.

    *qualify* is called as ``qualify(index, line)`` for every non-excluded
    line and returns ``(date, description)`` for a candidate line, or
    ``None`` to pass over it.
    """
    result = StrategyResult()

    for index, line in enumerate(lines):
        if context.expired():
            result.exhausted = True
            result.warnings.append(
                f"{name}: scan time budget exhausted at line {index + 1} of {len(lines)}"
            )
            logger.warning("%s: scan time budget exhausted at line %d", name, index + 1)
            break

        if is_excluded(line):
            logger.debug("%s: skipping header/balance line %d: %r", name, index + 1, line)
            continue

        candidate = qualify(index, line)
        if candidate is None:
            continue

        result.matched += 1
        record_date, description = candidate
        record = _build_record(line, record_date, description, context)
        if record is None:
            result.warnings.append(f"line {index + 1}: no amount found, skipped: {line!r}")
            logger.debug("%s: no amount on line %d: %r", name, index + 1, line)
            continue

        logger.debug("%s: parsed line %d as %s", name, index + 1, record.description)
        result.records.append(record)

    logger.info(
        "%s: %d candidate line(s), %d record(s)", name, result.matched, len(result.records)
    )
    return result


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def date_at_start(lines: list[str], context: ExtractionContext) -> StrategyResult:
    """Strategy A: lines that begin with a date (tabular statement layout)."""

    def qualify(index: int, line: str) -> tuple[str, str] | None:
        found = leading_date(line)
        if found is None:
            return None
        if not (context.has_keyword(line) or AMOUNT_RE.search(line)):
            return None
        record_date, end = found
        return record_date, _table_description(line[end:].strip())

    return _scan("date_at_start", lines, context, qualify)


def date_anywhere(lines: list[str], context: ExtractionContext) -> StrategyResult:
    """Strategy B: a date anywhere in the line plus a transaction keyword."""

    def qualify(index: int, line: str) -> tuple[str, str] | None:
        if not context.has_keyword(line):
            return None
        record_date = find_date(line)
        if record_date is None:
            return None
        return record_date, strip_dates_and_amounts(line)

    return _scan("date_anywhere", lines, context, qualify)


def find_nearby_date(lines: list[str], index: int, window: int) -> str | None:
    """Return the first date within *window* lines before or after *index*.

    Lines are searched top to bottom across the window, so an earlier date
    is preferred over a later one.
    """
    start = max(0, index - window)
    end = min(len(lines), index + window + 1)
    for line in lines[start:end]:
        found = find_date(line)
        if found is not None:
            return found
    return None


def keyword_with_nearby_date(lines: list[str], context: ExtractionContext) -> StrategyResult:
    """Strategy C: a transaction keyword, dated from neighbouring lines."""
    window = context.settings.neighbor_window

    def qualify(index: int, line: str) -> tuple[str, str] | None:
        if not context.has_keyword(line):
            return None
        record_date = find_nearby_date(lines, index, window)
        if record_date is None:
            logger.debug("keyword_with_nearby_date: no date near line %d", index + 1)
            return None
        return record_date, strip_dates_and_amounts(line)

    return _scan("keyword_with_nearby_date", lines, context, qualify)
