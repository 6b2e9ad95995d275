"""Statement-text record extraction.

``STRATEGIES`` maps strategy names to strategy functions in order of
strictness.  :func:`extract_records` runs them in that order and stops at the
first one that produces at least one record, so a looser strategy only ever
sees a statement the stricter ones could not read.  ``get_strategy()``
provides a lookup with a clear error on unknown names.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from statement_tracker.models import CategoryConfig, ParserSettings, StrategyResult
from statement_tracker.parsers.strategies import (
    ExtractionContext,
    date_anywhere,
    date_at_start,
    keyword_with_nearby_date,
)

logger = logging.getLogger(__name__)

Strategy = Callable[[list[str], ExtractionContext], StrategyResult]

STRATEGIES: dict[str, Strategy] = {
    "date_at_start": date_at_start,
    "date_anywhere": date_anywhere,
    "keyword_with_nearby_date": keyword_with_nearby_date,
}


def get_strategy(name: str) -> Strategy:
    """Look up a strategy by name.

    Raises:
        KeyError: If no strategy is registered under the given name.
    """
    return STRATEGIES[name]


def split_lines(text: str) -> list[str]:
    """Split extracted text into trimmed, non-empty lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def extract_records(
    lines: list[str],
    settings: ParserSettings,
    categories: CategoryConfig,
    strategies: dict[str, Strategy] | None = None,
) -> StrategyResult:
    """Extract categorized records from statement lines.

    Args:
        lines: Trimmed, non-empty text lines in document order.
        settings: Parser vocabulary and the scan time budget.
        categories: Category snapshot used for classification.
        strategies: Ordered strategies to try; defaults to ``STRATEGIES``.

    Returns:
        The result of the first strategy that yielded records, with the
        warnings of every strategy that ran.  ``records`` is empty if none
        succeeded.  If the time budget runs out, the records found so far
        are returned and no further strategy is started.
    """
    if strategies is None:
        strategies = STRATEGIES

    deadline = None
    if settings.scan_budget_seconds:
        deadline = time.monotonic() + settings.scan_budget_seconds
    context = ExtractionContext(settings=settings, categories=categories, deadline=deadline)

    logger.info("Looking for transactions in %d line(s)", len(lines))
    combined = StrategyResult()

    for name, strategy in strategies.items():
        result = strategy(lines, context)
        combined.warnings.extend(result.warnings)
        combined.matched += result.matched
        if result.records or result.exhausted:
            combined.records = result.records
            combined.exhausted = result.exhausted
            logger.info("Strategy %s produced %d record(s)", name, len(result.records))
            break
        logger.info("Strategy %s found nothing, trying the next one", name)

    return combined
