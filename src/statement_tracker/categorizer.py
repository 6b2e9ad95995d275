"""Direction and category classification.

This module implements the two classifiers that run on every extracted
record:

1. **Direction** -- a record is IN when its line contains one of the
   configured income phrases, OUT otherwise.  Most statement lines are
   debits, so OUT is the default.

2. **Category** -- case-insensitive substring matching of the record's
   description against each category's keywords.  This is a first-match
   scan: categories are tried in their configured order and the first
   keyword hit wins, regardless of keyword length.  Categories restricted
   to one direction are skipped for the other.  Unmatched records get the
   default category for their direction.

It also carries the helpers that work over already-categorized records:
re-classification after the category list changes, per-category
statistics, and similarity-based suggestions.

Depends on ``models.py`` only.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import replace
from decimal import Decimal

from statement_tracker.models import (
    IN,
    OUT,
    CategoryConfig,
    CategoryStats,
    Record,
)

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY_NAME = "Other"
UNKNOWN_CATEGORY_COLOR = "#6B7280"

SIMILARITY_THRESHOLD = 0.6


# ---------------------------------------------------------------------------
# Direction
# ---------------------------------------------------------------------------


def classify_direction(line: str, income_keywords: list[str]) -> str:
    """Return :data:`IN` if *line* contains an income phrase, else :data:`OUT`."""
    upper = line.upper()
    for keyword in income_keywords:
        if keyword.upper() in upper:
            return IN
    return OUT


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------


def classify_category(
    description: str,
    categories: CategoryConfig,
    direction: str | None = None,
) -> str:
    """Map *description* to a category ID.

    Args:
        description: Free-text operation description.
        categories: Category snapshot; its order is the match priority.
        direction: ``IN``, ``OUT``, or ``None`` to consider every category.

    Returns:
        The first matching category's ID, or the default for *direction*
        (the OUT default when *direction* is ``None``).  Never empty.
    """
    upper = description.upper()
    for category in categories.categories:
        if not category.applies_to(direction):
            continue
        for keyword in category.keywords:
            if keyword and keyword.upper() in upper:
                return category.id
    return categories.default_for(direction)


def reclassify(records: list[Record], categories: CategoryConfig) -> list[Record]:
    """Return copies of *records* with categories re-derived from *categories*.

    Running this twice with the same snapshot yields the same categories.
    """
    updated: list[Record] = []
    changed = 0
    for record in records:
        category = classify_category(record.description, categories, record.direction)
        if category != record.category:
            changed += 1
        updated.append(replace(record, category=category))
    logger.info("Reclassified %d record(s), %d changed", len(records), changed)
    return updated


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


def category_stats(records: list[Record], categories: CategoryConfig) -> list[CategoryStats]:
    """Aggregate *records* per category.

    Returns one entry per category that has at least one record, sorted by
    total amount descending.  Percentages are shares of the grand total.
    Records whose category is not in *categories* are reported under the
    name ``"Other"``.
    """
    counts: Counter[str] = Counter()
    totals: defaultdict[str, Decimal] = defaultdict(Decimal)
    for record in records:
        counts[record.category] += 1
        totals[record.category] += record.amount

    grand_total = sum(totals.values(), Decimal("0"))

    stats: list[CategoryStats] = []
    for category_id, count in counts.items():
        category = categories.get(category_id)
        total = totals[category_id]
        percentage = float(total / grand_total * 100) if grand_total > 0 else 0.0
        stats.append(
            CategoryStats(
                category_id=category_id,
                name=category.name if category else UNKNOWN_CATEGORY_NAME,
                color=category.color if category else UNKNOWN_CATEGORY_COLOR,
                count=count,
                total=total,
                percentage=percentage,
            )
        )

    stats.sort(key=lambda s: s.total, reverse=True)
    return stats


def spending_breakdown(records: list[Record], categories: CategoryConfig) -> list[CategoryStats]:
    """Category statistics over OUT records only."""
    return category_stats([r for r in records if r.direction == OUT], categories)


def income_breakdown(records: list[Record], categories: CategoryConfig) -> list[CategoryStats]:
    """Category statistics over IN records only."""
    return category_stats([r for r in records if r.direction == IN], categories)


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


def _similarity(a: str, b: str) -> float:
    """Jaccard similarity of the whitespace-separated word sets of *a* and *b*."""
    words_a = set(a.lower().split())
    words_b = set(b.lower().split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def suggest_category(
    description: str,
    existing: list[Record],
    categories: CategoryConfig,
) -> str:
    """Suggest a category for *description* from similar existing records.

    Records whose description shares more than 60% of its words with
    *description* vote with their category; the most common one wins.
    Without similar records, falls back to keyword classification with no
    direction.
    """
    votes: Counter[str] = Counter()
    for record in existing:
        if _similarity(description, record.description) > SIMILARITY_THRESHOLD:
            votes[record.category] += 1

    if votes:
        return votes.most_common(1)[0][0]
    return classify_category(description, categories)
