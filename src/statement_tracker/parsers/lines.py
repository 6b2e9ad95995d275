"""Line classification and date helpers for statement text.

A statement's extracted text mixes transaction rows with column headers,
legal boilerplate, page numbers, and running-balance rows.  The predicates
here decide which lines are noise before any extraction strategy looks at
them.
"""

from __future__ import annotations

import re

from statement_tracker.parsers.amounts import AMOUNT_RE, has_amount

# DD/MM/YYYY with "/", "-" or "." as separator (the same one twice).
DATE_RE = re.compile(r"(?<!\d)(\d{2})([/.\-])(\d{2})\2(\d{4})(?!\d)")
LEADING_DATE_RE = re.compile(r"^\s*" + DATE_RE.pattern)

HEADER_PATTERNS = [
    re.compile(r"^DATES?\s+(?:OPERATION|DESCRIPTION)", re.IGNORECASE),
    re.compile(r"^OPER\s+VALEUR", re.IGNORECASE),
    re.compile(r"NOUS AVONS L'HONNEUR", re.IGNORECASE),
    re.compile(r"CENTRE RELATION", re.IGNORECASE),
    re.compile(r"MEDIATEUR", re.IGNORECASE),
    re.compile(r"SAUF ERREUR", re.IGNORECASE),
    re.compile(r"SOUSCRIVEZ", re.IGNORECASE),
    re.compile(r"^TEL\s*:", re.IGNORECASE),
    re.compile(r"^EMAIL\s*:", re.IGNORECASE),
    re.compile(r"^PAGE\s+\d+\s*(?:/|SUR|OF)\s*\d+$", re.IGNORECASE),
    re.compile(r"^\d{4}/\d{4}$"),  # page numbers like 0001/0002
    re.compile(r"^[\s\-=_]{5,}$"),  # separator-only lines
]

BALANCE_WORDS = ("SOLDE", "TOTAL", "BALANCE")

MIN_LINE_LENGTH = 8


def is_header_line(line: str) -> bool:
    """Return True for boilerplate: headers, disclaimers, page numbers.

    Lines shorter than eight characters are also treated as noise unless
    they contain an amount.
    """
    if any(pattern.search(line) for pattern in HEADER_PATTERNS):
        return True
    return len(line) < MIN_LINE_LENGTH and not has_amount(line)


def is_balance_line(line: str) -> bool:
    """Return True if *line* mentions a balance or total."""
    upper = line.upper()
    return any(word in upper for word in BALANCE_WORDS)


def is_excluded(line: str) -> bool:
    return is_header_line(line) or is_balance_line(line)


def _valid(match: re.Match) -> bool:
    day, month = int(match.group(1)), int(match.group(3))
    return 1 <= day <= 31 and 1 <= month <= 12


def _normalize(match: re.Match) -> str:
    return f"{match.group(1)}/{match.group(3)}/{match.group(4)}"


def leading_date(line: str) -> tuple[str, int] | None:
    """Return ``(DD/MM/YYYY, end_offset)`` if *line* starts with a date.

    Leading whitespace is tolerated.  A token with an impossible day or
    month does not count as a date.
    """
    match = LEADING_DATE_RE.match(line)
    if match is None or not _valid(match):
        return None
    return _normalize(match), match.end()


def find_date(line: str) -> str | None:
    """Return the first valid date anywhere in *line*, normalized."""
    for match in DATE_RE.finditer(line):
        if _valid(match):
            return _normalize(match)
    return None


def has_date(line: str) -> bool:
    return find_date(line) is not None


def strip_dates_and_amounts(line: str) -> str:
    """Remove every date-shaped and amount-shaped substring from *line*."""
    without_dates = DATE_RE.sub(" ", line)
    return AMOUNT_RE.sub(" ", without_dates)


def clean_description(text: str) -> str:
    """Collapse whitespace and strip pipes and dashes from both ends."""
    collapsed = re.sub(r"\s+", " ", text).strip()
    return collapsed.strip("|- ").strip()
