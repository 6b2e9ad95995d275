"""Result store: saved statement results as JSON files.

Each saved result lives at ``{store_dir}/{result_id}.json``::

    {
        "result_id": "5f2c0d9e1a7b",
        "file_name": "releve-janvier.pdf",
        "saved_at": "2024-02-01T10:15:00.123456+00:00",
        "metadata": {...},
        "result": {"operations": [...], "summary": {...}, ...}
    }

``result`` uses the wire shape from ``export.py`` (plus ``rawText``).
Files that cannot be read are skipped with a warning so one corrupt entry
does not hide the rest.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path

from statement_tracker.export import result_from_wire, result_to_wire
from statement_tracker.models import StatementResult, StoredStatement

logger = logging.getLogger(__name__)

# Result IDs are the first 12 hex digits of a uuid4.
RESULT_ID_RE = re.compile(r"[0-9a-f]{12}")


def save_result(
    store_dir: Path,
    result: StatementResult,
    metadata: dict | None = None,
) -> StoredStatement:
    """Persist *result* under a new ID.

    Creates the store directory if it does not exist.

    Args:
        store_dir: Directory holding saved results.
        result: The statement result to save.
        metadata: Arbitrary JSON-serializable data kept alongside it.

    Returns:
        The stored entry, including its generated ``result_id``.
    """
    store_dir.mkdir(parents=True, exist_ok=True)

    stored = StoredStatement(
        result_id=uuid.uuid4().hex[:12],
        file_name=result.file_name,
        saved_at=datetime.now(timezone.utc).isoformat(timespec="microseconds"),
        result=result,
        metadata=dict(metadata or {}),
    )
    payload = {
        "result_id": stored.result_id,
        "file_name": stored.file_name,
        "saved_at": stored.saved_at,
        "metadata": stored.metadata,
        "result": result_to_wire(result, include_raw=True),
    }
    path = store_dir / f"{stored.result_id}.json"
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.debug("Saved statement result: %s", path)
    return stored


def update_result(store_dir: Path, stored: StoredStatement) -> StoredStatement:
    """Overwrite an existing entry with *stored*'s result and metadata.

    Raises:
        KeyError: If no entry exists for ``stored.result_id``.
    """
    path = _entry_path(store_dir, stored.result_id)
    if path is None or not path.is_file():
        raise KeyError(stored.result_id)
    payload = {
        "result_id": stored.result_id,
        "file_name": stored.file_name,
        "saved_at": stored.saved_at,
        "metadata": stored.metadata,
        "result": result_to_wire(stored.result, include_raw=True),
    }
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return stored


def get_result(store_dir: Path, result_id: str) -> StoredStatement | None:
    """Load the entry with *result_id*, or ``None`` if it does not exist."""
    path = _entry_path(store_dir, result_id)
    return None if path is None else _read_entry(path)


def get_result_by_file_name(store_dir: Path, file_name: str) -> StoredStatement | None:
    """Return the most recently saved entry for *file_name*, if any."""
    for entry in _all_entries(store_dir):
        if entry.file_name == file_name:
            return entry
    return None


def list_results(store_dir: Path, limit: int = 50, offset: int = 0) -> list[StoredStatement]:
    """Return saved entries, newest first, paginated by *limit*/*offset*."""
    return _all_entries(store_dir)[offset : offset + limit]


def count_results(store_dir: Path) -> int:
    return len(_all_entries(store_dir))


def search_results(store_dir: Path, term: str, limit: int = 20) -> list[StoredStatement]:
    """Find entries whose file name or records mention *term*.

    Matching is a case-insensitive substring test against the file name and
    each record's description and category.  Newest first.
    """
    needle = term.lower()
    matches: list[StoredStatement] = []
    for entry in _all_entries(store_dir):
        haystacks = [entry.file_name]
        for record in entry.result.records:
            haystacks.append(record.description)
            haystacks.append(record.category)
        if any(needle in h.lower() for h in haystacks):
            matches.append(entry)
            if len(matches) >= limit:
                break
    return matches


def delete_result(store_dir: Path, result_id: str) -> bool:
    """Delete one entry.  Returns False if it did not exist."""
    path = _entry_path(store_dir, result_id)
    if path is None or not path.is_file():
        return False
    path.unlink()
    logger.debug("Deleted statement result: %s", path)
    return True


def delete_results_by_file_name(store_dir: Path, file_name: str) -> int:
    """Delete every entry saved for *file_name*.  Returns how many were removed."""
    removed = 0
    for entry in _all_entries(store_dir):
        if entry.file_name == file_name and delete_result(store_dir, entry.result_id):
            removed += 1
    return removed


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _entry_path(store_dir: Path, result_id: str) -> Path | None:
    """Path of the entry file for *result_id*, or ``None`` for a malformed ID."""
    if not RESULT_ID_RE.fullmatch(result_id):
        logger.warning("Rejected malformed result id: %r", result_id)
        return None
    return store_dir / f"{result_id}.json"


def _read_entry(path: Path) -> StoredStatement | None:
    if not path.is_file():
        return None

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return StoredStatement(
            result_id=raw["result_id"],
            file_name=raw.get("file_name", ""),
            saved_at=raw.get("saved_at", ""),
            result=result_from_wire(raw.get("result", {})),
            metadata=raw.get("metadata", {}),
        )
    except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
        logger.warning("Could not read statement result %s: %s", path, exc)
        return None


def _all_entries(store_dir: Path) -> list[StoredStatement]:
    """Every readable entry, newest first."""
    if not store_dir.is_dir():
        return []
    entries = [
        entry
        for entry in (_read_entry(p) for p in sorted(store_dir.glob("*.json")))
        if entry is not None
    ]
    entries.sort(key=lambda e: e.saved_at, reverse=True)
    return entries
