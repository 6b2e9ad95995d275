"""Configuration loading, writing, and project initialization.

Reads TOML config files using stdlib ``tomllib`` and writes them using
``tomli_w``.  Depends only on ``models.py``.

Category edits (:func:`add_category`, :func:`update_category`,
:func:`delete_category`) never mutate the snapshot they are given; they
return a new :class:`CategoryConfig` that the caller saves with
:func:`save_categories`.  A classification that is already running keeps
reading the snapshot it started with.
"""

from __future__ import annotations

import re
import sys
from dataclasses import replace
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from statement_tracker.models import DIRECTIONS, AppConfig, Category, CategoryConfig, ParserSettings

# ---------------------------------------------------------------------------
# Default file content
# ---------------------------------------------------------------------------

_DEFAULT_CONFIG_TOML = """\
# Statement Tracker configuration

[general]
store_dir = "store"
output_dir = "output"
max_upload_mb = 10

[parser]
# Terms that mark a line as a money movement.
transaction_keywords = [
    "PAIEMENT", "VIREMENT", "VIRT", "RETRAIT", "FACTURE", "CARTE",
    "BIM", "WIN", "INWI", "RESTAURANT", "STORE", "CLUB", "BANQUE",
    "RECU", "EMIS", "NATIONAL", "INTERNATIONAL",
]
# Phrases that mark a record as money received (IN).
income_keywords = [
    "VIREMENT RECU", "DEPOT", "CREDIT", "SALAIRE",
    "TRANSFER RECEIVED", "DEPOSIT", "SALARY",
]
# Phrases expected in a supported statement (advisory only).
issuer_keywords = ["CIH", "CREDIT IMMOBILIER", "RELEVE", "COMPTE", "SOLDE"]
neighbor_window = 3
min_text_length = 100
scan_budget_seconds = 30.0
"""

_DEFAULT_CATEGORIES_TOML = """\
# Category list. Order is priority: the first category with a keyword
# found in a description wins.

[defaults]
out = "other_expense"
in = "other_income"

[[categories]]
id = "internet_payment"
name = "Internet Payment"
color = "#8B5CF6"
keywords = ["PAIEMENT INTERNET", "SPOTIFY", "NETFLIX", "AMAZON", "GOOGLE", "APPLE.COM"]
description = "Online purchases and subscriptions"
applicable_for = ["OUT"]

[[categories]]
id = "shopping"
name = "Shopping"
color = "#3B82F6"
keywords = ["BIM", "MARJANE", "CARREFOUR", "ACIMA", "LABEL VIE", "ZARA", "DECATHLON"]
description = "Supermarkets and retail"
applicable_for = ["OUT"]

[[categories]]
id = "restaurants"
name = "Restaurants"
color = "#F59E0B"
keywords = ["RESTAURANT", "CAFE", "SUSHI", "PIZZA", "MCDONALD", "GLOVO"]
applicable_for = ["OUT"]

[[categories]]
id = "telecom"
name = "Telecom"
color = "#06B6D4"
keywords = ["INWI", "MAROC TELECOM", "ORANGE"]
applicable_for = ["OUT"]

[[categories]]
id = "cash_withdrawal"
name = "Cash Withdrawal"
color = "#10B981"
keywords = ["RETRAIT", "DISTRIBUTEUR", "GAB"]
applicable_for = ["OUT"]

[[categories]]
id = "bank_fees"
name = "Bank Fees"
color = "#EF4444"
keywords = ["FRAIS", "COMMISSION", "AGIOS", "COTISATION", "TENUE DE COMPTE"]
applicable_for = ["OUT"]

[[categories]]
id = "salary"
name = "Salary"
color = "#22C55E"
keywords = ["SALAIRE", "SALARY"]
applicable_for = ["IN"]

[[categories]]
id = "transfer"
name = "Transfer"
color = "#6366F1"
keywords = ["VIREMENT", "VIRT", "TRANSFER"]
description = "Transfers sent or received"

[[categories]]
id = "other_expense"
name = "Other Expense"
color = "#6B7280"
keywords = []
applicable_for = ["OUT"]

[[categories]]
id = "other_income"
name = "Other Income"
color = "#9CA3AF"
keywords = []
applicable_for = ["IN"]
"""

# Directories that ``initialize`` creates.
_INIT_DIRS = ["store", "output"]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(root: Path) -> AppConfig:
    """Load ``config.toml`` from *root* and return an :class:`AppConfig`.

    Keys missing from the file take their built-in defaults.

    Raises:
        FileNotFoundError: If ``config.toml`` does not exist.
    """
    data = _read_toml(root / "config.toml")

    general = data.get("general", {})
    parser = data.get("parser", {})
    defaults = ParserSettings()

    settings = ParserSettings(
        transaction_keywords=list(parser.get("transaction_keywords", defaults.transaction_keywords)),
        income_keywords=list(parser.get("income_keywords", defaults.income_keywords)),
        issuer_keywords=list(parser.get("issuer_keywords", defaults.issuer_keywords)),
        neighbor_window=parser.get("neighbor_window", defaults.neighbor_window),
        min_text_length=parser.get("min_text_length", defaults.min_text_length),
        scan_budget_seconds=parser.get("scan_budget_seconds", defaults.scan_budget_seconds),
    )

    return AppConfig(
        store_dir=general.get("store_dir", "store"),
        output_dir=general.get("output_dir", "output"),
        max_upload_mb=general.get("max_upload_mb", 10),
        parser=settings,
    )


def load_categories(root: Path) -> CategoryConfig:
    """Load ``categories.toml`` and return an ordered category snapshot.

    Raises:
        FileNotFoundError: If ``categories.toml`` does not exist.
        ValueError: If a category restricts itself to an unknown direction.
    """
    data = _read_toml(root / "categories.toml")
    defaults = data.get("defaults", {})

    categories = []
    for entry in data.get("categories", []):
        applicable_for = entry.get("applicable_for")
        if applicable_for:
            _check_directions(applicable_for)
        categories.append(
            Category(
                id=entry.get("id") or category_id_for(entry["name"]),
                name=entry["name"],
                color=entry.get("color", "#6B7280"),
                keywords=tuple(entry.get("keywords", ())),
                description=entry.get("description", ""),
                applicable_for=tuple(applicable_for) if applicable_for else None,
            )
        )

    return CategoryConfig(
        categories=tuple(categories),
        default_out=defaults.get("out", "other_expense"),
        default_in=defaults.get("in", "other_income"),
    )


def save_categories(root: Path, config: CategoryConfig) -> None:
    """Write *config* to ``categories.toml``, replacing its content."""
    payload = {
        "defaults": {"out": config.default_out, "in": config.default_in},
        "categories": [_category_to_toml(c) for c in config.categories],
    }
    header = (
        "# Category list. Order is priority: the first category with a keyword\n"
        "# found in a description wins.\n\n"
    )
    (root / "categories.toml").write_text(header + tomli_w.dumps(payload), encoding="utf-8")


def category_id_for(name: str) -> str:
    """Derive a category ID from its display name: lowercase, spaces to ``_``."""
    return re.sub(r"\s+", "_", name.strip().lower())


def add_category(
    config: CategoryConfig,
    name: str,
    keywords: list[str],
    color: str = "#6B7280",
    description: str = "",
    applicable_for: list[str] | None = None,
) -> tuple[CategoryConfig, Category]:
    """Append a new category at the lowest priority.

    Returns:
        The new snapshot and the created category.

    Raises:
        ValueError: If the derived ID already exists, the name is blank, or
            *applicable_for* names an unknown direction.
    """
    category_id = category_id_for(name)
    if not category_id:
        raise ValueError("Category name must not be empty")
    if config.get(category_id) is not None:
        raise ValueError(f"Category {category_id!r} already exists")
    if applicable_for:
        _check_directions(applicable_for)

    category = Category(
        id=category_id,
        name=name.strip(),
        color=color,
        keywords=_normalize_keywords(keywords),
        description=description,
        applicable_for=tuple(applicable_for) if applicable_for else None,
    )
    return replace(config, categories=config.categories + (category,)), category


def update_category(config: CategoryConfig, category_id: str, **changes) -> CategoryConfig:
    """Return a snapshot with one category's fields changed.

    Accepted fields are ``name``, ``color``, ``keywords``, ``description``,
    and ``applicable_for``.  The ID never changes, even when the name does.
    ``applicable_for=None`` (or an empty list) lifts the direction
    restriction.

    Raises:
        KeyError: If no category has *category_id*.
        ValueError: If a field is not editable or a direction is unknown.
    """
    editable = {"name", "color", "keywords", "description", "applicable_for"}
    unknown = set(changes) - editable
    if unknown:
        raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    if config.get(category_id) is None:
        raise KeyError(category_id)
    if "applicable_for" in changes:
        directions = changes["applicable_for"]
        if directions:
            _check_directions(directions)
        changes["applicable_for"] = tuple(directions) if directions else None
    if "keywords" in changes:
        changes["keywords"] = _normalize_keywords(changes["keywords"])

    categories = tuple(
        replace(c, **changes) if c.id == category_id else c for c in config.categories
    )
    return replace(config, categories=categories)


def delete_category(config: CategoryConfig, category_id: str) -> tuple[CategoryConfig, bool]:
    """Remove a category unless it is one of the two defaults.

    Returns:
        The resulting snapshot and whether anything was deleted.
    """
    if config.is_default(category_id) or config.get(category_id) is None:
        return config, False
    categories = tuple(c for c in config.categories if c.id != category_id)
    return replace(config, categories=categories), True


def initialize(target_dir: Path) -> None:
    """Create the standard directory structure and default config files.

    Idempotent: existing directories are left alone and existing files
    are **not** overwritten.
    """
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    for d in _INIT_DIRS:
        (target_dir / d).mkdir(parents=True, exist_ok=True)

    _write_if_missing(target_dir / "config.toml", _DEFAULT_CONFIG_TOML)
    _write_if_missing(target_dir / "categories.toml", _DEFAULT_CATEGORIES_TOML)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _read_toml(path: Path) -> dict:
    """Read and parse a TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _check_directions(directions: list[str]) -> None:
    bad = [d for d in directions if d not in DIRECTIONS]
    if bad:
        raise ValueError(f"Unknown direction(s): {', '.join(bad)}; expected IN or OUT")


def _normalize_keywords(keywords) -> tuple[str, ...]:
    return tuple(k.strip().upper() for k in keywords if k.strip())


def _category_to_toml(category: Category) -> dict:
    """Serialize a category, leaving out empty optional fields."""
    entry: dict = {
        "id": category.id,
        "name": category.name,
        "color": category.color,
        "keywords": list(category.keywords),
    }
    if category.description:
        entry["description"] = category.description
    if category.applicable_for:
        entry["applicable_for"] = list(category.applicable_for)
    return entry


def _write_if_missing(path: Path, content: str) -> None:
    """Write *content* to *path* only if the file does not already exist."""
    if not path.exists():
        path.write_text(content, encoding="utf-8")
