"""Click CLI entry point for the statement command.

Handles argument parsing, config loading, and error display. All business
logic is delegated to ``processor``, ``categorizer``, ``config``, ``store``,
and ``export`` modules.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from statement_tracker import __version__
from statement_tracker.models import DIRECTIONS, WIRE_STATUS


def _configure_logging(verbose: bool, debug: bool) -> None:
    """Set up logging based on verbosity flags."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        force=True,
    )


def _load_project(root: Path):
    """Load ``config.toml`` and ``categories.toml`` or exit with a message."""
    from statement_tracker.config import load_categories, load_config

    try:
        return load_config(root), load_categories(root)
    except FileNotFoundError as exc:
        click.echo(
            f"Error: {exc}. Run 'statement init' to create the project structure.",
            err=True,
        )
        sys.exit(1)
    except Exception as exc:
        click.echo(f"Error loading configuration: {exc}", err=True)
        sys.exit(1)


def _store_dir(root: Path, config) -> Path:
    return root / config.store_dir


@click.group()
@click.version_option(version=__version__, prog_name="statement-tracker")
def cli() -> None:
    """Parse bank statement PDFs into categorized transactions."""


@cli.command()
@click.option(
    "--dir", "target_dir", default=".", type=click.Path(), help="Directory to initialize."
)
def init(target_dir: str) -> None:
    """Initialize a new data directory with the standard structure."""
    from statement_tracker.config import initialize

    target = Path(target_dir).resolve()

    try:
        initialize(target)
    except Exception as exc:
        click.echo(f"Error initializing project: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Initialized statement tracker project in {target}")


@cli.command()
@click.argument("pdf", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--save/--no-save", default=True, help="Save the result to the store.")
@click.option("--csv", "write_csv", is_flag=True, default=False, help="Also export a CSV file.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
@click.option("--verbose", is_flag=True, default=False, help="Detailed progress output.")
@click.option("--debug", is_flag=True, default=False, help="Developer-level diagnostics.")
def process(
    pdf: Path, save: bool, write_csv: bool, as_json: bool, verbose: bool, debug: bool
) -> None:
    """Parse a statement PDF and print its summary."""
    _configure_logging(verbose, debug)
    root = Path.cwd()
    config, categories = _load_project(root)

    from statement_tracker.errors import StatementError, user_message
    from statement_tracker.export import export_csv, print_summary, result_to_wire
    from statement_tracker.extraction import PdfPlumberExtractor
    from statement_tracker.processor import process_statement, validate_upload

    try:
        data = pdf.read_bytes()
    except OSError as exc:
        click.echo(f"Error reading {pdf}: {exc}", err=True)
        sys.exit(1)

    try:
        validate_upload(pdf.name, data, max_bytes=config.max_upload_mb * 1024 * 1024)
        result = process_statement(
            data,
            pdf.name,
            extractor=PdfPlumberExtractor(),
            categories=categories,
            settings=config.parser,
        )
    except StatementError as exc:
        click.echo(f"Error: {user_message(exc)}", err=True)
        sys.exit(1)
    except Exception as exc:
        click.echo(f"Error processing statement: {exc}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result_to_wire(result), indent=2, ensure_ascii=False))
    else:
        print_summary(result, categories)

    if write_csv:
        try:
            output_path = export_csv(result.records, root / config.output_dir, pdf.stem)
        except Exception as exc:
            click.echo(f"Error writing output: {exc}", err=True)
            sys.exit(1)
        if verbose:
            click.echo(f"Wrote output to {output_path}")

    if save:
        from statement_tracker.store import save_result

        try:
            stored = save_result(
                _store_dir(root, config),
                result,
                metadata={"original_file_name": pdf.name, "file_size": len(data)},
            )
        except Exception as exc:
            click.echo(f"Error saving result: {exc}", err=True)
            sys.exit(1)
        click.echo(f"Saved as {stored.result_id}")


@cli.command(name="list")
@click.option("--limit", default=50, show_default=True, help="Maximum entries to show.")
@click.option("--offset", default=0, show_default=True, help="Entries to skip.")
def list_command(limit: int, offset: int) -> None:
    """List saved statement results, newest first."""
    root = Path.cwd()
    config, _ = _load_project(root)

    from statement_tracker.store import count_results, list_results

    store_dir = _store_dir(root, config)
    entries = list_results(store_dir, limit=limit, offset=offset)
    if not entries:
        click.echo("No saved statements.")
        return

    total = count_results(store_dir)
    click.echo(f"Showing {len(entries)} of {total} saved statement(s):")
    for entry in entries:
        click.echo(
            f"  {entry.result_id}  {entry.saved_at[:19]}  {entry.file_name}  "
            f"({len(entry.result.records)} txns)"
        )


@cli.command()
@click.argument("result_id")
def show(result_id: str) -> None:
    """Show the transactions of a saved statement result."""
    root = Path.cwd()
    config, categories = _load_project(root)

    from statement_tracker.export import print_summary
    from statement_tracker.store import get_result

    entry = get_result(_store_dir(root, config), result_id)
    if entry is None:
        click.echo(f"Error: no saved statement with id {result_id!r}", err=True)
        sys.exit(1)

    for record in entry.result.records:
        click.echo(
            f"  {record.date}  {record.description:<45.45} "
            f"{record.amount:>12,.2f}  {WIRE_STATUS[record.direction]:<8}  {record.category}"
        )
    print_summary(entry.result, categories)


@cli.command()
@click.argument("term")
@click.option("--limit", default=20, show_default=True, help="Maximum entries to show.")
def search(term: str, limit: int) -> None:
    """Search saved statements by file name or transaction text."""
    root = Path.cwd()
    config, _ = _load_project(root)

    from statement_tracker.store import search_results

    entries = search_results(_store_dir(root, config), term, limit=limit)
    if not entries:
        click.echo(f"No saved statements match {term!r}.")
        return
    for entry in entries:
        click.echo(f"  {entry.result_id}  {entry.saved_at[:19]}  {entry.file_name}")


@cli.command()
@click.argument("result_id")
def delete(result_id: str) -> None:
    """Delete a saved statement result."""
    root = Path.cwd()
    config, _ = _load_project(root)

    from statement_tracker.store import delete_result

    if not delete_result(_store_dir(root, config), result_id):
        click.echo(f"Error: no saved statement with id {result_id!r}", err=True)
        sys.exit(1)
    click.echo(f"Deleted {result_id}")


@cli.command()
@click.argument("result_id")
def reclassify(result_id: str) -> None:
    """Re-run category matching on a saved result with the current categories."""
    root = Path.cwd()
    config, categories = _load_project(root)

    from dataclasses import replace

    from statement_tracker.categorizer import reclassify as reclassify_records
    from statement_tracker.store import get_result, update_result

    store_dir = _store_dir(root, config)
    entry = get_result(store_dir, result_id)
    if entry is None:
        click.echo(f"Error: no saved statement with id {result_id!r}", err=True)
        sys.exit(1)

    before = [r.category for r in entry.result.records]
    records = reclassify_records(entry.result.records, categories)
    changed = sum(1 for old, new in zip(before, records) if old != new.category)

    entry.result = replace(entry.result, records=records)
    update_result(store_dir, entry)
    click.echo(f"Reclassified {len(records)} transaction(s), {changed} changed.")


# ---------------------------------------------------------------------------
# statement categories ...
# ---------------------------------------------------------------------------


@cli.group()
def categories() -> None:
    """Manage category keyword rules."""


@categories.command(name="list")
def categories_list() -> None:
    """List categories in priority order."""
    root = Path.cwd()
    _, category_config = _load_project(root)

    for position, category in enumerate(category_config.categories, start=1):
        marker = " (default)" if category_config.is_default(category.id) else ""
        scope = "/".join(category.applicable_for) if category.applicable_for else "IN/OUT"
        click.echo(f"{position:>3}. {category.id}{marker}  [{scope}]  {category.color}")
        if category.keywords:
            click.echo(f"       keywords: {', '.join(category.keywords)}")


@categories.command(name="add")
@click.argument("name")
@click.option("--keyword", "keywords", multiple=True, required=True, help="Keyword (repeatable).")
@click.option("--color", default="#6B7280", show_default=True, help="Hex display color.")
@click.option("--description", default="", help="Free-text description.")
@click.option(
    "--for",
    "applicable_for",
    multiple=True,
    type=click.Choice(DIRECTIONS),
    help="Restrict to a direction (repeatable). Default: both.",
)
def categories_add(
    name: str, keywords: tuple[str, ...], color: str, description: str,
    applicable_for: tuple[str, ...],
) -> None:
    """Add a category at the lowest priority."""
    root = Path.cwd()
    _, category_config = _load_project(root)

    from statement_tracker.config import add_category, save_categories

    try:
        updated, category = add_category(
            category_config,
            name,
            list(keywords),
            color=color,
            description=description,
            applicable_for=list(applicable_for) or None,
        )
        save_categories(root, updated)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Added category {category.id}")


@categories.command(name="update")
@click.argument("category_id")
@click.option("--name", default=None, help="New display name (the id does not change).")
@click.option("--keyword", "keywords", multiple=True, help="Replace keywords (repeatable).")
@click.option("--color", default=None, help="New hex display color.")
@click.option("--description", default=None, help="New description.")
@click.option(
    "--for",
    "applicable_for",
    multiple=True,
    type=click.Choice(DIRECTIONS),
    help="Replace the direction restriction (repeatable).",
)
@click.option(
    "--any-direction",
    is_flag=True,
    default=False,
    help="Remove the direction restriction so the category applies to IN and OUT.",
)
def categories_update(
    category_id: str, name: str | None, keywords: tuple[str, ...], color: str | None,
    description: str | None, applicable_for: tuple[str, ...], any_direction: bool,
) -> None:
    """Edit an existing category."""
    root = Path.cwd()
    _, category_config = _load_project(root)

    from statement_tracker.config import save_categories, update_category

    changes: dict = {}
    if name is not None:
        changes["name"] = name
    if keywords:
        changes["keywords"] = list(keywords)
    if color is not None:
        changes["color"] = color
    if description is not None:
        changes["description"] = description
    if applicable_for and any_direction:
        click.echo("Error: --for and --any-direction cannot be combined", err=True)
        sys.exit(1)
    if applicable_for:
        changes["applicable_for"] = list(applicable_for)
    elif any_direction:
        changes["applicable_for"] = None

    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        updated = update_category(category_config, category_id, **changes)
        save_categories(root, updated)
    except KeyError:
        click.echo(f"Error: unknown category {category_id!r}", err=True)
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Updated category {category_id}")


@categories.command(name="delete")
@click.argument("category_id")
def categories_delete(category_id: str) -> None:
    """Delete a category (default categories cannot be deleted)."""
    root = Path.cwd()
    _, category_config = _load_project(root)

    from statement_tracker.config import delete_category, save_categories

    updated, deleted = delete_category(category_config, category_id)
    if not deleted:
        if category_config.is_default(category_id):
            click.echo(f"Error: {category_id!r} is a default category", err=True)
        else:
            click.echo(f"Error: unknown category {category_id!r}", err=True)
        sys.exit(1)

    save_categories(root, updated)
    click.echo(f"Deleted category {category_id}")
