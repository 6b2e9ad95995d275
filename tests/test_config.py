"""Tests for statement_tracker.config — loading, saving, category edits, initialization."""

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from statement_tracker.config import (
    add_category,
    category_id_for,
    delete_category,
    initialize,
    load_categories,
    load_config,
    save_categories,
    update_category,
)
from statement_tracker.models import IN, OUT, AppConfig, CategoryConfig


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


class TestLoadConfig:
    """Tests for loading config.toml into an AppConfig."""

    def test_loads_default_config(self, tmp_path: Path):
        """Default config.toml produced by initialize() is loadable."""
        initialize(tmp_path)
        config = load_config(tmp_path)

        assert isinstance(config, AppConfig)
        assert config.store_dir == "store"
        assert config.output_dir == "output"
        assert config.max_upload_mb == 10

    def test_parser_settings(self, tmp_path: Path):
        initialize(tmp_path)
        parser = load_config(tmp_path).parser

        assert "PAIEMENT" in parser.transaction_keywords
        assert "VIREMENT RECU" in parser.income_keywords
        assert "CREDIT IMMOBILIER" in parser.issuer_keywords
        assert parser.neighbor_window == 3
        assert parser.min_text_length == 100
        assert parser.scan_budget_seconds == 30.0

    def test_missing_keys_use_defaults(self, tmp_path: Path):
        (tmp_path / "config.toml").write_text(
            '[general]\noutput_dir = "exports"\n\n[parser]\nneighbor_window = 5\n'
        )
        config = load_config(tmp_path)

        assert config.output_dir == "exports"
        assert config.store_dir == "store"
        assert config.parser.neighbor_window == 5
        assert "RETRAIT" in config.parser.transaction_keywords

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path)


# ---------------------------------------------------------------------------
# load_categories / save_categories
# ---------------------------------------------------------------------------


class TestLoadCategories:
    """Tests for loading categories.toml into a CategoryConfig."""

    def test_default_order(self, category_config: CategoryConfig):
        ids = [c.id for c in category_config.categories]
        assert ids[0] == "internet_payment"
        assert ids.index("salary") < ids.index("transfer")
        assert ids[-2:] == ["other_expense", "other_income"]

    def test_defaults(self, category_config: CategoryConfig):
        assert category_config.default_out == "other_expense"
        assert category_config.default_in == "other_income"

    def test_applicable_for(self, category_config: CategoryConfig):
        assert category_config.get("salary").applicable_for == (IN,)
        assert category_config.get("shopping").applicable_for == (OUT,)
        assert category_config.get("transfer").applicable_for is None

    def test_id_derived_from_name_when_missing(self, tmp_path: Path):
        (tmp_path / "categories.toml").write_text(
            '[[categories]]\nname = "Home Rent"\nkeywords = ["LOYER"]\n'
        )
        config = load_categories(tmp_path)
        assert config.categories[0].id == "home_rent"

    def test_unknown_direction_raises(self, tmp_path: Path):
        (tmp_path / "categories.toml").write_text(
            '[[categories]]\nid = "x"\nname = "X"\napplicable_for = ["SIDEWAYS"]\n'
        )
        with pytest.raises(ValueError, match="SIDEWAYS"):
            load_categories(tmp_path)

    def test_save_and_reload(self, tmp_project_dir: Path, category_config: CategoryConfig):
        updated, _ = add_category(category_config, "Rent", ["loyer"], applicable_for=[OUT])
        save_categories(tmp_project_dir, updated)

        reloaded = load_categories(tmp_project_dir)
        assert reloaded == updated
        assert (tmp_project_dir / "categories.toml").read_text().startswith("# Category list")


# ---------------------------------------------------------------------------
# Category edits
# ---------------------------------------------------------------------------


class TestAddCategory:
    def test_appends_at_lowest_priority(self, category_config: CategoryConfig):
        updated, category = add_category(category_config, "Home Rent", ["loyer", " "])

        assert category.id == "home_rent"
        assert category.keywords == ("LOYER",)
        assert updated.categories[-1] is category

    def test_leaves_original_snapshot_untouched(self, category_config: CategoryConfig):
        before = len(category_config.categories)
        add_category(category_config, "Rent", ["LOYER"])
        assert len(category_config.categories) == before

    def test_duplicate_rejected(self, category_config: CategoryConfig):
        with pytest.raises(ValueError, match="already exists"):
            add_category(category_config, "Shopping", ["X"])

    def test_blank_name_rejected(self, category_config: CategoryConfig):
        with pytest.raises(ValueError):
            add_category(category_config, "   ", ["X"])

    def test_bad_direction_rejected(self, category_config: CategoryConfig):
        with pytest.raises(ValueError):
            add_category(category_config, "Rent", ["LOYER"], applicable_for=["UP"])

    def test_category_id_for(self):
        assert category_id_for("  Cash  Withdrawal ") == "cash_withdrawal"


class TestUpdateCategory:
    def test_name_change_keeps_id(self, category_config: CategoryConfig):
        updated = update_category(category_config, "shopping", name="Groceries")

        category = updated.get("shopping")
        assert category.name == "Groceries"
        assert updated.get("groceries") is None

    def test_keywords_uppercased(self, category_config: CategoryConfig):
        updated = update_category(category_config, "telecom", keywords=["iam", "inwi"])
        assert updated.get("telecom").keywords == ("IAM", "INWI")

    def test_position_preserved(self, category_config: CategoryConfig):
        updated = update_category(category_config, "telecom", color="#000000")
        assert [c.id for c in updated.categories] == [c.id for c in category_config.categories]

    def test_unknown_id_raises(self, category_config: CategoryConfig):
        with pytest.raises(KeyError):
            update_category(category_config, "missing", name="X")

    def test_id_not_editable(self, category_config: CategoryConfig):
        with pytest.raises(ValueError, match="id"):
            update_category(category_config, "shopping", id="retail")

    def test_clear_direction_restriction(self, category_config: CategoryConfig):
        updated = update_category(category_config, "shopping", applicable_for=None)

        shopping = updated.get("shopping")
        assert shopping.applicable_for is None
        assert shopping.applies_to(IN)
        assert category_config.get("shopping").applicable_for == (OUT,)

    def test_snapshot_categories_are_immutable(self, category_config: CategoryConfig):
        with pytest.raises(FrozenInstanceError):
            category_config.get("shopping").keywords = ()
        assert isinstance(category_config.get("shopping").keywords, tuple)


class TestDeleteCategory:
    def test_deletes(self, category_config: CategoryConfig):
        updated, deleted = delete_category(category_config, "telecom")
        assert deleted is True
        assert updated.get("telecom") is None

    @pytest.mark.parametrize("category_id", ["other_expense", "other_income"])
    def test_defaults_protected(self, category_config: CategoryConfig, category_id: str):
        updated, deleted = delete_category(category_config, category_id)
        assert deleted is False
        assert updated is category_config

    def test_unknown_returns_false(self, category_config: CategoryConfig):
        _, deleted = delete_category(category_config, "missing")
        assert deleted is False


# ---------------------------------------------------------------------------
# initialize
# ---------------------------------------------------------------------------


class TestInitialize:
    """Tests for project directory initialization."""

    def test_creates_structure(self, tmp_path: Path):
        initialize(tmp_path)

        assert (tmp_path / "config.toml").is_file()
        assert (tmp_path / "categories.toml").is_file()
        assert (tmp_path / "store").is_dir()
        assert (tmp_path / "output").is_dir()

    def test_does_not_overwrite(self, tmp_path: Path):
        """Running initialize twice leaves existing files alone."""
        initialize(tmp_path)
        (tmp_path / "categories.toml").write_text("# customized\n")

        initialize(tmp_path)

        assert (tmp_path / "categories.toml").read_text() == "# customized\n"
