"""Tests for the Alembic migrations and the migration script."""
from __future__ import annotations

import importlib.util
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

PROJECT_ROOT = Path(__file__).parent.parent


def alembic_config(database_url: str) -> Config:
    """Build an Alembic config without the ini file's logging setup."""
    config = Config()
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def load_migration_script():
    spec = importlib.util.spec_from_file_location("run_migrations", PROJECT_ROOT / "scripts" / "run_migrations.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestMigrations:
    """Test suite for the schema migrations."""

    def test_upgrade_creates_product_table(self, tmp_path: Path) -> None:
        """Test that the initial revision builds the product table."""
        url = f"sqlite:///{tmp_path / 'migrated.db'}"

        command.upgrade(alembic_config(url), "head")

        inspector = inspect(create_engine(url))
        assert "product" in inspector.get_table_names()
        columns = {column["name"]: column for column in inspector.get_columns("product")}
        assert list(columns) == [
            "id",
            "description",
            "brand",
            "content",
            "category",
            "price",
            "status",
            "dateMade",
            "expirationDate",
        ]
        assert columns["expirationDate"]["nullable"] is True
        assert columns["dateMade"]["nullable"] is False
        assert inspector.get_pk_constraint("product")["constrained_columns"] == ["id"]

    def test_downgrade_drops_product_table(self, tmp_path: Path) -> None:
        """Test that downgrading to base removes the table."""
        url = f"sqlite:///{tmp_path / 'migrated.db'}"
        config = alembic_config(url)

        command.upgrade(config, "head")
        command.downgrade(config, "base")

        assert "product" not in inspect(create_engine(url)).get_table_names()


class TestRunMigrationsScript:
    """Test suite for scripts/run_migrations.py."""

    def test_wait_for_db_succeeds_on_reachable_database(self, tmp_path: Path) -> None:
        """Test that a reachable database is detected on the first attempt."""
        script = load_migration_script()

        assert script.wait_for_db(f"sqlite:///{tmp_path / 'ready.db'}", max_retries=1) is True

    def test_wait_for_db_gives_up(self, tmp_path: Path) -> None:
        """Test that an unreachable database fails after the retries."""
        script = load_migration_script()

        url = f"sqlite:///{tmp_path / 'missing' / 'ready.db'}"
        assert script.wait_for_db(url, max_retries=2, retry_interval=0) is False

    def test_run_migrations_upgrades_to_head(self, tmp_path: Path) -> None:
        """Test that the script stamps the latest revision."""
        script = load_migration_script()
        url = f"sqlite:///{tmp_path / 'scripted.db'}"

        assert script.run_migrations(url) is True
        assert script.current_revision(url) == "001_initial"
