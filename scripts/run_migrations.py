#!/usr/bin/env python3
"""Run Alembic migrations before the catalog is used.

This script waits for the configured database and upgrades its schema
to the latest revision.
"""
import logging
import sys
import time
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

# Add parent directory to path so we can import catalog modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog.core.config import get_settings

logger = logging.getLogger(__name__)
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] %(levelname)s - %(message)s",
)

ALEMBIC_INI_PATH = Path(__file__).parent.parent / "alembic.ini"


def wait_for_db(database_url: str, max_retries: int = 30, retry_interval: int = 2) -> bool:
    """Wait for database to become available.

    Args:
        database_url: SQLAlchemy database URL
        max_retries: Maximum number of connection attempts
        retry_interval: Seconds to wait between retries

    Returns:
        True if database is available, False otherwise
    """
    logger.info("Waiting for database to become available...")

    engine = create_engine(database_url, pool_pre_ping=True)
    try:
        for attempt in range(1, max_retries + 1):
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                logger.info("Database connection established")
                return True
            except OperationalError as e:
                if attempt == max_retries:
                    logger.error("Failed to connect to database after %d attempts: %s", max_retries, e)
                    return False
                logger.warning("Attempt %d/%d failed, retrying in %ds...", attempt, max_retries, retry_interval)
                time.sleep(retry_interval)
    finally:
        engine.dispose()
    return False


def current_revision(database_url: str) -> str | None:
    """Return the revision stamped in the database, or None if never migrated."""
    engine = create_engine(database_url, pool_pre_ping=True)
    try:
        with engine.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()
    finally:
        engine.dispose()


def run_migrations(database_url: str, alembic_ini_path: Path = ALEMBIC_INI_PATH) -> bool:
    """Run Alembic migrations to upgrade database to latest version.

    Returns:
        True if migrations succeeded, False otherwise
    """
    if not alembic_ini_path.exists():
        logger.error("Alembic config not found at %s", alembic_ini_path)
        return False

    alembic_cfg = Config(str(alembic_ini_path))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)

    logger.info("Running Alembic migrations to 'head'...")
    logger.info("  Config: %s", alembic_ini_path)

    try:
        revision = current_revision(database_url)
    except SQLAlchemyError as e:
        logger.warning("  Could not check current revision: %s", e)
    else:
        if revision:
            logger.info("  Current database revision: %s", revision)
        else:
            logger.info("  Database not yet migrated (alembic_version table missing)")

    script = ScriptDirectory.from_config(alembic_cfg)
    logger.info("  Available migrations:")
    for rev in script.walk_revisions():
        logger.info("    - %s: %s", rev.revision, rev.doc)

    try:
        command.upgrade(alembic_cfg, "head")
    except SQLAlchemyError as e:
        logger.error("Migration failed: %s", e, exc_info=True)
        return False

    logger.info("Migrations completed successfully")
    return True


def main() -> int:
    """Main entry point for migration script.

    Returns:
        Exit code (0 = success, 1 = failure)
    """
    settings = get_settings()

    if not wait_for_db(settings.database_url):
        logger.error("Database is not available. Exiting.")
        return 1

    if not run_migrations(settings.database_url):
        logger.error("Migrations failed. Exiting.")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
