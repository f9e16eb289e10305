"""
Migration runner for the tech talk store.

Applies pending migrations from techtalk/migrations in version order.
"""

import importlib
import logging
import sqlite3
from pathlib import Path
from types import ModuleType
from typing import List, Optional

logger = logging.getLogger(__name__)

MIGRATIONS_PACKAGE = "techtalk.migrations"


def get_current_version(conn: sqlite3.Connection) -> int:
    """Get the current schema version (0 if no migration has been applied)"""
    cursor = conn.cursor()

    # Check if schema_version table exists
    cursor.execute("""
        SELECT name FROM sqlite_master
        WHERE type='table' AND name='schema_version'
    """)

    if not cursor.fetchone():
        return 0

    cursor.execute("SELECT MAX(version) FROM schema_version")
    result = cursor.fetchone()

    return result[0] if result[0] else 0


def get_migrations() -> List[ModuleType]:
    """Load all migration modules, ordered by version"""
    migrations_dir = Path(__file__).parent / "migrations"

    migration_files = sorted(
        f for f in migrations_dir.glob("M*.py")
        if not f.name.startswith(".")
    )

    modules = [
        importlib.import_module(f"{MIGRATIONS_PACKAGE}.{f.stem}")
        for f in migration_files
    ]
    return sorted(modules, key=lambda m: m.get_migration_version())


def run_migrations(conn: sqlite3.Connection, target_version: Optional[int] = None) -> int:
    """
    Run all pending migrations.

    Args:
        conn: Open SQLite connection
        target_version: Target version (None = latest)

    Returns:
        Number of migrations applied
    """
    current_version = get_current_version(conn)
    applied_count = 0

    for migration in get_migrations():
        version = migration.get_migration_version()

        # Skip if already applied
        if version <= current_version:
            continue

        # Skip if beyond target version
        if target_version is not None and version > target_version:
            logger.debug(f"Skipping migration {version} (beyond target version)")
            continue

        logger.info(f"Applying migration {version} ({migration.__name__.rsplit('.', 1)[-1]})")
        migration.upgrade(conn)
        applied_count += 1

    if applied_count:
        logger.info(f"Schema version: {current_version} → {get_current_version(conn)}")

    return applied_count
