"""
Migration 002: Title index

Store lookups, updates and deletes are all keyed by title.
"""

import sqlite3


def get_migration_version():
    """Return the version number of this migration"""
    return 2


def upgrade(conn: sqlite3.Connection):
    """Apply the migration"""
    cursor = conn.cursor()

    try:
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_talks_title
            ON talks(title)
        """)

        cursor.execute("""
            INSERT OR IGNORE INTO schema_version (version) VALUES (?)
        """, (get_migration_version(),))

        conn.commit()

    except Exception:
        conn.rollback()
        raise


def downgrade(conn: sqlite3.Connection):
    """Rollback the migration"""
    cursor = conn.cursor()

    try:
        cursor.execute("DROP INDEX IF EXISTS idx_talks_title")
        cursor.execute("DELETE FROM schema_version WHERE version = ?", (get_migration_version(),))
        conn.commit()
    except Exception:
        conn.rollback()
        raise
