"""
Migration 001: Initial Schema

Creates base tables for the tech talk store:
- talks (one row per talk document)
- schema_version (migration tracking)
"""

import sqlite3


def get_migration_version():
    """Return the version number of this migration"""
    return 1


def upgrade(conn: sqlite3.Connection):
    """Apply the migration"""
    cursor = conn.cursor()

    try:
        # Talk documents; tags is a JSON array, title is not unique at this level
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS talks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                posted_by TEXT NOT NULL DEFAULT '',
                tags TEXT NOT NULL DEFAULT '[]',
                date TEXT NOT NULL
            )
        """)

        # Schema version tracking table
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
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
        cursor.execute("DROP TABLE IF EXISTS talks")
        cursor.execute("DROP TABLE IF EXISTS schema_version")
        conn.commit()
    except Exception:
        conn.rollback()
        raise
