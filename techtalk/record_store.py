"""
Record store for tech talk documents.

One SQLite table holds one row per talk document; tags are kept as a JSON
array. Lookups are keyed by title and always act on the first document in
insertion order, so a title present more than once behaves like a document
collection's find-one/update-one/delete-one.
"""

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from techtalk.errors import StoreError, StoreConnectionError
from techtalk.migrate import run_migrations

logger = logging.getLogger(__name__)


@dataclass
class TalkRecord:
    """A single tech talk."""
    title: str
    description: str = ""
    posted_by: str = ""
    date: str = ""
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert talk to its document form."""
        return {
            "title": self.title,
            "description": self.description,
            "postedBy": self.posted_by,
            "tags": list(self.tags),
            "date": self.date
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TalkRecord":
        """Create talk from a document."""
        return cls(
            title=data["title"],
            description=data.get("description") or "",
            posted_by=data.get("postedBy") or "",
            date=data.get("date") or "",
            tags=list(data.get("tags") or [])
        )


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


class RecordStore:
    """Manages talk persistence in SQLite."""

    # Document field name -> column
    FIELD_COLUMNS = {
        "title": "title",
        "description": "description",
        "postedBy": "posted_by",
        "tags": "tags",
        "date": "date",
    }

    UPDATABLE_FIELDS = ("description", "postedBy", "tags", "date")

    def __init__(self, db_path: str):
        """
        Initialize record store.

        Args:
            db_path: Path to SQLite database
        """
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None

    def open(self) -> "RecordStore":
        """
        Connect to the database and apply pending migrations.

        Raises:
            StoreConnectionError if the database cannot be opened
        """
        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
        except (OSError, sqlite3.Error) as e:
            logger.error(f"Failed to open store at {self.db_path}: {e}")
            raise StoreConnectionError(str(e)) from e

        try:
            conn.row_factory = sqlite3.Row
            conn.create_function("casefold", 1, _casefold, deterministic=True)
            run_migrations(conn)
        except sqlite3.Error as e:
            conn.close()
            logger.error(f"Failed to prepare store at {self.db_path}: {e}")
            raise StoreConnectionError(str(e)) from e

        self.conn = conn
        logger.info(f"Opened record store: {self.db_path}")
        return self

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            logger.debug(f"Closed record store: {self.db_path}")

    def __enter__(self) -> "RecordStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        if self.conn is None:
            raise StoreError("Record store is not open")

        try:
            cursor = self.conn.execute(sql, params)
            if self.conn.in_transaction:
                self.conn.commit()
            return cursor
        except sqlite3.Error as e:
            self.conn.rollback()
            logger.error(f"Store operation failed: {e}")
            raise StoreError(str(e)) from e

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> TalkRecord:
        try:
            tags = json.loads(row["tags"]) if row["tags"] else []
        except ValueError:
            tags = None

        if not isinstance(tags, list):
            title = row["title"]
            logger.error(f"Malformed tags on stored talk '{title}': {row['tags']!r}")
            raise StoreError(f"Malformed tags on stored talk '{title}'")

        return TalkRecord.from_dict({
            "title": row["title"],
            "description": row["description"],
            "postedBy": row["posted_by"],
            "tags": tags,
            "date": row["date"],
        })

    def find_all(self) -> List[TalkRecord]:
        """Return every talk in insertion order."""
        cursor = self._execute("SELECT * FROM talks ORDER BY id")
        return [self._row_to_record(row) for row in cursor.fetchall()]

    def find_by_title(self, title: str, ignore_case: bool = False) -> Optional[TalkRecord]:
        """
        Find the first talk with an exactly matching title.

        Args:
            title: Title to look up
            ignore_case: Compare case-insensitively (Unicode casefold)

        Returns:
            Matching talk or None
        """
        if ignore_case:
            cursor = self._execute(
                "SELECT * FROM talks WHERE casefold(title) = ? ORDER BY id LIMIT 1",
                (title.casefold(),)
            )
        else:
            cursor = self._execute(
                "SELECT * FROM talks WHERE title = ? ORDER BY id LIMIT 1",
                (title,)
            )

        row = cursor.fetchone()
        return self._row_to_record(row) if row else None

    def insert(self, record: TalkRecord) -> int:
        """
        Insert a talk document.

        Returns:
            Store-assigned row id
        """
        cursor = self._execute("""
            INSERT INTO talks (title, description, posted_by, tags, date)
            VALUES (?, ?, ?, ?, ?)
        """, (
            record.title,
            record.description,
            record.posted_by,
            json.dumps(record.tags),
            record.date
        ))

        logger.debug(f"Inserted talk '{record.title}' (id={cursor.lastrowid})")
        return cursor.lastrowid

    def update_fields(self, title: str, fields: Dict[str, Any]) -> int:
        """
        Set the given document fields on the first talk titled exactly `title`.

        Args:
            title: Title of the talk to update
            fields: Document fields to set (description, postedBy, tags, date)

        Returns:
            Number of talks modified (0 or 1)
        """
        unknown = set(fields) - set(self.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        if not fields:
            return 0

        assignments = ", ".join(f"{self.FIELD_COLUMNS[name]} = ?" for name in fields)
        values = tuple(
            json.dumps(value) if name == "tags" else value
            for name, value in fields.items()
        )

        cursor = self._execute(f"""
            UPDATE talks SET {assignments}
            WHERE id = (SELECT id FROM talks WHERE title = ? ORDER BY id LIMIT 1)
        """, values + (title,))

        if cursor.rowcount == 0:
            logger.warning(f"Talk '{title}' not found in store for update")
        else:
            logger.debug(f"Updated talk '{title}': {', '.join(fields)}")

        return cursor.rowcount

    def delete_by_title(self, title: str) -> int:
        """
        Delete the first talk titled exactly `title`.

        Returns:
            Number of talks deleted (0 or 1)
        """
        cursor = self._execute("""
            DELETE FROM talks
            WHERE id = (SELECT id FROM talks WHERE title = ? ORDER BY id LIMIT 1)
        """, (title,))

        if cursor.rowcount == 0:
            logger.warning(f"Talk '{title}' not found in store for deletion")
        else:
            logger.debug(f"Deleted talk '{title}'")

        return cursor.rowcount

    def count(self) -> int:
        """Number of stored talks."""
        cursor = self._execute("SELECT COUNT(*) FROM talks")
        return cursor.fetchone()[0]
