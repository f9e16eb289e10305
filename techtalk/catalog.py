"""
Catalog manager for tech talks.

Owns the in-memory mirror of the record store. Reads are served from the
mirror only; every mutation is applied to the mirror first and then sent to
the store. The two steps are not atomic.
"""
import logging
from collections import Counter
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from techtalk.errors import DuplicateError, NotFoundError, ParseError, ValidationError
from techtalk.record_store import RecordStore, TalkRecord

logger = logging.getLogger(__name__)


class SortOrder(Enum):
    NEWEST = "newest"
    OLDEST = "oldest"


class DeleteOutcome(NamedTuple):
    """Independent results of the mirror removal and the store delete."""
    removed_from_memory: bool
    removed_from_store: bool


def parse_tags(tags_text: Optional[str]) -> List[str]:
    """Split comma separated tags, trimming each and dropping empty pieces."""
    if not tags_text:
        return []
    return [tag.strip() for tag in tags_text.split(",") if tag.strip()]


def _same(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


def _provided(value: Optional[str]) -> Optional[str]:
    # None and blank input both mean "leave unchanged"
    if value is None:
        return None
    value = value.strip()
    return value or None


class CatalogManager:
    """
    Tech talk catalog with an in-memory mirror of the record store.

    The mirror is loaded once at startup and trusted afterwards; title
    uniqueness is only checked against the store when a talk is added.
    """

    def __init__(self, store: RecordStore, today: Callable[[], date] = date.today):
        """
        Initialize the catalog.

        Args:
            store: Open record store
            today: Returns the current date (injectable for tests)
        """
        self.store = store
        self.today = today
        self.talks: List[TalkRecord] = []

    def _today_iso(self) -> str:
        return self.today().isoformat()

    def load(self) -> int:
        """Replace the mirror with every talk in the store."""
        self.talks = self.store.find_all()

        duplicates = [
            title for title, count in
            Counter(talk.title.casefold() for talk in self.talks).items()
            if count > 1
        ]
        for title in duplicates:
            logger.warning(f"Title '{title}' appears more than once in the store")

        logger.info(f"Loaded {len(self.talks)} tech talks into memory")
        return len(self.talks)

    def add(
        self,
        title: str,
        description: str = "",
        posted_by: str = "",
        tags_text: str = ""
    ) -> TalkRecord:
        """
        Add a new talk to the mirror and the store.

        Raises:
            ValidationError if the title is blank
            DuplicateError if the store already holds the title (any case)
        """
        self.check_new_title(title)
        title = title.strip()

        talk = TalkRecord(
            title=title,
            description=(description or "").strip(),
            posted_by=(posted_by or "").strip(),
            date=self._today_iso(),
            tags=parse_tags(tags_text)
        )

        self.talks.append(talk)
        self.store.insert(talk)

        logger.info(f"Added tech talk '{title}'")
        return talk

    def check_new_title(self, title: str) -> None:
        """Validate a title for add, before any other input is collected."""
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title required!")
        if self.store.find_by_title(title, ignore_case=True) is not None:
            raise DuplicateError(title)

    def view_all(self) -> List[TalkRecord]:
        """All talks in current mirror order."""
        return list(self.talks)

    def search_by_title(self, title: str) -> Optional[TalkRecord]:
        """First talk whose title matches, ignoring case."""
        title = title.strip()
        return next((talk for talk in self.talks if _same(talk.title, title)), None)

    def search_by_tag(self, tag: str) -> List[TalkRecord]:
        """Every talk carrying the tag, ignoring case."""
        tag = tag.strip()
        return [
            talk for talk in self.talks
            if any(_same(t, tag) for t in talk.tags)
        ]

    def search_by_posted_by(self, name: str) -> List[TalkRecord]:
        """Every talk posted by the author, ignoring case."""
        name = name.strip()
        return [talk for talk in self.talks if _same(talk.posted_by, name)]

    def update(
        self,
        title: str,
        description: Optional[str] = None,
        posted_by: Optional[str] = None,
        tags_text: Optional[str] = None
    ) -> TalkRecord:
        """
        Update the first talk whose title matches, ignoring case.

        Omitted (None) or blank fields keep their current value. The date is
        always reset to today, even when nothing else changes.

        Raises:
            NotFoundError if no talk matches
        """
        talk = self.search_by_title(title)
        if talk is None:
            raise NotFoundError(title.strip())

        description = _provided(description)
        posted_by = _provided(posted_by)
        tags_text = _provided(tags_text)

        if description is not None:
            talk.description = description
        if posted_by is not None:
            talk.posted_by = posted_by
        if tags_text is not None:
            talk.tags = parse_tags(tags_text)
        talk.date = self._today_iso()

        fields: Dict[str, Any] = {
            "description": talk.description,
            "postedBy": talk.posted_by,
            "tags": talk.tags,
            "date": talk.date,
        }
        self.store.update_fields(talk.title, fields)

        logger.info(f"Updated tech talk '{talk.title}'")
        return talk

    def delete_by_title(self, title: str) -> DeleteOutcome:
        """
        Remove the first matching talk from the mirror, and delete by the
        literal title from the store. The two outcomes are independent.
        """
        title = title.strip()

        removed = False
        for index, talk in enumerate(self.talks):
            if _same(talk.title, title):
                del self.talks[index]
                removed = True
                break

        deleted = self.store.delete_by_title(title) > 0

        if removed != deleted:
            logger.warning(
                f"Delete of '{title}' diverged: memory={removed}, store={deleted}"
            )
        return DeleteOutcome(removed_from_memory=removed, removed_from_store=deleted)

    def sort_by_date(self, direction: Union[SortOrder, str]) -> List[TalkRecord]:
        """
        Sort the mirror by date. Stable in both directions; memory only.

        Raises:
            ParseError for an unknown direction or an unparseable stored date
        """
        try:
            order = SortOrder(direction)
        except ValueError:
            raise ParseError(f"Invalid sort direction: {direction!r}") from None

        keys = {}
        for talk in self.talks:
            try:
                keys[id(talk)] = date.fromisoformat(talk.date)
            except (TypeError, ValueError):
                raise ParseError(
                    f"Invalid date {talk.date!r} on tech talk '{talk.title}'"
                ) from None

        self.talks.sort(
            key=lambda talk: keys[id(talk)],
            reverse=order is SortOrder.NEWEST
        )
        return list(self.talks)

    def stats(self) -> Dict[str, Any]:
        """Summary counts over the mirror."""
        dates = sorted(talk.date for talk in self.talks if talk.date)
        return {
            "total_talks": len(self.talks),
            "unique_tags": len({t.casefold() for talk in self.talks for t in talk.tags}),
            "unique_authors": len({talk.posted_by.casefold() for talk in self.talks if talk.posted_by}),
            "earliest": dates[0] if dates else None,
            "latest": dates[-1] if dates else None,
        }
