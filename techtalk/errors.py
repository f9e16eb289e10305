"""
Exceptions raised by the tech talk catalog.

CatalogError subclasses are recoverable: the menu reports them and carries on.
StoreError signals a persistence failure; StoreConnectionError is fatal at startup.
"""


class CatalogError(Exception):
    """Base class for recoverable catalog errors."""


class ValidationError(CatalogError):
    """Required input was empty."""


class DuplicateError(CatalogError):
    """A talk with the same title already exists in the store."""

    def __init__(self, title: str):
        super().__init__(f"Tech Talk with this title already exists: {title}")
        self.title = title


class NotFoundError(CatalogError):
    """No talk matched the requested title."""

    def __init__(self, title: str):
        super().__init__(f"Tech Talk not found: {title}")
        self.title = title


class ParseError(CatalogError):
    """A selection or stored value could not be parsed."""


class StoreError(Exception):
    """The record store failed to complete an operation."""


class StoreConnectionError(StoreError):
    """The record store could not be opened."""
