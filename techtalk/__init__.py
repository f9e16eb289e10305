"""
Tech Talk Portal - Internal Tech Talk Catalog

A console catalog of tech talks with a local document store.
"""

__version__ = "0.1.0"

from techtalk.record_store import TalkRecord, RecordStore
from techtalk.catalog import CatalogManager, SortOrder

__all__ = ["TalkRecord", "RecordStore", "CatalogManager", "SortOrder"]
