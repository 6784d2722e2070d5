"""
Journal persistence infrastructure.

This module provides the journal store implementations and the
debounced writer that batches saves to them.
"""

from .debounced_writer import DebouncedWriter
from .json_store import JsonFileJournalStore
from .memory_store import InMemoryJournalStore

__all__ = [
    "DebouncedWriter",
    "InMemoryJournalStore",
    "JsonFileJournalStore",
]
