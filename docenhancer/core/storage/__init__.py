"""
Storage layer: key-value backends and the document repository.

Supported backends:
- SQLite (aiosqlite)
- In-memory (tests)
"""

from docenhancer.core.storage.base import KeyValueStore
from docenhancer.core.storage.memory_store import InMemoryKeyValueStore
from docenhancer.core.storage.repository import DocumentRepository, StorageUsage
from docenhancer.core.storage.sqlite_store import SQLiteKeyValueStore

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "DocumentRepository",
    "StorageUsage",
]
