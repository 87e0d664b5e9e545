"""
Factory for creating key-value stores and the document repository.
"""

from docenhancer.config import StorageConfig
from docenhancer.core.storage.base import KeyValueStore
from docenhancer.core.storage.memory_store import InMemoryKeyValueStore
from docenhancer.core.storage.repository import DocumentRepository
from docenhancer.core.storage.sqlite_store import SQLiteKeyValueStore


class StorageFactory:
    """Factory for creating storage backends from configuration."""

    @staticmethod
    def create(config: StorageConfig) -> KeyValueStore:
        """
        Create key-value store from configuration.

        Raises:
            ValueError: If backend is not supported
        """
        if config.backend == "sqlite":
            return SQLiteKeyValueStore(db_path=config.db_path)
        elif config.backend == "memory":
            return InMemoryKeyValueStore()
        else:
            raise ValueError(f"Unsupported storage backend: {config.backend}")

    @staticmethod
    def create_repository(config: StorageConfig, store: KeyValueStore | None = None) -> DocumentRepository:
        """Create a document repository over ``store`` (or a new one from config)."""
        return DocumentRepository(
            store=store or StorageFactory.create(config),
            key_prefix=config.key_prefix,
        )
