"""
Base interface for key-value storage.

The document store persists whole collections as JSON strings under a small
set of namespaced keys, so any string key-value backend can serve it.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract base class for string key-value storage implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the store (open connections, create schema)."""
        pass

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """
        Read a value.

        Args:
            key: Storage key

        Returns:
            Stored string or None if the key is absent
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Args:
            key: Storage key
            value: String to store
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key; absent keys are ignored."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release resources."""
        pass
