"""
In-process key-value store, used for tests and ephemeral deployments.
"""

from docenhancer.core.storage.base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store; contents vanish with the process."""

    def __init__(self):
        self._data: dict[str, str] = {}

    async def initialize(self) -> None:
        pass

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def close(self) -> None:
        pass
