"""
Tests for the SQLite key-value store.
"""

import pytest

from docenhancer.core.storage import SQLiteKeyValueStore
from docenhancer.utils.exceptions import StoreError


@pytest.mark.unit
@pytest.mark.asyncio
class TestSQLiteKeyValueStore:
    """Test the aiosqlite-backed store directly."""

    async def test_set_get_overwrite(self, tmp_path):
        store = SQLiteKeyValueStore(db_path=str(tmp_path / "kv.db"))
        await store.initialize()
        try:
            await store.set("k", "one")
            await store.set("k", "two")

            assert await store.get("k") == "two"
            assert await store.get("absent") is None
        finally:
            await store.close()

    async def test_delete_absent_key(self, tmp_path):
        store = SQLiteKeyValueStore(db_path=str(tmp_path / "kv.db"))
        await store.initialize()
        try:
            await store.set("k", "v")
            await store.delete("k")
            await store.delete("k")

            assert await store.get("k") is None
        finally:
            await store.close()

    async def test_persists_across_connections(self, tmp_path):
        path = str(tmp_path / "kv.db")
        writer = SQLiteKeyValueStore(db_path=path)
        await writer.initialize()
        await writer.set("doc-enhancer:documents", "[]")
        await writer.close()

        reader = SQLiteKeyValueStore(db_path=path)
        await reader.initialize()
        try:
            assert await reader.get("doc-enhancer:documents") == "[]"
        finally:
            await reader.close()

    async def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "kv.db"

        SQLiteKeyValueStore(db_path=str(path))

        assert path.parent.is_dir()

    async def test_uninitialized_store(self, tmp_path):
        store = SQLiteKeyValueStore(db_path=str(tmp_path / "kv.db"))

        with pytest.raises(StoreError, match="not initialized"):
            await store.get("k")

    async def test_close_is_idempotent(self, tmp_path):
        store = SQLiteKeyValueStore(db_path=str(tmp_path / "kv.db"))
        await store.initialize()

        await store.close()
        await store.close()

        assert store.connection is None
