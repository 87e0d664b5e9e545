"""
SQLite key-value store implementation.

Single table of string keys and values using aiosqlite.
"""

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from docenhancer.core.storage.base import KeyValueStore
from docenhancer.utils.exceptions import StoreError
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)


class SQLiteKeyValueStore(KeyValueStore):
    """
    SQLite-based key-value store.

    Features:
    - Fast local storage
    - Durable across restarts
    - WAL journaling for concurrent readers
    """

    def __init__(self, db_path: str = "data/docenhancer.db"):
        """
        Initialize SQLite key-value store.

        Args:
            db_path: Path to SQLite database file (":memory:" for a private in-memory DB)
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            self.connection = await aiosqlite.connect(self.db_path)
            await self.connection.execute("PRAGMA journal_mode = WAL")
            await self.connection.commit()

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """
        )
        await self.connection.commit()
        logger.info(f"SQLite key-value store ready at {self.db_path}")

    def _require_connection(self) -> aiosqlite.Connection:
        if self.connection is None:
            raise StoreError("SQLite store is not initialized", context={"db_path": self.db_path})
        return self.connection

    async def get(self, key: str) -> str | None:
        connection = self._require_connection()
        try:
            async with connection.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to read key {key}: {e}", context={"key": key}) from e
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        connection = self._require_connection()
        try:
            await connection.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(timezone.utc).isoformat()),
            )
            await connection.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to write key {key}: {e}", context={"key": key}) from e

    async def delete(self, key: str) -> None:
        connection = self._require_connection()
        try:
            await connection.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            await connection.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to delete key {key}: {e}", context={"key": key}) from e

    async def close(self) -> None:
        """Close the connection."""
        if self.connection is not None:
            await self.connection.close()
            self.connection = None
