import aiosqlite
from pathlib import Path
from typing import Optional, Protocol
from collections.abc import Iterable, Mapping
import logging

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Persistence surface used by the game state and settings stores."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def set_many(self, items: Mapping[str, str]) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def remove_many(self, keys: Iterable[str]) -> None: ...


class Database:
    """Async SQLite key-value store."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """Connect to the database and run migrations."""
        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row
        await self._run_migrations()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def _run_migrations(self) -> None:
        """Run all SQL migration files."""
        # Create migrations tracking table
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                name TEXT PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await self._connection.commit()

        migrations_dir = Path(__file__).parent / "migrations"

        for migration_file in sorted(migrations_dir.glob("*.sql")):
            # Check if migration already applied
            cursor = await self._connection.execute(
                "SELECT 1 FROM _migrations WHERE name = ?",
                (migration_file.name,)
            )
            if await cursor.fetchone():
                logger.debug(f"Skipping already applied migration: {migration_file.name}")
                continue

            logger.info(f"Running migration: {migration_file.name}")
            sql = migration_file.read_text()
            await self._connection.executescript(sql)
            await self._connection.execute(
                "INSERT INTO _migrations (name) VALUES (?)",
                (migration_file.name,)
            )
            await self._connection.commit()

    async def execute(
        self, query: str, params: tuple = ()
    ) -> aiosqlite.Cursor:
        """Execute a query and return the cursor."""
        cursor = await self._connection.execute(query, params)
        await self._connection.commit()
        return cursor

    async def fetch_one(
        self, query: str, params: tuple = ()
    ) -> Optional[aiosqlite.Row]:
        """Fetch a single row."""
        cursor = await self._connection.execute(query, params)
        return await cursor.fetchone()

    async def fetch_value(
        self, query: str, params: tuple = ()
    ) -> Optional[str]:
        """Fetch a single value from the first column of the first row."""
        row = await self.fetch_one(query, params)
        return row[0] if row else None

    # Key-value methods

    async def get(self, key: str) -> Optional[str]:
        """Get the value stored under a key, or None."""
        return await self.fetch_value(
            "SELECT value FROM kv_store WHERE key = ?",
            (key,),
        )

    async def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""
        await self.set_many({key: value})

    async def set_many(self, items: Mapping[str, str]) -> None:
        """Store several values in one transaction.

        Readers see either all of the new values or none of them.
        """
        try:
            await self._connection.executemany(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                list(items.items()),
            )
            await self._connection.commit()
        except aiosqlite.Error:
            await self._connection.rollback()
            raise

    async def remove(self, key: str) -> None:
        """Delete a key. Deleting a missing key is not an error."""
        await self.remove_many([key])

    async def remove_many(self, keys: Iterable[str]) -> None:
        """Delete several keys in one transaction."""
        try:
            await self._connection.executemany(
                "DELETE FROM kv_store WHERE key = ?",
                [(key,) for key in keys],
            )
            await self._connection.commit()
        except aiosqlite.Error:
            await self._connection.rollback()
            raise

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with `prefix`. Returns the number removed."""
        cursor = await self.execute(
            "DELETE FROM kv_store WHERE substr(key, 1, ?) = ?",
            (len(prefix), prefix),
        )
        logger.info(f"Deleted {cursor.rowcount} stored value(s) under {prefix!r}")
        return cursor.rowcount
