"""
SQLite control storage backend using aiosqlite.

Stores control records in a table named after the collection. The conditional
update used for locking is a single UPDATE statement, which SQLite applies
atomically even when several processes share the database file.
"""

import asyncio
import re
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite
from loguru import logger

from pymigrate.storage.base import ControlStorageBackend

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Stored columns and their defaults for freshly inserted rows
_COLUMNS: dict[str, Any] = {
    "version": 0,
    "locked": 0,
    "locked_at": None,
}


def _to_db(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class SQLiteControlStorage(ControlStorageBackend):
    """
    SQLite-backed control storage.

    Example:
        >>> storage = SQLiteControlStorage(db_path="./app.db")
        >>> await storage.connect()
        >>> pymigrate.configure(storage=storage)
    """

    def __init__(
        self,
        db_path: str | Path = "./pymigrate.db",
        collection_name: str = "migrations",
        timeout: float = 5.0,
    ) -> None:
        if not _IDENTIFIER.match(collection_name):
            raise ValueError(f"Invalid collection name: {collection_name!r}")
        self.db_path = str(db_path)
        self.collection_name = collection_name
        self.timeout = timeout
        self._db: aiosqlite.Connection | None = None
        # Serializes lazy connects from concurrent callers
        self._connect_lock = asyncio.Lock()

    async def connect(self) -> None:
        """Open the database and create the collection table."""
        async with self._connect_lock:
            if self._db is not None:
                return

            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            db = await aiosqlite.connect(self.db_path, timeout=self.timeout)
            await db.execute(f"PRAGMA busy_timeout={int(self.timeout * 1000)};")
            await db.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.collection_name} (
                    id TEXT PRIMARY KEY,
                    version INTEGER NOT NULL DEFAULT 0,
                    locked INTEGER NOT NULL DEFAULT 0,
                    locked_at TEXT
                )
                """
            )
            await db.commit()
            self._db = db
        logger.debug(f"SQLite control storage ready: {self.db_path} ({self.collection_name})")

    async def disconnect(self) -> None:
        async with self._connect_lock:
            if self._db is not None:
                await self._db.close()
                self._db = None

    async def _conn(self) -> aiosqlite.Connection:
        if self._db is None:
            await self.connect()
        if self._db is None:
            raise RuntimeError(f"SQLite control storage {self.db_path} is not connected")
        return self._db

    def _check_fields(self, fields: dict[str, Any]) -> None:
        unknown = set(fields) - set(_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown control fields: {', '.join(sorted(unknown))}")

    async def find_one(self, record_id: str) -> dict[str, Any] | None:
        db = await self._conn()
        async with db.execute(
            f"SELECT version, locked, locked_at FROM {self.collection_name} WHERE id = ?",
            (record_id,),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None
        return {"version": row[0], "locked": bool(row[1]), "locked_at": row[2]}

    async def update_where(
        self,
        record_id: str,
        match: dict[str, Any],
        values: dict[str, Any],
    ) -> int:
        self._check_fields(match)
        self._check_fields(values)
        db = await self._conn()

        assignments = ", ".join(f"{key} = ?" for key in values)
        conditions = "".join(f" AND {key} = ?" for key in match)
        params = [_to_db(v) for v in values.values()]
        params.append(record_id)
        params.extend(_to_db(v) for v in match.values())

        cursor = await db.execute(
            f"UPDATE {self.collection_name} SET {assignments} WHERE id = ?{conditions}",
            params,
        )
        await db.commit()
        return cursor.rowcount

    async def upsert(self, record_id: str, values: dict[str, Any]) -> None:
        self._check_fields(values)
        db = await self._conn()

        row = {**_COLUMNS, **values}
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        updates = ", ".join(f"{key} = excluded.{key}" for key in values)

        await db.execute(
            f"INSERT INTO {self.collection_name} (id, {columns}) VALUES (?, {placeholders}) "
            f"ON CONFLICT(id) DO UPDATE SET {updates}",
            [record_id, *(_to_db(v) for v in row.values())],
        )
        await db.commit()

    async def remove_all(self) -> int:
        db = await self._conn()
        cursor = await db.execute(f"DELETE FROM {self.collection_name}")
        await db.commit()
        return cursor.rowcount

    def __repr__(self) -> str:
        return f"SQLiteControlStorage(db_path={self.db_path!r}, collection={self.collection_name!r})"
