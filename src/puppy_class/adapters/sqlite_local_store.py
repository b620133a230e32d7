"""SQLite-backed durable queue for sessions submitted while offline."""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

import aiosqlite

from puppy_class.domain.sessions import QueuedSession
from puppy_class.errors import StorageUnavailable
from puppy_class.services.sync import LocalStore

logger = logging.getLogger(__name__)

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS keyval (
        key TEXT PRIMARY KEY,
        id TEXT NOT NULL,
        ts TEXT NOT NULL,
        breed TEXT NOT NULL,
        notes TEXT NOT NULL,
        image_blob BLOB NOT NULL
    )
"""


@dataclass
class SqliteLocalStore(LocalStore):
    """Key-value store of queued sessions kept in a local SQLite file."""

    db_path: Path
    _db: aiosqlite.Connection | None = field(default=None, init=False, repr=False)
    _open_lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, init=False, repr=False
    )

    async def _connection(self) -> aiosqlite.Connection:
        """Open the database and create the schema on first use."""
        if self._db is not None:
            return self._db
        async with self._open_lock:
            if self._db is not None:
                return self._db
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                db = await aiosqlite.connect(str(self.db_path))
                try:
                    await db.execute("PRAGMA journal_mode=WAL")
                    await db.execute("PRAGMA busy_timeout=5000")
                    await db.execute(_SCHEMA)
                    await db.commit()
                except aiosqlite.Error:
                    await db.close()
                    raise
            except (OSError, aiosqlite.Error) as exc:
                raise StorageUnavailable(
                    f"Cannot open local store at {self.db_path}"
                ) from exc
            self._db = db
            logger.info("Local store ready", extra={"db_path": str(self.db_path)})
            return db

    async def put(self, key: str, value: QueuedSession) -> None:
        """Insert or replace a queued session."""
        db = await self._connection()
        try:
            await db.execute(
                """
                INSERT OR REPLACE INTO keyval (key, id, ts, breed, notes, image_blob)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (key, value.id, value.ts, value.breed, value.notes, value.image_blob),
            )
            await db.commit()
        except aiosqlite.Error as exc:
            await db.rollback()
            raise StorageUnavailable(f"Failed to queue session {key}") from exc

    async def delete(self, key: str) -> None:
        """Remove a queued session; missing keys are ignored."""
        db = await self._connection()
        try:
            await db.execute("DELETE FROM keyval WHERE key = ?", (key,))
            await db.commit()
        except aiosqlite.Error as exc:
            await db.rollback()
            raise StorageUnavailable(f"Failed to delete session {key}") from exc

    async def list_entries(self) -> list[tuple[str, QueuedSession]]:
        """Return a snapshot of every queued session in key order."""
        db = await self._connection()
        try:
            cursor = await db.execute(
                "SELECT key, id, ts, breed, notes, image_blob FROM keyval ORDER BY key"
            )
            rows = await cursor.fetchall()
            await cursor.close()
        except aiosqlite.Error as exc:
            raise StorageUnavailable("Failed to read queued sessions") from exc
        return [
            (
                key,
                QueuedSession(
                    id=session_id,
                    ts=ts,
                    breed=breed,
                    notes=notes,
                    image_blob=bytes(image_blob),
                ),
            )
            for key, session_id, ts, breed, notes, image_blob in rows
        ]

    async def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None
