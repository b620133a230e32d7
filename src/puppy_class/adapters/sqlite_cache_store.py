"""SQLite-backed response cache organised in named generations."""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

import aiosqlite
import httpx

from puppy_class.domain.cache import CachedResponse, cache_url
from puppy_class.services.offline_transport import CacheStore

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS cache_generations (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS cache_entries (
        generation TEXT NOT NULL,
        method TEXT NOT NULL,
        url TEXT NOT NULL,
        search_free_url TEXT NOT NULL,
        status_code INTEGER NOT NULL,
        headers_json TEXT NOT NULL,
        body BLOB NOT NULL,
        PRIMARY KEY (generation, method, url)
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_cache_entries_search_free
    ON cache_entries (search_free_url)
    """,
)


@dataclass
class SqliteCacheStore(CacheStore):
    """Cache of GET responses keyed by URL under named generations."""

    db_path: Path
    _db: aiosqlite.Connection | None = field(default=None, init=False, repr=False)
    _open_lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, init=False, repr=False
    )

    async def _connection(self) -> aiosqlite.Connection:
        if self._db is not None:
            return self._db
        async with self._open_lock:
            if self._db is None:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                db = await aiosqlite.connect(str(self.db_path))
                await db.execute("PRAGMA journal_mode=WAL")
                await db.execute("PRAGMA busy_timeout=5000")
                for statement in _SCHEMA:
                    await db.execute(statement)
                await db.commit()
                self._db = db
        return self._db

    async def open(self, name: str) -> None:
        """Create the named generation if it does not exist yet."""
        db = await self._connection()
        await db.execute(
            "INSERT OR IGNORE INTO cache_generations (name) VALUES (?)", (name,)
        )
        await db.commit()

    async def keys(self) -> list[str]:
        """Return generation names in creation order."""
        db = await self._connection()
        cursor = await db.execute("SELECT name FROM cache_generations ORDER BY seq")
        rows = await cursor.fetchall()
        await cursor.close()
        return [name for (name,) in rows]

    async def put(
        self, name: str, request: httpx.Request, response: CachedResponse
    ) -> None:
        """Store a response for a GET request under a generation."""
        await self.put_many(name, [(request, response)])

    async def put_many(
        self,
        name: str,
        entries: list[tuple[httpx.Request, CachedResponse]],
    ) -> None:
        """Store several responses in a single transaction."""
        for request, _ in entries:
            if request.method != "GET":
                raise ValueError(
                    f"Only GET requests can be cached, got {request.method}"
                )
        db = await self._connection()
        try:
            await db.execute(
                "INSERT OR IGNORE INTO cache_generations (name) VALUES (?)", (name,)
            )
            await db.executemany(
                """
                INSERT OR REPLACE INTO cache_entries (
                    generation, method, url, search_free_url,
                    status_code, headers_json, body
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        name,
                        request.method,
                        cache_url(request.url),
                        cache_url(request.url, ignore_search=True),
                        response.status_code,
                        json.dumps(response.headers),
                        response.content,
                    )
                    for request, response in entries
                ],
            )
            await db.commit()
        except aiosqlite.Error:
            await db.rollback()
            raise

    async def match(
        self, url: httpx.URL, ignore_search: bool = False
    ) -> CachedResponse | None:
        """Return the first cached GET response for a URL across generations."""
        db = await self._connection()
        column = "search_free_url" if ignore_search else "url"
        cursor = await db.execute(
            f"""
            SELECT e.status_code, e.headers_json, e.body
            FROM cache_entries e
            JOIN cache_generations g ON g.name = e.generation
            WHERE e.method = 'GET' AND e.{column} = ?
            ORDER BY g.seq
            LIMIT 1
            """,  # noqa: S608
            (cache_url(url, ignore_search=ignore_search),),
        )
        row = await cursor.fetchone()
        await cursor.close()
        if row is None:
            return None
        status_code, headers_json, body = row
        return CachedResponse(
            status_code=status_code,
            headers=[(name, value) for name, value in json.loads(headers_json)],
            content=bytes(body),
        )

    async def delete(self, name: str) -> bool:
        """Delete one generation and its entries."""
        db = await self._connection()
        await db.execute("DELETE FROM cache_entries WHERE generation = ?", (name,))
        cursor = await db.execute(
            "DELETE FROM cache_generations WHERE name = ?", (name,)
        )
        await db.commit()
        return cursor.rowcount > 0

    async def delete_all_except(self, name: str) -> list[str]:
        """Delete every generation other than ``name`` in one transaction."""
        db = await self._connection()
        stale = [key for key in await self.keys() if key != name]
        try:
            await db.execute("DELETE FROM cache_entries WHERE generation != ?", (name,))
            await db.execute("DELETE FROM cache_generations WHERE name != ?", (name,))
            await db.commit()
        except aiosqlite.Error:
            await db.rollback()
            raise
        if stale:
            logger.info("Deleted stale cache generations", extra={"stale": stale})
        return stale

    async def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None
