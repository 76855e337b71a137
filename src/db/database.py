# manages connection to the local storage file, provides key/value helpers
import asyncio
import os
from contextlib import asynccontextmanager
from typing import Optional

import aiosqlite

from utils.logger import get_logger

_logger = get_logger(__name__)

DB_PATH = os.getenv("PORTAL_DB_PATH", "data/portal.sqlite")

_initialized = False
_init_lock = asyncio.Lock()


async def _init_db(conn: aiosqlite.Connection) -> None:
    await conn.execute(
        """
        CREATE TABLE IF NOT EXISTS storage
        (
            key   TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );
        """
    )
    await conn.commit()


@asynccontextmanager
async def connect() -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection.

    Ensures the storage table exists on first use.
    """
    global _initialized
    directory = os.path.dirname(DB_PATH)
    if directory:
        os.makedirs(directory, exist_ok=True)
    conn = await aiosqlite.connect(DB_PATH)

    if not _initialized:
        async with _init_lock:
            if not _initialized:
                _logger.info(f"Initializing local storage at {DB_PATH}...")
                await _init_db(conn)
                _initialized = True
    try:
        yield conn
    finally:
        await conn.close()


async def get_item(key: str) -> Optional[str]:
    """Return the raw string stored under key, or None."""
    async with connect() as conn:
        cur = await conn.execute("SELECT value FROM storage WHERE key = ?;", (key,))
        row = await cur.fetchone()
        await cur.close()
    return row[0] if row else None


async def set_item(key: str, value: str) -> None:
    """Overwrite key with value; committed before returning."""
    async with connect() as conn:
        await conn.execute(
            "INSERT OR REPLACE INTO storage(key, value) VALUES (?, ?);", (key, value)
        )
        await conn.commit()


async def remove_item(key: str) -> None:
    async with connect() as conn:
        await conn.execute("DELETE FROM storage WHERE key = ?;", (key,))
        await conn.commit()
