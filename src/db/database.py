# sqlite connection handling for the local state store
import asyncio
import os.path
from contextlib import asynccontextmanager
from sqlite3 import Row

import aiosqlite

from utils.config import Config
from utils.logger import get_logger

_logger = get_logger(__name__)

DB_PATH = Config.DB_PATH

# bump together with a new entry in _MIGRATIONS
SCHEMA_VERSION = 1
_MIGRATIONS = {
    1: """
    CREATE TABLE IF NOT EXISTS kv_store (
        key        TEXT PRIMARY KEY,
        value      TEXT NOT NULL,
        updated_at TEXT
    );
    """,
}

_initialized = False
_init_lock = asyncio.Lock()


async def _schema_version(conn: aiosqlite.Connection) -> int:
    cur = await conn.execute("PRAGMA user_version;")
    row = await cur.fetchone()
    await cur.close()
    return row[0] if row else 0


async def _migrate(conn: aiosqlite.Connection) -> None:
    current = await _schema_version(conn)
    for version in range(current + 1, SCHEMA_VERSION + 1):
        _logger.info(f"Migrating {DB_PATH} to schema v{version}...")
        await conn.executescript(_MIGRATIONS[version])
        await conn.execute(f"PRAGMA user_version = {version};")
    await conn.commit()


@asynccontextmanager
async def connect() -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection.

    The database file (and its folder) is created on first use and brought up
    to SCHEMA_VERSION once per process.
    """
    global _initialized
    folder = os.path.dirname(DB_PATH)
    if folder and not os.path.isdir(folder):
        os.makedirs(folder, exist_ok=True)

    conn = await aiosqlite.connect(DB_PATH)
    conn.row_factory = Row
    try:
        if not _initialized:
            async with _init_lock:
                if not _initialized:
                    await _migrate(conn)
                    _initialized = True
        yield conn
    finally:
        await conn.close()
