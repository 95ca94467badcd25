"""Database connection management."""

import logging
from pathlib import Path

import aiosqlite

from knowledge_arsenal.config import get_db_path
from knowledge_arsenal.db.backend import Database
from knowledge_arsenal.db.sqlite_backend import SQLiteBackend

logger = logging.getLogger(__name__)


async def create_connection(db_path: Path | str | None = None) -> Database:
    """Create and initialize a database connection.

    For in-memory databases, pass ":memory:".
    """
    db_path = str(db_path or get_db_path())

    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row

    # WAL lets readers keep the committed snapshot while a run is writing
    await conn.execute("PRAGMA journal_mode=WAL")
    await conn.execute("PRAGMA foreign_keys=ON")

    db = SQLiteBackend(conn)
    await db.apply_schema()
    logger.debug("Opened knowledge database at %s", db_path)
    return db
