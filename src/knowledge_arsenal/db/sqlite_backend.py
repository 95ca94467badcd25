"""aiosqlite implementation of the Database protocol."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

import aiosqlite

from knowledge_arsenal.db.schema import apply_schema

logger = logging.getLogger(__name__)


class SQLiteBackend:
    """Single aiosqlite connection holding the snapshot and job tables.

    aiosqlite cursors already satisfy ``ResultCursor``, so they are
    returned as-is.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        """Initialize with an open aiosqlite connection."""
        self._conn = conn

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> aiosqlite.Cursor:
        """Run one statement."""
        return await self._conn.execute(sql, params)

    async def executescript(self, sql: str) -> None:
        """Run a multi-statement DDL script."""
        await self._conn.executescript(sql)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Group statements so they land together or not at all."""
        try:
            yield
        except BaseException:
            logger.debug("Rolling back transaction")
            await self._conn.rollback()
            raise
        await self._conn.commit()

    async def commit(self) -> None:
        await self._conn.commit()

    async def rollback(self) -> None:
        await self._conn.rollback()

    async def close(self) -> None:
        await self._conn.close()

    async def apply_schema(self) -> None:
        """Create the snapshot and job tables if missing."""
        await apply_schema(self)
