"""Database protocol the snapshot store is written against.

The store only needs single statements, a schema script and explicit
transaction control; any async connection offering those can back it.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ResultCursor(Protocol):
    """Rows produced by ``Database.execute``; rows index by name or position."""

    async def fetchone(self) -> Any | None: ...

    async def fetchall(self) -> Sequence[Any]: ...


@runtime_checkable
class Database(Protocol):
    """Async connection using ``?`` placeholders and SQLite syntax."""

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ResultCursor:
        """Run one statement."""
        ...

    async def executescript(self, sql: str) -> None:
        """Run a multi-statement DDL script."""
        ...

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Commit on normal exit, roll back and re-raise on error."""
        ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    async def close(self) -> None: ...
