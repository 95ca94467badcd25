"""Snapshot and job persistence on SQLite."""

from knowledge_arsenal.db.backend import Database, ResultCursor
from knowledge_arsenal.db.connection import create_connection
from knowledge_arsenal.db.sqlite_backend import SQLiteBackend

__all__ = ["Database", "ResultCursor", "SQLiteBackend", "create_connection"]
