"""DDL for the knowledge database."""

from knowledge_arsenal.db.backend import Database

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS snapshots (
    version INTEGER PRIMARY KEY,
    job_id TEXT,
    total_entities INTEGER NOT NULL,
    document TEXT NOT NULL,
    created_at TEXT NOT NULL
);

-- Single-row pointer to the snapshot currently served to readers
CREATE TABLE IF NOT EXISTS current_snapshot (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    version INTEGER NOT NULL REFERENCES snapshots(version)
);

CREATE TABLE IF NOT EXISTS ingestion_jobs (
    id TEXT PRIMARY KEY,
    status TEXT NOT NULL,
    started_at TEXT NOT NULL,
    completed_at TEXT,
    document TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_jobs_started ON ingestion_jobs(started_at);
"""


async def apply_schema(db: Database) -> None:
    """Create missing tables and record the schema version on first run."""
    await db.executescript(SCHEMA_SQL)

    async with db.transaction():
        cursor = await db.execute("SELECT version FROM schema_version")
        if await cursor.fetchone() is None:
            await db.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
