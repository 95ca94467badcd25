"""Query helpers for snapshot and job rows.

None of these commit; the caller owns the transaction.
"""

from knowledge_arsenal.db.backend import Database
from knowledge_arsenal.models.job import IngestionJob
from knowledge_arsenal.models.snapshot import KnowledgeSnapshot


async def latest_snapshot_version(db: Database) -> int:
    """Highest snapshot version ever written, or 0 for an empty database."""
    cursor = await db.execute("SELECT COALESCE(MAX(version), 0) FROM snapshots")
    row = await cursor.fetchone()
    return int(row[0]) if row is not None else 0


async def insert_snapshot(db: Database, snapshot: KnowledgeSnapshot) -> None:
    """Write a snapshot document as a new row."""
    meta = snapshot.metadata
    await db.execute(
        """INSERT INTO snapshots (version, job_id, total_entities, document, created_at)
        VALUES (?, ?, ?, ?, ?)""",
        (
            meta.version,
            meta.job_id,
            meta.total_entities,
            snapshot.model_dump_json(),
            meta.last_updated.isoformat(),
        ),
    )


async def set_current_snapshot(db: Database, version: int) -> None:
    """Point readers at a snapshot version."""
    await db.execute(
        """INSERT INTO current_snapshot (id, version) VALUES (1, ?)
        ON CONFLICT(id) DO UPDATE SET version = excluded.version""",
        (version,),
    )


async def get_current_snapshot(db: Database) -> KnowledgeSnapshot | None:
    """Read the snapshot the pointer refers to."""
    cursor = await db.execute(
        """SELECT s.document FROM current_snapshot c
        JOIN snapshots s ON s.version = c.version
        WHERE c.id = 1"""
    )
    row = await cursor.fetchone()
    if row is None:
        return None
    return KnowledgeSnapshot.model_validate_json(row["document"])


async def upsert_job(db: Database, job: IngestionJob) -> None:
    """Insert or overwrite a job row."""
    await db.execute(
        """INSERT INTO ingestion_jobs (id, status, started_at, completed_at, document)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            status = excluded.status,
            completed_at = excluded.completed_at,
            document = excluded.document""",
        (
            job.id,
            job.status.value,
            job.started_at.isoformat(),
            job.completed_at.isoformat() if job.completed_at else None,
            job.model_dump_json(),
        ),
    )


async def get_job(db: Database, job_id: str) -> IngestionJob | None:
    """Fetch a job by id."""
    cursor = await db.execute("SELECT document FROM ingestion_jobs WHERE id = ?", (job_id,))
    row = await cursor.fetchone()
    if row is None:
        return None
    return IngestionJob.model_validate_json(row["document"])


async def get_latest_job(db: Database) -> IngestionJob | None:
    """Fetch the most recently started job."""
    cursor = await db.execute(
        "SELECT document FROM ingestion_jobs ORDER BY started_at DESC, rowid DESC LIMIT 1"
    )
    row = await cursor.fetchone()
    if row is None:
        return None
    return IngestionJob.model_validate_json(row["document"])
