"""Persistent holder of the current knowledge snapshot and ingestion jobs."""

import asyncio
import logging
from datetime import UTC, datetime

from knowledge_arsenal.db.backend import Database
from knowledge_arsenal.db.queries import (
    get_current_snapshot,
    get_job,
    get_latest_job,
    insert_snapshot,
    latest_snapshot_version,
    set_current_snapshot,
    upsert_job,
)
from knowledge_arsenal.graph.queries import dangling_edges
from knowledge_arsenal.models.entity import KnowledgeEntity
from knowledge_arsenal.models.job import IngestionJob
from knowledge_arsenal.models.snapshot import KnowledgeSnapshot

logger = logging.getLogger(__name__)


class SnapshotValidationError(Exception):
    """A snapshot failed validation and was not written."""


class KnowledgeStore:
    """Shared state between ingestion and search.

    Readers take ``current`` once and keep using that object; ``replace``
    writes the new snapshot and moves the database pointer in one
    transaction, then swaps the in-memory reference, so a reader sees
    either the old snapshot or the new one in full.
    """

    def __init__(self, db: Database) -> None:
        """Initialize with a database backend."""
        self.db = db
        self._current: KnowledgeSnapshot | None = None
        self._ingestion_lock = asyncio.Lock()

    @property
    def current(self) -> KnowledgeSnapshot | None:
        """The snapshot currently served to readers, if any."""
        return self._current

    @property
    def ingestion_lock(self) -> asyncio.Lock:
        """Held for the whole of an ingestion run."""
        return self._ingestion_lock

    async def load(self) -> KnowledgeSnapshot | None:
        """Restore the pointed-to snapshot from the database."""
        snapshot = await get_current_snapshot(self.db)
        self._current = snapshot
        if snapshot is not None:
            logger.info(
                "Loaded snapshot v%d with %d entities",
                snapshot.metadata.version,
                snapshot.metadata.total_entities,
            )
        return snapshot

    async def replace(
        self,
        entities: list[KnowledgeEntity],
        *,
        job_id: str | None = None,
        now: datetime | None = None,
    ) -> KnowledgeSnapshot:
        """Persist ``entities`` as the next snapshot and make it current.

        Raises SnapshotValidationError when an edge points outside the
        entity set. On any failure the transaction is rolled back and the
        previous snapshot stays current.
        """
        dangling = dangling_edges(entities)
        if dangling:
            shown = ", ".join(f"{owner} -> {target}" for owner, target in dangling[:5])
            raise SnapshotValidationError(
                f"{len(dangling)} relationship(s) reference missing entities: {shown}"
            )
        ids = [entity.id for entity in entities]
        if len(set(ids)) != len(ids):
            raise SnapshotValidationError("Snapshot contains duplicate entity ids")

        async with self.db.transaction():
            version = await latest_snapshot_version(self.db) + 1
            snapshot = KnowledgeSnapshot.build(
                [entity.model_copy(deep=True) for entity in entities],
                version=version,
                last_updated=now or datetime.now(UTC),
                job_id=job_id,
            )
            await insert_snapshot(self.db, snapshot)
            await set_current_snapshot(self.db, version)

        self._current = snapshot
        logger.info("Wrote snapshot v%d with %d entities", version, len(entities))
        return snapshot

    async def save_job(self, job: IngestionJob) -> None:
        """Insert or update a job record."""
        async with self.db.transaction():
            await upsert_job(self.db, job)

    async def get_job(self, job_id: str) -> IngestionJob | None:
        """Get a job by id."""
        return await get_job(self.db, job_id)

    async def latest_job(self) -> IngestionJob | None:
        """Get the most recently started job."""
        return await get_latest_job(self.db)
