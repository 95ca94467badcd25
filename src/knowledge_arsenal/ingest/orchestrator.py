"""Ingestion orchestrator: map, embed, detect relationships, persist.

A run is one batch job. Failures degrade in three tiers: a malformed
record is skipped and reported, an entity whose embeddings cannot be
produced is dropped from the run, and anything that prevents a valid
snapshot from being written fails the job while the previous snapshot
stays current.
"""

import logging
import uuid
from collections import Counter
from datetime import UTC, datetime

from knowledge_arsenal.embeddings.provider import EmbeddingError, EmbeddingProvider
from knowledge_arsenal.graph.detector import RelationshipDetector
from knowledge_arsenal.ingest.mappers import MapperRegistry, MappingError, default_registry
from knowledge_arsenal.ingest.sources import SourceBatch, SourceRegistry, default_sources
from knowledge_arsenal.models.entity import KnowledgeEmbeddings, KnowledgeEntity
from knowledge_arsenal.models.job import IngestionJob, JobStatus
from knowledge_arsenal.models.snapshot import KnowledgeSnapshot
from knowledge_arsenal.store.knowledge_store import KnowledgeStore

logger = logging.getLogger(__name__)

_CREATED = "created"
_UPDATED = "updated"
_UNCHANGED = "unchanged"


class IngestionInProgressError(Exception):
    """Another ingestion job is already processing."""


class IngestionFailedError(Exception):
    """A run cannot produce a snapshot; the job is marked failed."""


class IngestionOrchestrator:
    """Coordinates one ingestion run against an injected store.

    Only one run may be in flight per store; a second ``run()`` while one
    is processing raises ``IngestionInProgressError`` instead of racing it
    to replace the snapshot.
    """

    def __init__(
        self,
        store: KnowledgeStore,
        embedder: EmbeddingProvider,
        *,
        mappers: MapperRegistry | None = None,
        detector: RelationshipDetector | None = None,
        sources: SourceRegistry | None = None,
    ) -> None:
        """Initialize with the store, embedder and optional collaborators."""
        self._store = store
        self._embedder = embedder
        self._mappers = mappers or default_registry()
        self._detector = detector or RelationshipDetector()
        self._sources = sources or default_sources()

    async def run_ingestion(self) -> IngestionJob:
        """Pull every registered source and ingest it as one job."""
        batches, source_errors = self._sources.load_all()
        return await self.run(batches, source="all_sources", source_errors=source_errors)

    async def run(
        self,
        batches: list[SourceBatch],
        *,
        source: str | None = None,
        source_errors: list[str] | None = None,
    ) -> IngestionJob:
        """Ingest the given batches and replace the snapshot.

        Returns the finished job, which is also persisted in the store.
        Raises IngestionInProgressError if a run is already processing.
        """
        lock = self._store.ingestion_lock
        if lock.locked():
            raise IngestionInProgressError("An ingestion job is already processing")

        async with lock:
            now = datetime.now(UTC)
            job = IngestionJob(
                id=f"job_{uuid.uuid4().hex[:12]}",
                source=source or ",".join(dict.fromkeys(b.source for b in batches)) or "empty",
                started_at=now,
                errors=list(source_errors or []),
                metadata={"source_kinds": list(dict.fromkeys(b.kind.value for b in batches))},
            )
            await self._store.save_job(job)

            job.status = JobStatus.PROCESSING
            await self._store.save_job(job)
            logger.info("Ingestion job %s started with %d batches", job.id, len(batches))

            try:
                await self._process(job, batches, now)
            except Exception as e:
                logger.error("Ingestion job %s failed: %s", job.id, e, exc_info=True)
                job.status = JobStatus.FAILED
                job.errors.append(f"Ingestion failed: {e}")
            else:
                job.status = JobStatus.COMPLETED

            job.completed_at = datetime.now(UTC)
            await self._store.save_job(job)
            logger.info(
                "Ingestion job %s %s: %d processed, %d created, %d updated, %d unchanged, "
                "%d errors",
                job.id,
                job.status.value,
                job.entities_processed,
                job.entities_created,
                job.entities_updated,
                job.entities_unchanged,
                len(job.errors),
            )
            return job

    async def _process(self, job: IngestionJob, batches: list[SourceBatch], now: datetime) -> None:
        total_records = sum(len(batch.records) for batch in batches)
        if total_records == 0:
            raise IngestionFailedError("No source data available")

        entities = self._map(job, batches)
        if not entities:
            raise IngestionFailedError("No entities could be mapped from the source data")

        entities = await self._embed(job, entities, now)
        if not entities:
            raise IngestionFailedError("No entities survived embedding")

        previous = self._store.current
        counts = self._reconcile(job, entities, previous, now)

        detected = self._detector.detect(entities, now)
        job.metadata["relationships_detected"] = len(detected)
        job.metadata["comparisons"] = self._detector.comparisons
        _carry_edge_timestamps(entities, previous, now)

        snapshot = await self._store.replace(entities, job_id=job.id, now=now)
        job.metadata["snapshot_version"] = snapshot.metadata.version
        # Counts describe the persisted snapshot only
        job.entities_created = counts[_CREATED]
        job.entities_updated = counts[_UPDATED]
        job.entities_unchanged = counts[_UNCHANGED]

    def _map(self, job: IngestionJob, batches: list[SourceBatch]) -> list[KnowledgeEntity]:
        """Map every record, collecting per-record failures on the job."""
        entities: dict[str, KnowledgeEntity] = {}
        for batch in batches:
            mapper = self._mappers.get(batch.kind)
            if mapper is None:
                job.errors.append(f"No mapper registered for {batch.kind.value} ({batch.source})")
                logger.warning("No mapper for %s, skipping %s", batch.kind, batch.source)
                continue
            for raw in batch.records:
                job.entities_processed += 1
                try:
                    entity = mapper(raw)
                except MappingError as e:
                    logger.warning("Skipping record from %s: %s", batch.source, e)
                    job.errors.append(str(e))
                    continue
                if entity.id in entities:
                    message = f"{batch.kind.value} record maps to duplicate id {entity.id}"
                    logger.warning("Skipping record from %s: %s", batch.source, message)
                    job.errors.append(message)
                    continue
                entities[entity.id] = entity
        return list(entities.values())

    async def _embed(
        self, job: IngestionJob, entities: list[KnowledgeEntity], now: datetime
    ) -> list[KnowledgeEntity]:
        """Attach embeddings, dropping entities whose vectors fail."""
        survivors: list[KnowledgeEntity] = []
        dropped: list[str] = []
        for entity in entities:
            try:
                content, summary, title = await self._embedder.embed_many(
                    list(entity.embedding_texts)
                )
            except (EmbeddingError, ValueError) as e:
                logger.warning("Dropping %s: embedding failed: %s", entity.id, e)
                dropped.append(entity.id)
                continue
            entity.embeddings = KnowledgeEmbeddings(
                content_embedding=content,
                summary_embedding=summary,
                title_embedding=title,
                embedding_model=self._embedder.model,
                embedding_version=self._embedder.version,
                created_at=now,
            )
            survivors.append(entity)

        if dropped:
            job.metadata["embedding_failures"] = dropped
            # Declared edges to an entity dropped in this run would dangle
            gone = set(dropped)
            for entity in survivors:
                entity.relationships = [r for r in entity.relationships if r.target_id not in gone]
        return survivors

    def _reconcile(
        self,
        job: IngestionJob,
        entities: list[KnowledgeEntity],
        previous: KnowledgeSnapshot | None,
        now: datetime,
    ) -> Counter[str]:
        """Carry versions and timestamps forward from the previous snapshot.

        Returns how many entities were created, updated and unchanged.
        """
        prior = previous.index() if previous is not None else {}
        counts: Counter[str] = Counter()
        for entity in entities:
            old = prior.get(entity.id)
            if old is None:
                entity.version = 1
                entity.created_at = now
                entity.updated_at = now
                entity.metadata.last_validated = now
                counts[_CREATED] += 1
            elif old.checksum == entity.checksum:
                entity.version = old.version
                entity.created_at = old.created_at
                entity.updated_at = old.updated_at
                entity.metadata.last_validated = old.metadata.last_validated
                entity.embeddings.created_at = old.embeddings.created_at
                counts[_UNCHANGED] += 1
            else:
                entity.version = old.version + 1
                entity.created_at = old.created_at
                entity.updated_at = now
                entity.metadata.last_validated = now
                counts[_UPDATED] += 1

        current_ids = {entity.id for entity in entities}
        dropped_ids = [entity_id for entity_id in prior if entity_id not in current_ids]
        if dropped_ids:
            logger.info("Dropping %d entities no longer in any source", len(dropped_ids))
        job.metadata["dropped_ids"] = dropped_ids
        return counts


def _carry_edge_timestamps(
    entities: list[KnowledgeEntity], previous: KnowledgeSnapshot | None, now: datetime
) -> None:
    """Keep an edge's first-seen time across runs that reproduce it.

    Edges are matched on (owner, target, relationship type); edges seen for
    the first time are stamped with ``now``.
    """
    first_seen: dict[tuple[str, str, str], datetime] = {}
    if previous is not None:
        for old in previous.entities:
            for rel in old.relationships:
                if rel.created_at is not None:
                    first_seen[(old.id, rel.target_id, rel.relationship_type)] = rel.created_at
    for entity in entities:
        for rel in entity.relationships:
            key = (entity.id, rel.target_id, rel.relationship_type)
            rel.created_at = first_seen.get(key, rel.created_at or now)
