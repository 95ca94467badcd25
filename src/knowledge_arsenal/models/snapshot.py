"""Knowledge base snapshot models."""

from collections import Counter
from datetime import datetime

from pydantic import BaseModel, Field

from knowledge_arsenal.models.entity import KnowledgeEntity


class SnapshotMetadata(BaseModel):
    """Aggregate facts about a persisted snapshot."""

    total_entities: int
    entities_by_type: dict[str, int] = Field(default_factory=dict)
    last_updated: datetime
    version: int = Field(ge=1)
    job_id: str | None = None


class KnowledgeSnapshot(BaseModel):
    """The full, atomically replaced state of the knowledge base.

    Snapshots are never mutated once handed out by the store; a new
    ingestion run produces a new snapshot object.
    """

    entities: list[KnowledgeEntity] = Field(default_factory=list)
    metadata: SnapshotMetadata

    @classmethod
    def build(
        cls,
        entities: list[KnowledgeEntity],
        *,
        version: int,
        last_updated: datetime,
        job_id: str | None = None,
    ) -> "KnowledgeSnapshot":
        """Assemble a snapshot and its metadata from an entity list."""
        by_type = Counter(entity.type.value for entity in entities)
        return cls(
            entities=entities,
            metadata=SnapshotMetadata(
                total_entities=len(entities),
                entities_by_type=dict(by_type),
                last_updated=last_updated,
                version=version,
                job_id=job_id,
            ),
        )

    def index(self) -> dict[str, KnowledgeEntity]:
        """Map entity id to entity, in insertion order."""
        return {entity.id: entity for entity in self.entities}

    def get(self, entity_id: str) -> KnowledgeEntity | None:
        """Look up a single entity by id."""
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        return None
