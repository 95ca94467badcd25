"""Knowledge entity and relationship models."""

import hashlib
import json
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class KnowledgeType(StrEnum):
    """Kind of source a knowledge entity was derived from."""

    PROJECT_CASE_STUDY = "project_case_study"
    ARCHITECTURAL_PRINCIPLE = "architectural_principle"
    INSIGHT = "insight"
    TESTIMONIAL = "testimonial"
    # Reserved for future source kinds; no mapper is registered for these yet.
    TECHNOLOGY = "technology"
    MISSION_LOG = "mission_log"
    CODE_EXAMPLE = "code_example"
    RESEARCH_NOTE = "research_note"
    CLIENT_INTERACTION = "client_interaction"
    LEARNING_RESOURCE = "learning_resource"


class RelationshipType(StrEnum):
    """Typed edge between two knowledge entities."""

    IMPLEMENTS = "implements"
    EXTENDS = "extends"
    CONTRADICTS = "contradicts"
    SUPPORTS = "supports"
    REFERENCES = "references"
    SUPERSEDES = "supersedes"
    APPLIES_TO = "applies_to"
    DERIVED_FROM = "derived_from"
    VALIDATES = "validates"


class AccessLevel(StrEnum):
    """Who may see an entity."""

    PUBLIC = "public"
    INTERNAL = "internal"
    CONFIDENTIAL = "confidential"


class VerificationStatus(StrEnum):
    """How the facts in an entity were established."""

    VERIFIED = "verified"
    CALCULATED = "calculated"
    ESTIMATED = "estimated"
    UNVERIFIED = "unverified"


class BusinessImpact(BaseModel):
    """Measured business outcomes attached to an entity."""

    roi_improvement: str | None = None
    efficiency_gain: str | None = None
    time_saved: str | None = None
    cost_reduction: str | None = None

    def is_empty(self) -> bool:
        """True when no impact fact is set."""
        return not any(self.model_dump().values())


class KnowledgeMetadata(BaseModel):
    """Structured metadata shared by every entity kind.

    ``tags``, ``project_associations``, ``client_associations`` and
    ``technology_stack`` behave as sets: duplicates are removed on
    validation while first-seen order is kept, so serialization (and
    therefore the checksum) stays deterministic.
    """

    source: str
    author: str
    tags: list[str] = Field(default_factory=list)
    category: str
    subcategory: str | None = None
    confidence_score: float = Field(default=0.9, ge=0.0, le=1.0)
    relevance_score: float = Field(default=0.5, ge=0.0, le=1.0)
    access_level: AccessLevel = AccessLevel.PUBLIC
    project_associations: list[str] = Field(default_factory=list)
    client_associations: list[str] = Field(default_factory=list)
    technology_stack: list[str] = Field(default_factory=list)
    business_impact: BusinessImpact | None = None
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    last_validated: datetime | None = None

    @field_validator(
        "tags", "project_associations", "client_associations", "technology_stack"
    )
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(v for v in value if v))


class KnowledgeRelationship(BaseModel):
    """Directed edge from the owning entity to ``target_id``.

    A ``bidirectional`` edge is also valid from the target's perspective;
    no mirrored edge is stored on the target.
    """

    target_id: str
    relationship_type: RelationshipType
    strength: float = Field(ge=0.0, le=1.0)
    context: str | None = None
    bidirectional: bool = False
    created_at: datetime | None = None
    validated: bool = False


class KnowledgeEmbeddings(BaseModel):
    """Vectors for the three text fields of an entity."""

    content_embedding: list[float] = Field(default_factory=list)
    summary_embedding: list[float] = Field(default_factory=list)
    title_embedding: list[float] = Field(default_factory=list)
    embedding_model: str = ""
    embedding_version: str = ""
    created_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        """True when all three vectors are present."""
        return bool(self.content_embedding and self.summary_embedding and self.title_embedding)


# Fields that define an entity's identity for change detection. Timestamps,
# versions, embeddings and detected relationships are derived per run.
_CHECKSUM_FIELDS = {"type", "title", "content", "summary", "metadata", "attributes"}


class KnowledgeEntity(BaseModel):
    """A normalized unit of knowledge derived from one source record."""

    id: str
    type: KnowledgeType
    title: str
    content: str
    summary: str
    metadata: KnowledgeMetadata
    attributes: dict[str, Any] = Field(default_factory=dict)
    relationships: list[KnowledgeRelationship] = Field(default_factory=list)
    embeddings: KnowledgeEmbeddings = Field(default_factory=KnowledgeEmbeddings)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = Field(default=1, ge=1)
    checksum: str = ""

    def compute_checksum(self) -> str:
        """SHA-256 over the normalized content and metadata.

        ``metadata.last_validated`` is excluded because it records when the
        entity was checked, not what it says.
        """
        payload = self.model_dump(
            mode="json",
            include=_CHECKSUM_FIELDS,
            exclude={"metadata": {"last_validated"}},
        )
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        return hashlib.sha256(canonical.encode()).hexdigest()

    @property
    def embedding_texts(self) -> tuple[str, str, str]:
        """Texts embedded for this entity: (content, summary, title)."""
        return self.content, self.summary, self.title
