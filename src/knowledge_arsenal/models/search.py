"""Search-related models."""

from pydantic import BaseModel, Field

from knowledge_arsenal.models.entity import AccessLevel, KnowledgeEntity, KnowledgeType


class SearchFilters(BaseModel):
    """Candidate filters applied before scoring.

    Different filter kinds combine with AND; values within one kind
    combine with ANY. An unset or empty filter does not restrict.
    """

    types: list[KnowledgeType] | None = None
    tags: list[str] | None = None
    access_levels: list[AccessLevel] | None = None
    project_associations: list[str] | None = None
    categories: list[str] | None = None
    technology_stack: list[str] | None = None


class SearchQuery(BaseModel):
    """Parameters for a knowledge base search."""

    query: str
    filters: SearchFilters | None = None
    top_k: int = Field(default=8, ge=1, le=50)


class ScoredEntity(BaseModel):
    """A single ranked search result."""

    entity: KnowledgeEntity
    score: float = Field(ge=0.0, le=1.0)
    raw_score: int
    explanation: list[str] = Field(default_factory=list)
    related_entities: list[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """Results of one search plus the snapshot they were drawn from."""

    query: str
    results: list[ScoredEntity] = Field(default_factory=list)
    total_candidates: int = 0
    snapshot_version: int
