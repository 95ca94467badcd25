"""Pairwise heuristic relationship detection between entities."""

import logging
from datetime import UTC, datetime

from knowledge_arsenal.models.entity import (
    KnowledgeEntity,
    KnowledgeRelationship,
    RelationshipType,
)

logger = logging.getLogger(__name__)

# Above this many entities the all-pairs pass gets noticeably slow.
PAIRWISE_WARN_THRESHOLD = 500

SHARED_PROJECT_STRENGTH = 0.7
SHARED_TECHNOLOGY_STRENGTH = 0.5
SHARED_TAGS_STRENGTH = 0.4
MIN_SHARED_TAGS = 2


def _shared(left: list[str], right: list[str]) -> list[str]:
    """Values present in both lists, in ``left`` order."""
    right_set = set(right)
    return [value for value in left if value in right_set]


def detect_pair(
    a: KnowledgeEntity, b: KnowledgeEntity, now: datetime | None = None
) -> list[KnowledgeRelationship]:
    """Edges from ``a`` to ``b`` implied by their metadata.

    The three checks are independent, so one pair can yield up to three
    edges. Every edge is bidirectional and unvalidated.
    """
    if a.id == b.id:
        return []
    created = now or datetime.now(UTC)
    edges: list[KnowledgeRelationship] = []

    projects = _shared(a.metadata.project_associations, b.metadata.project_associations)
    if projects:
        edges.append(
            KnowledgeRelationship(
                target_id=b.id,
                relationship_type=RelationshipType.APPLIES_TO,
                strength=SHARED_PROJECT_STRENGTH,
                context=f"Both relate to projects: {', '.join(projects)}",
                bidirectional=True,
                created_at=created,
            )
        )

    technologies = _shared(a.metadata.technology_stack, b.metadata.technology_stack)
    if technologies:
        edges.append(
            KnowledgeRelationship(
                target_id=b.id,
                relationship_type=RelationshipType.REFERENCES,
                strength=SHARED_TECHNOLOGY_STRENGTH,
                context=f"Shared technologies: {', '.join(technologies)}",
                bidirectional=True,
                created_at=created,
            )
        )

    tags = _shared(a.metadata.tags, b.metadata.tags)
    if len(tags) >= MIN_SHARED_TAGS:
        edges.append(
            KnowledgeRelationship(
                target_id=b.id,
                relationship_type=RelationshipType.SUPPORTS,
                strength=SHARED_TAGS_STRENGTH,
                context=f"Shared concepts: {', '.join(tags)}",
                bidirectional=True,
                created_at=created,
            )
        )

    return edges


class RelationshipDetector:
    """Runs ``detect_pair`` over every unordered pair of a run's entities.

    Edges are appended to the relationship list of the entity that comes
    first in input order. The pass is quadratic; ``comparisons`` records
    how many pairs the last call examined.
    """

    def __init__(self, *, warn_threshold: int = PAIRWISE_WARN_THRESHOLD) -> None:
        """Initialize with the entity count above which a scaling warning is logged."""
        self.warn_threshold = warn_threshold
        self.comparisons = 0

    def detect(
        self, entities: list[KnowledgeEntity], now: datetime | None = None
    ) -> list[KnowledgeRelationship]:
        """Attach detected edges to their source entities and return them all."""
        created = now or datetime.now(UTC)
        if len(entities) > self.warn_threshold:
            logger.warning(
                "Pairwise relationship detection over %d entities (%d comparisons)",
                len(entities),
                len(entities) * (len(entities) - 1) // 2,
            )

        self.comparisons = 0
        detected: list[KnowledgeRelationship] = []
        for i, a in enumerate(entities):
            for b in entities[i + 1 :]:
                self.comparisons += 1
                edges = detect_pair(a, b, created)
                if edges:
                    a.relationships.extend(edges)
                    detected.extend(edges)

        logger.info(
            "Detected %d relationships across %d entities (%d comparisons)",
            len(detected),
            len(entities),
            self.comparisons,
        )
        return detected
