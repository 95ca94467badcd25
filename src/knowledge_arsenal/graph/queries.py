"""Read-only graph queries over a snapshot's entities."""

from collections import Counter
from dataclasses import dataclass, field

from knowledge_arsenal.models.entity import KnowledgeEntity
from knowledge_arsenal.models.snapshot import KnowledgeSnapshot


def build_adjacency(entities: list[KnowledgeEntity]) -> dict[str, list[str]]:
    """Map each entity id to the ids it is connected to.

    Every edge connects its owner to its target; a bidirectional edge also
    connects the target back to its owner. Neighbors are deduplicated and
    listed in first-seen order.
    """
    adjacency: dict[str, dict[str, None]] = {entity.id: {} for entity in entities}
    for entity in entities:
        for rel in entity.relationships:
            adjacency[entity.id].setdefault(rel.target_id, None)
            if rel.bidirectional and rel.target_id in adjacency:
                adjacency[rel.target_id].setdefault(entity.id, None)
    return {entity_id: list(neighbors) for entity_id, neighbors in adjacency.items()}


def dangling_edges(entities: list[KnowledgeEntity]) -> list[tuple[str, str]]:
    """(owner_id, target_id) for every edge whose target is not in ``entities``."""
    ids = {entity.id for entity in entities}
    return [
        (entity.id, rel.target_id)
        for entity in entities
        for rel in entity.relationships
        if rel.target_id not in ids
    ]


@dataclass
class ConnectedEntity:
    """An entity and how many edges touch it."""

    entity_id: str
    title: str
    connection_count: int


@dataclass
class KnowledgeStats:
    """Aggregate statistics of a snapshot."""

    total_entities: int
    entities_by_type: dict[str, int] = field(default_factory=dict)
    entities_by_category: dict[str, int] = field(default_factory=dict)
    total_relationships: int = 0
    average_relationships_per_entity: float = 0.0
    relationship_density: float = 0.0
    most_connected: list[ConnectedEntity] = field(default_factory=list)
    version: int | None = None
    last_updated: str | None = None


def summarize_snapshot(snapshot: KnowledgeSnapshot, *, top_n: int = 5) -> KnowledgeStats:
    """Compute counts, relationship density and the most-connected entities.

    Density is the number of edges over the number of unordered entity
    pairs. A bidirectional edge counts as a connection for both ends.
    """
    entities = snapshot.entities
    total = len(entities)
    total_relationships = sum(len(entity.relationships) for entity in entities)

    connections: Counter[str] = Counter()
    for entity in entities:
        for rel in entity.relationships:
            connections[entity.id] += 1
            if rel.bidirectional:
                connections[rel.target_id] += 1

    titles = {entity.id: entity.title for entity in entities}
    most_connected = [
        ConnectedEntity(
            entity_id=entity_id,
            title=titles.get(entity_id, entity_id),
            connection_count=count,
        )
        for entity_id, count in connections.most_common(top_n)
    ]

    pairs = total * (total - 1) // 2
    return KnowledgeStats(
        total_entities=total,
        entities_by_type=dict(Counter(entity.type.value for entity in entities)),
        entities_by_category=dict(Counter(entity.metadata.category for entity in entities)),
        total_relationships=total_relationships,
        average_relationships_per_entity=total_relationships / total if total else 0.0,
        relationship_density=total_relationships / pairs if pairs else 0.0,
        most_connected=most_connected,
        version=snapshot.metadata.version,
        last_updated=snapshot.metadata.last_updated.isoformat(),
    )
