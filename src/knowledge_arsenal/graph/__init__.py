"""Knowledge graph module."""

from knowledge_arsenal.graph.detector import RelationshipDetector, detect_pair
from knowledge_arsenal.graph.queries import (
    KnowledgeStats,
    build_adjacency,
    dangling_edges,
    summarize_snapshot,
)

__all__ = [
    "KnowledgeStats",
    "RelationshipDetector",
    "build_adjacency",
    "dangling_edges",
    "detect_pair",
    "summarize_snapshot",
]
