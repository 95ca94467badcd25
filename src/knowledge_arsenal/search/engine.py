"""Heuristic multi-signal ranking over a snapshot's entities."""

import logging

from knowledge_arsenal.graph.queries import build_adjacency
from knowledge_arsenal.models.entity import KnowledgeEntity
from knowledge_arsenal.models.search import (
    ScoredEntity,
    SearchFilters,
    SearchQuery,
    SearchResponse,
)
from knowledge_arsenal.search.keywords import (
    CATEGORY_KEYWORDS,
    DEFAULT_KEYWORD_TABLE,
    KeywordBoostTable,
)
from knowledge_arsenal.store.knowledge_store import KnowledgeStore

logger = logging.getLogger(__name__)

PHRASE_IN_TITLE = 100
PHRASE_IN_CONTENT = 80
TERM_IN_TITLE = 50
TERM_IN_CONTENT = 30
TERM_IN_SOURCE = 20
CATEGORY_BOOST = 40
KEYWORD_BOOST = 60

MIN_TERM_LENGTH = 3
# Raw score that normalizes to 1.0
SCORE_SCALE = 100


class SearchUnavailableError(Exception):
    """No snapshot has been persisted yet, so there is nothing to search."""


def score_entity(
    query: str,
    entity: KnowledgeEntity,
    keyword_table: KeywordBoostTable = DEFAULT_KEYWORD_TABLE,
) -> tuple[int, list[str]]:
    """Raw score of one entity for a lowercased, stripped query.

    Returns the score and the list of signals that contributed to it.
    """
    title = entity.title.lower()
    content = entity.content.lower()
    source = entity.metadata.source.lower()
    score = 0
    signals: list[str] = []

    if query in title:
        score += PHRASE_IN_TITLE
        signals.append("phrase in title")
    if query in content:
        score += PHRASE_IN_CONTENT
        signals.append("phrase in content")

    for term in query.split():
        if len(term) < MIN_TERM_LENGTH:
            continue
        if term in title:
            score += TERM_IN_TITLE
            signals.append(f"'{term}' in title")
        if term in content:
            score += TERM_IN_CONTENT
            signals.append(f"'{term}' in content")
        if term in source:
            score += TERM_IN_SOURCE
            signals.append(f"'{term}' in source")

    categories = {entity.metadata.category, entity.metadata.subcategory}
    for keyword, targets in CATEGORY_KEYWORDS.items():
        if keyword in query and not targets.isdisjoint(categories):
            score += CATEGORY_BOOST
            signals.append(f"category '{keyword}'")
            # At most one category boost per entity
            break

    for keyword in keyword_table.matching(query):
        if entity.id in keyword_table.boosted_ids(keyword):
            score += KEYWORD_BOOST
            signals.append(f"keyword '{keyword}'")

    return score, signals


def apply_filters(
    entities: list[KnowledgeEntity], filters: SearchFilters | None
) -> list[KnowledgeEntity]:
    """Entities passing every set filter, in their original order."""
    if filters is None:
        return list(entities)

    def matches(entity: KnowledgeEntity) -> bool:
        meta = entity.metadata
        if filters.types and entity.type not in filters.types:
            return False
        if filters.access_levels and meta.access_level not in filters.access_levels:
            return False
        if filters.categories and not (
            {meta.category, meta.subcategory} & set(filters.categories)
        ):
            return False
        for wanted, have in (
            (filters.tags, meta.tags),
            (filters.project_associations, meta.project_associations),
            (filters.technology_stack, meta.technology_stack),
        ):
            if wanted and set(wanted).isdisjoint(have):
                return False
        return True

    return [entity for entity in entities if matches(entity)]


def search(
    query: str,
    entities: list[KnowledgeEntity],
    top_k: int = 8,
    *,
    keyword_table: KeywordBoostTable = DEFAULT_KEYWORD_TABLE,
    adjacency: dict[str, list[str]] | None = None,
) -> list[ScoredEntity]:
    """Rank ``entities`` against ``query``.

    Zero-score entities are excluded. The sort is stable, so ties keep
    the input order. ``adjacency`` supplies related ids; it defaults to
    the connections among ``entities`` themselves.
    """
    normalized = query.strip().lower()
    if not normalized:
        return []

    scored: list[tuple[int, list[str], KnowledgeEntity]] = []
    for entity in entities:
        raw, signals = score_entity(normalized, entity, keyword_table)
        if raw > 0:
            scored.append((raw, signals, entity))
    scored.sort(key=lambda item: item[0], reverse=True)

    if adjacency is None:
        adjacency = build_adjacency(entities)
    return [
        ScoredEntity(
            entity=entity,
            score=min(raw / SCORE_SCALE, 1.0),
            raw_score=raw,
            explanation=signals,
            related_entities=adjacency.get(entity.id, []),
        )
        for raw, signals, entity in scored[:top_k]
    ]


class SearchEngine:
    """Read path over the store's current snapshot.

    Each call takes the snapshot reference once, so a concurrent
    ingestion swapping in a new snapshot never produces a mixed result.
    """

    def __init__(
        self, store: KnowledgeStore, *, keyword_table: KeywordBoostTable = DEFAULT_KEYWORD_TABLE
    ) -> None:
        """Initialize with the store and the keyword boost table."""
        self._store = store
        self.keyword_table = keyword_table
        self._adjacency: tuple[int, dict[str, list[str]]] | None = None

    def search(self, request: SearchQuery) -> SearchResponse:
        """Filter, score and rank the current snapshot.

        Raises SearchUnavailableError when nothing has been ingested yet;
        an empty result list is a normal outcome.
        """
        snapshot = self._store.current
        if snapshot is None:
            raise SearchUnavailableError("No knowledge snapshot is available yet")

        version = snapshot.metadata.version
        if self._adjacency is None or self._adjacency[0] != version:
            self._adjacency = (version, build_adjacency(snapshot.entities))

        candidates = apply_filters(snapshot.entities, request.filters)
        results = search(
            request.query,
            candidates,
            request.top_k,
            keyword_table=self.keyword_table,
            adjacency=self._adjacency[1],
        )
        logger.debug(
            "Query %r matched %d of %d candidates", request.query, len(results), len(candidates)
        )
        return SearchResponse(
            query=request.query,
            results=results,
            total_candidates=len(candidates),
            snapshot_version=version,
        )
