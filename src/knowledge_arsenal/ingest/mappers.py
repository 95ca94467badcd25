"""Source mappers: turn raw source records into normalized knowledge entities.

One mapper per source kind. Each validates the raw record, renders a
searchable content body, derives tags and scores, and stamps the
checksum. Mappers never touch timestamps or versions; the orchestrator
reconciles those against the previous snapshot.
"""

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from knowledge_arsenal.models.entity import (
    AccessLevel,
    BusinessImpact,
    KnowledgeEntity,
    KnowledgeMetadata,
    KnowledgeRelationship,
    KnowledgeType,
    RelationshipType,
    VerificationStatus,
)
from knowledge_arsenal.models.sources import (
    BlueprintRecord,
    InsightRecord,
    ProjectRecord,
    TestimonialRecord,
)

Mapper = Callable[[Mapping[str, Any]], KnowledgeEntity]

_RecordT = TypeVar("_RecordT", bound=BaseModel)

AUTHOR = "Galyarder"

# Identifier substrings that imply domain tags.
_DOMAIN_TAGS: dict[str, tuple[str, ...]] = {
    "airdrop": ("web3", "defi", "automation"),
    "galyarder": ("productivity", "personal", "ai"),
    "prompt": ("ai", "llm", "workflow"),
}

# Phrases in free text that name a portfolio project, mapped to its id.
_PROJECT_MENTIONS: dict[str, str] = {
    "airdropops": "airdropops",
    "galyarderos": "galyarderos",
    "prompt codex": "prompt-codex",
}

# Substrings of a system architecture description and the pattern they imply.
_ARCHITECTURE_PATTERNS: dict[str, str] = {
    "microservice": "microservices",
    "event-driven": "event-driven",
    "async": "async-first",
    "modular": "modular-design",
}

_INSIGHT_TITLE_WORDS = 6
_INSIGHT_SUMMARY_CHARS = 200
_MIN_TAG_LENGTH = 3


class MappingError(Exception):
    """A raw source record could not be mapped to an entity."""

    def __init__(self, kind: KnowledgeType, record_id: str | None, reason: str) -> None:
        """Record which kind and record failed, and why."""
        self.kind = kind
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"{kind.value} record {record_id or '<unknown>'}: {reason}")


# -- Mappers --


def map_project(raw: Mapping[str, Any]) -> KnowledgeEntity:
    """Map a project write-up to a project case study entity."""
    record = _parse(ProjectRecord, KnowledgeType.PROJECT_CASE_STUDY, raw)
    impact = BusinessImpact(
        roi_improvement=record.metrics.get("roi"),
        efficiency_gain=record.metrics.get("efficiency_gain"),
        time_saved=record.metrics.get("time_saved"),
        cost_reduction=record.metrics.get("cost_reduction"),
    )
    tags = [
        "project",
        record.status,
        *(tech.lower() for tech in record.tech_stack),
        *record.metrics.keys(),
        *_domain_tags([record.id]),
    ]
    entity = KnowledgeEntity(
        id=f"project_{record.id}",
        type=KnowledgeType.PROJECT_CASE_STUDY,
        title=record.project_name,
        content=_project_content(record),
        summary=record.objective,
        metadata=KnowledgeMetadata(
            source="portfolio_projects",
            author=AUTHOR,
            tags=tags,
            category=KnowledgeType.PROJECT_CASE_STUDY.value,
            subcategory=record.status,
            confidence_score=1.0,
            relevance_score=_project_relevance(record),
            access_level=AccessLevel.PUBLIC,
            project_associations=[record.id],
            technology_stack=record.tech_stack,
            business_impact=None if impact.is_empty() else impact,
            verification_status=VerificationStatus.VERIFIED,
        ),
        attributes={
            "status": record.status,
            "metrics": dict(record.metrics),
            "architecture_patterns": _architecture_patterns(record.system_architecture),
            "team_size": 1,
            "duration_months": max(1, (len(record.tech_stack) + len(record.metrics)) // 2),
        },
    )
    return _stamp(entity)


def map_blueprint(raw: Mapping[str, Any]) -> KnowledgeEntity:
    """Map a blueprint node to an architectural principle entity."""
    record = _parse(BlueprintRecord, KnowledgeType.ARCHITECTURAL_PRINCIPLE, raw)
    tags = [
        "blueprint",
        "architecture",
        record.category,
        *record.label.lower().split(),
        *(word for example in record.examples for word in example.lower().split()[:2]),
    ]
    relationships = []
    if record.parent_node:
        relationships.append(
            KnowledgeRelationship(
                target_id=f"blueprint_{record.parent_node}",
                relationship_type=RelationshipType.EXTENDS,
                strength=0.9,
                context="Hierarchical blueprint relationship",
                bidirectional=False,
                validated=True,
            )
        )
    mention_text = " ".join([record.description, record.implementation or "", *record.examples])
    entity = KnowledgeEntity(
        id=f"blueprint_{record.id}",
        type=KnowledgeType.ARCHITECTURAL_PRINCIPLE,
        title=record.label,
        content=_blueprint_content(record),
        summary=record.description,
        metadata=KnowledgeMetadata(
            source="architectural_blueprint",
            author=AUTHOR,
            tags=[tag for tag in tags if len(tag) >= _MIN_TAG_LENGTH],
            category=KnowledgeType.ARCHITECTURAL_PRINCIPLE.value,
            subcategory=record.category,
            confidence_score=0.95,
            relevance_score=_blueprint_relevance(record),
            access_level=AccessLevel.PUBLIC,
            project_associations=_mentioned_projects(mention_text),
            verification_status=VerificationStatus.VERIFIED,
        ),
        attributes={
            "category": record.category,
            "is_section_header": record.is_section_header,
            "parent": record.parent_node,
            "implementation_examples": list(record.examples),
        },
        relationships=relationships,
    )
    return _stamp(entity)


def map_insight(raw: Mapping[str, Any]) -> KnowledgeEntity:
    """Map a free-text insight to an insight entity."""
    record = _parse(InsightRecord, KnowledgeType.INSIGHT, raw)
    entity = KnowledgeEntity(
        id=f"insight_{record.id}",
        type=KnowledgeType.INSIGHT,
        title=_insight_title(record),
        content=_insight_content(record),
        summary=_truncate(record.text, _INSIGHT_SUMMARY_CHARS),
        metadata=KnowledgeMetadata(
            source="galyarder_insights",
            author=AUTHOR,
            tags=["insight", *record.context_keywords, record.category],
            category=KnowledgeType.INSIGHT.value,
            subcategory=record.category,
            confidence_score=0.9,
            relevance_score=0.85,
            access_level=AccessLevel.PUBLIC,
            project_associations=_mentioned_projects(record.text),
            verification_status=VerificationStatus.VERIFIED,
        ),
        attributes={
            "category": record.category,
            "context_keywords": list(record.context_keywords),
        },
    )
    return _stamp(entity)


def map_testimonial(raw: Mapping[str, Any]) -> KnowledgeEntity:
    """Map a client testimonial to a testimonial entity."""
    record = _parse(TestimonialRecord, KnowledgeType.TESTIMONIAL, raw)
    related = [ref for ref in (record.related_project_id, record.related_expertise_id) if ref]
    tags = [
        "testimonial",
        "client-feedback",
        record.category,
        re.sub(r"\s+", "-", record.company.strip().lower()),
        *related,
        *_domain_tags([record.id, *related]),
    ]
    relationships = []
    if record.related_project_id:
        relationships.append(
            KnowledgeRelationship(
                target_id=f"project_{record.related_project_id}",
                relationship_type=RelationshipType.VALIDATES,
                strength=0.95,
                context="Client testimonial validates project outcomes",
                bidirectional=False,
                validated=True,
            )
        )
    entity = KnowledgeEntity(
        id=f"testimonial_{record.id}",
        type=KnowledgeType.TESTIMONIAL,
        title=f"Client Testimonial: {record.author} - {record.company}",
        content=_testimonial_content(record),
        summary=record.quote,
        metadata=KnowledgeMetadata(
            source="client_testimonials",
            author=record.author,
            tags=tags,
            category=KnowledgeType.TESTIMONIAL.value,
            subcategory=record.category,
            confidence_score=1.0,
            relevance_score=_testimonial_relevance(record),
            access_level=AccessLevel.PUBLIC,
            project_associations=[record.related_project_id] if record.related_project_id else [],
            client_associations=[record.company],
            business_impact=BusinessImpact(roi_improvement=record.impact) if record.impact else None,
            verification_status=VerificationStatus.VERIFIED,
        ),
        attributes={
            "role": record.role,
            "company": record.company,
            "category": record.category,
            "impact": record.impact,
            "related_expertise": record.related_expertise_id,
        },
        relationships=relationships,
    )
    return _stamp(entity)


# -- Registry --


class MapperRegistry:
    """Dispatch table from source kind to mapper function."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._mappers: dict[KnowledgeType, Mapper] = {}

    def register(self, kind: KnowledgeType, mapper: Mapper) -> None:
        """Register (or replace) the mapper for a source kind."""
        self._mappers[kind] = mapper

    def get(self, kind: KnowledgeType) -> Mapper | None:
        """Return the mapper for a kind, or None if none is registered."""
        return self._mappers.get(kind)

    def __contains__(self, kind: object) -> bool:
        return kind in self._mappers

    @property
    def kinds(self) -> list[KnowledgeType]:
        """Registered kinds, in registration order."""
        return list(self._mappers)


def default_registry() -> MapperRegistry:
    """Registry with the four built-in source kinds."""
    registry = MapperRegistry()
    registry.register(KnowledgeType.PROJECT_CASE_STUDY, map_project)
    registry.register(KnowledgeType.ARCHITECTURAL_PRINCIPLE, map_blueprint)
    registry.register(KnowledgeType.INSIGHT, map_insight)
    registry.register(KnowledgeType.TESTIMONIAL, map_testimonial)
    return registry


# -- Parsing --


def _parse(model: type[_RecordT], kind: KnowledgeType, raw: Mapping[str, Any]) -> _RecordT:
    """Validate a raw record, converting any failure into a MappingError."""
    if not isinstance(raw, Mapping):
        raise MappingError(kind, None, f"expected a mapping, got {type(raw).__name__}")
    try:
        return model.model_validate(dict(raw))
    except ValidationError as e:
        record_id = raw.get("id")
        raise MappingError(
            kind, str(record_id) if record_id is not None else None, _describe(e)
        ) from e


def _describe(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "record"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def _stamp(entity: KnowledgeEntity) -> KnowledgeEntity:
    entity.checksum = entity.compute_checksum()
    return entity


# -- Content rendering --


def _render(title: str, sections: Iterable[tuple[str, str | None]]) -> str:
    """Render a markdown document, skipping sections with no body."""
    blocks = [f"# {title}"]
    for heading, body in sections:
        if body:
            blocks.append(f"## {heading}\n{body}")
    return "\n\n".join(blocks)


def _bullets(items: Iterable[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _project_content(record: ProjectRecord) -> str:
    metrics = _bullets(f"{key.replace('_', ' ')}: {value}" for key, value in record.metrics.items())
    return _render(
        record.project_name,
        [
            ("Objective", record.objective),
            ("System Architecture", record.system_architecture),
            ("Outcome", record.outcome),
            ("Technical Implementation", f"Technology Stack: {', '.join(record.tech_stack)}"),
            ("Data Flow", record.visual_flow),
            ("Performance Metrics", metrics),
            ("Status", f"Current Status: {record.status.upper()}"),
        ],
    )


def _blueprint_content(record: BlueprintRecord) -> str:
    kind = "Section Header" if record.is_section_header else "Implementation Detail"
    return _render(
        record.label,
        [
            ("Description", record.description),
            ("Implementation", record.implementation),
            ("Examples", _bullets(record.examples)),
            ("Category", f"{record.category} - {kind}"),
            ("Parent Principle", record.parent_node),
        ],
    )


def _insight_content(record: InsightRecord) -> str:
    lines = [record.text, "", f"Category: {record.category}"]
    if record.context_keywords:
        lines.append(f"Keywords: {', '.join(record.context_keywords)}")
    return "\n".join(lines)


def _testimonial_content(record: TestimonialRecord) -> str:
    client = _bullets(
        [
            f"**Name**: {record.author}",
            f"**Role**: {record.role}",
            f"**Company**: {record.company}",
            f"**Category**: {record.category}",
        ]
    )
    return _render(
        f"Client Testimonial: {record.company}",
        [
            ("Quote", f'"{record.quote}"'),
            ("Client Information", client),
            ("Business Impact", record.impact),
            ("Related Project", record.related_project_id),
            ("Related Expertise", record.related_expertise_id),
        ],
    )


def _insight_title(record: InsightRecord) -> str:
    words = record.text.split()
    snippet = " ".join(words[:_INSIGHT_TITLE_WORDS])
    suffix = "..." if len(words) > _INSIGHT_TITLE_WORDS else ""
    return f"{record.category.capitalize()}: {snippet}{suffix}"


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


# -- Heuristics --


def _domain_tags(identifiers: Iterable[str]) -> list[str]:
    tags: list[str] = []
    for identifier in identifiers:
        lowered = identifier.lower()
        for needle, implied in _DOMAIN_TAGS.items():
            if needle in lowered:
                tags.extend(implied)
    return tags


def _mentioned_projects(text: str) -> list[str]:
    lowered = text.lower()
    return [project for phrase, project in _PROJECT_MENTIONS.items() if phrase in lowered]


def _architecture_patterns(text: str) -> list[str]:
    lowered = text.lower()
    return [pattern for needle, pattern in _ARCHITECTURE_PATTERNS.items() if needle in lowered]


def _project_relevance(record: ProjectRecord) -> float:
    relevance = 0.7
    if record.status == "production":
        relevance += 0.2
    if len(record.metrics) > 2:
        relevance += 0.1
    return round(min(relevance, 1.0), 4)


def _blueprint_relevance(record: BlueprintRecord) -> float:
    relevance = 0.8
    if record.is_section_header:
        relevance += 0.1
    if record.examples:
        relevance += 0.1
    return round(min(relevance, 1.0), 4)


def _testimonial_relevance(record: TestimonialRecord) -> float:
    relevance = 0.9
    if record.impact:
        relevance += 0.05
    if record.related_project_id:
        relevance += 0.05
    return round(min(relevance, 1.0), 4)
