"""Compact output formatters for MCP tool responses."""

from knowledge_arsenal.graph.queries import KnowledgeStats
from knowledge_arsenal.models.entity import KnowledgeEntity
from knowledge_arsenal.models.job import IngestionJob
from knowledge_arsenal.models.search import ScoredEntity


def format_entity_header(entity: KnowledgeEntity, score: float | None = None) -> str:
    """Format: [project_airdropops] project_case_study | AirdropOps (95%)."""
    line = f"[{entity.id}] {entity.type.value} | {entity.title}"
    if score is not None:
        line += f" ({score:.0%})"
    return line


def format_entity_meta(entity: KnowledgeEntity) -> str:
    """Format: #tag1 #tag2 | projects: a, b | v2."""
    parts: list[str] = []
    if entity.metadata.tags:
        parts.append(" ".join(f"#{t}" for t in entity.metadata.tags))
    if entity.metadata.project_associations:
        parts.append(f"projects: {', '.join(entity.metadata.project_associations)}")
    parts.append(f"v{entity.version}")
    return " | ".join(parts)


def format_scored_entity(result: ScoredEntity) -> str:
    """Header + summary + meta + related ids. For kb_search."""
    lines = [format_entity_header(result.entity, result.score)]
    if result.entity.summary:
        lines.append(f"  {result.entity.summary}")
    lines.append(f"  {format_entity_meta(result.entity)}")
    if result.explanation:
        lines.append(f"  matched: {'; '.join(result.explanation)}")
    if result.related_entities:
        lines.append(f"  ↳ related: {', '.join(result.related_entities)}")
    return "\n".join(lines)


def format_result_list(
    formatted: list[str],
    header: str | None = None,
    note: str | None = None,
) -> str:
    """Count + note + entries joined by blank lines."""
    if not formatted:
        return "No results found."

    lines: list[str] = []
    if header:
        lines.append(header)
    lines.append(f"{len(formatted)} result(s)")
    if note:
        lines.append(f"Note: {note}")
    lines.append("")
    lines.append("\n\n".join(formatted))
    return "\n".join(lines)


def format_job_status(job: IngestionJob) -> str:
    """Job id, status, counts and every error verbatim."""
    view = job.status_view()
    lines = [
        f"Job {view['id']}: {view['status']}",
        f"Entities: {view['entities_processed']} processed, "
        f"{view['entities_created']} created, "
        f"{job.entities_updated} updated, "
        f"{job.entities_unchanged} unchanged",
    ]
    version = job.metadata.get("snapshot_version")
    if version is not None:
        lines.append(f"Snapshot: v{version}")
    dropped = job.metadata.get("dropped_ids") or []
    if dropped:
        lines.append(f"Dropped: {', '.join(dropped)}")
    errors = view["errors"]
    if errors:
        lines.append(f"Errors ({len(errors)}):")
        lines.extend(f"  - {e}" for e in errors)
    return "\n".join(lines)


def format_stats(stats: KnowledgeStats) -> str:
    """Counts by type and category, relationship density and hubs."""
    lines = [
        f"Knowledge base v{stats.version} ({stats.last_updated})",
        f"Entities: {stats.total_entities}",
    ]
    if stats.entities_by_type:
        by_type = ", ".join(f"{k}={v}" for k, v in sorted(stats.entities_by_type.items()))
        lines.append(f"  by type: {by_type}")
    if stats.entities_by_category:
        by_cat = ", ".join(f"{k}={v}" for k, v in sorted(stats.entities_by_category.items()))
        lines.append(f"  by category: {by_cat}")
    lines.append(
        f"Relationships: {stats.total_relationships} "
        f"(avg {stats.average_relationships_per_entity:.2f}/entity, "
        f"density {stats.relationship_density:.3f})"
    )
    if stats.most_connected:
        lines.append("Most connected:")
        lines.extend(
            f"  [{c.entity_id}] {c.title} ({c.connection_count})" for c in stats.most_connected
        )
    return "\n".join(lines)
