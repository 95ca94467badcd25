"""kb_search MCP tool: heuristic ranked search over the current snapshot."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from knowledge_arsenal.config import get_search_top_k
from knowledge_arsenal.models.entity import AccessLevel, KnowledgeType
from knowledge_arsenal.models.search import SearchFilters, SearchQuery, SearchResponse
from knowledge_arsenal.search.engine import SearchEngine, SearchUnavailableError
from knowledge_arsenal.tools.formatters import format_result_list, format_scored_entity

logger = logging.getLogger(__name__)


def format_search_response(response: SearchResponse) -> str:
    """Format ranked results with the snapshot version they came from."""
    entries = [format_scored_entity(r) for r in response.results]
    return format_result_list(
        entries,
        note=f"{response.total_candidates} candidate(s) in snapshot v{response.snapshot_version}",
    )


def register_kb_search(mcp: FastMCP) -> None:
    """Register the kb_search tool with the MCP server."""

    @mcp.tool()
    async def kb_search(
        query: Annotated[str, Field(description="Search text (phrase or keywords)")],
        types: Annotated[
            list[KnowledgeType] | None,
            Field(description="Only these entity types (e.g. project_case_study, insight)"),
        ] = None,
        tags: Annotated[
            list[str] | None, Field(description="Only entities carrying any of these tags")
        ] = None,
        access_levels: Annotated[
            list[AccessLevel] | None, Field(description="Only these access levels")
        ] = None,
        project_associations: Annotated[
            list[str] | None,
            Field(description="Only entities associated with any of these projects"),
        ] = None,
        limit: Annotated[
            int | None, Field(description="Maximum results to return (1-50)", ge=1, le=50)
        ] = None,
        ctx: Context | None = None,
    ) -> str:
        """Search the knowledge base by phrase, terms and domain keywords.

        Title and content phrase matches weigh most, then individual terms
        in title, content and source, then category and domain keyword
        boosts. Each result lists the entities it is related to.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")
        engine: SearchEngine = ctx.lifespan_context["search_engine"]

        filters = SearchFilters(
            types=types,
            tags=tags,
            access_levels=access_levels,
            project_associations=project_associations,
        )
        request = SearchQuery(query=query, filters=filters, top_k=limit or get_search_top_k())

        try:
            response = engine.search(request)
        except SearchUnavailableError as e:
            logger.info("kb_search unavailable: %s", e)
            return f"Search unavailable: {e}. Run kb_ingest first."

        return format_search_response(response)
