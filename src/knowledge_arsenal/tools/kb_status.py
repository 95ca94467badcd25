"""kb_job_status and kb_stats MCP tools."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from knowledge_arsenal.graph.queries import summarize_snapshot
from knowledge_arsenal.store.knowledge_store import KnowledgeStore
from knowledge_arsenal.tools.formatters import format_job_status, format_stats

logger = logging.getLogger(__name__)


def register_kb_status(mcp: FastMCP) -> None:
    """Register the kb_job_status and kb_stats tools with the MCP server."""

    @mcp.tool()
    async def kb_job_status(
        job_id: Annotated[
            str | None, Field(description="Job id; omit for the most recent job")
        ] = None,
        ctx: Context | None = None,
    ) -> str:
        """Show an ingestion job's status, counts and errors."""
        if ctx is None:
            raise RuntimeError("Context not injected")
        store: KnowledgeStore = ctx.lifespan_context["store"]

        job = await store.get_job(job_id) if job_id else await store.latest_job()
        if job is None:
            logger.debug("No ingestion job found for %s", job_id or "latest")
            return f"Error: job {job_id} not found" if job_id else "No ingestion jobs yet."
        return format_job_status(job)

    @mcp.tool()
    async def kb_stats(ctx: Context | None = None) -> str:
        """Summarize the current snapshot: counts, relationship density, hubs."""
        if ctx is None:
            raise RuntimeError("Context not injected")
        store: KnowledgeStore = ctx.lifespan_context["store"]

        snapshot = store.current
        if snapshot is None:
            logger.debug("kb_stats called before any snapshot was written")
            return "Knowledge base is empty. Run kb_ingest first."
        return format_stats(summarize_snapshot(snapshot))
