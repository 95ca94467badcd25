"""kb_ingest MCP tool: rebuild the knowledge base from every registered source."""

import logging

from fastmcp import FastMCP
from fastmcp.server.context import Context

from knowledge_arsenal.ingest.orchestrator import IngestionInProgressError, IngestionOrchestrator
from knowledge_arsenal.tools.formatters import format_job_status

logger = logging.getLogger(__name__)


def register_kb_ingest(mcp: FastMCP) -> None:
    """Register the kb_ingest tool with the MCP server."""

    @mcp.tool()
    async def kb_ingest(ctx: Context | None = None) -> str:
        """Run a full ingestion job over all registered sources.

        Maps every project, blueprint principle, insight and testimonial,
        embeds them, detects relationships and atomically replaces the
        knowledge snapshot. Unchanged records keep their version. Malformed
        records are reported in the job's error list without stopping
        the run.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")
        orchestrator: IngestionOrchestrator = ctx.lifespan_context["orchestrator"]

        try:
            job = await orchestrator.run_ingestion()
        except IngestionInProgressError as e:
            logger.info("kb_ingest refused: %s", e)
            return f"Error: {e}. Check progress with kb_job_status."

        return format_job_status(job)
