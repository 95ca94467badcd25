"""FastMCP server with lifespan management and tool registration."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from knowledge_arsenal.config import get_db_path, get_embedding_provider, get_log_level
from knowledge_arsenal.db.connection import create_connection
from knowledge_arsenal.embeddings import OllamaEmbeddingProvider, create_embedding_provider
from knowledge_arsenal.ingest.orchestrator import IngestionOrchestrator
from knowledge_arsenal.ingest.sources import default_sources
from knowledge_arsenal.search.engine import SearchEngine
from knowledge_arsenal.store.knowledge_store import KnowledgeStore
from knowledge_arsenal.tools.kb_ingest import register_kb_ingest
from knowledge_arsenal.tools.kb_search import register_kb_search
from knowledge_arsenal.tools.kb_status import register_kb_status


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Manage database connection, snapshot store and embedding provider lifecycle."""
    # Configure logging to stderr (stdout is MCP stdio transport)
    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger(__name__)

    db_path = get_db_path()
    logger.info("Opening database at %s", db_path)
    db = await create_connection(db_path)

    store = KnowledgeStore(db)
    snapshot = await store.load()
    if snapshot is None:
        logger.warning("No knowledge snapshot yet; search is unavailable until kb_ingest runs")

    embedder = create_embedding_provider()
    if isinstance(embedder, OllamaEmbeddingProvider):
        # Pre-check only; each entity's embedding failure is handled at ingestion
        if await embedder.is_available():
            logger.info("Ollama available, embedding with %s", embedder.model)
        else:
            logger.warning("Ollama unavailable; ingestion will drop entities it cannot embed")
    else:
        logger.info("Embedding provider: %s", get_embedding_provider())

    orchestrator = IngestionOrchestrator(store, embedder, sources=default_sources())
    search_engine = SearchEngine(store)

    try:
        yield {
            "db": db,
            "store": store,
            "embedder": embedder,
            "orchestrator": orchestrator,
            "search_engine": search_engine,
        }
    finally:
        await embedder.close()
        await db.close()
        logger.info("Database connection closed")


_INSTRUCTIONS = """\
This server holds a portfolio knowledge base: project case studies, \
architectural principles, insights and client testimonials, normalized into \
typed entities with detected relationships.

- kb_search: Ranked lookup by phrase or keywords, optionally filtered by \
type, tags, access level or project. Each result lists related entities.
- kb_ingest: Rebuild the knowledge base from all registered sources. \
Unchanged records keep their version; only one run may be in flight.
- kb_job_status: Progress and errors of the latest (or a given) ingestion job.
- kb_stats: Entity counts, relationship density and the most connected entities.

If kb_search reports the knowledge base is unavailable, run kb_ingest first.
"""


def create_server() -> FastMCP:
    """Create and configure the MCP server with all tools."""
    mcp = FastMCP(
        "knowledge-arsenal",
        instructions=_INSTRUCTIONS,
        lifespan=lifespan,
    )

    register_kb_search(mcp)
    register_kb_ingest(mcp)
    register_kb_status(mcp)

    return mcp
