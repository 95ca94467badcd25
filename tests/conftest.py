"""Shared test fixtures."""

import asyncio
from typing import Any

import pytest
import pytest_asyncio

from knowledge_arsenal.db.connection import create_connection
from knowledge_arsenal.embeddings.hashing import HashEmbeddingProvider
from knowledge_arsenal.embeddings.provider import EmbeddingError
from knowledge_arsenal.ingest.orchestrator import IngestionOrchestrator
from knowledge_arsenal.ingest.sources import SourceBatch, SourceRegistry
from knowledge_arsenal.models.entity import (
    KnowledgeEntity,
    KnowledgeMetadata,
    KnowledgeType,
)
from knowledge_arsenal.store.knowledge_store import KnowledgeStore

TEST_DIM = 16


@pytest_asyncio.fixture
async def db():
    """In-memory database with full schema."""
    conn = await create_connection(":memory:")
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def store(db):
    """Knowledge store backed by in-memory DB."""
    return KnowledgeStore(db)


@pytest.fixture
def embedder():
    """Deterministic hash embedder with short vectors."""
    return HashEmbeddingProvider(dimensions=TEST_DIM)


@pytest_asyncio.fixture
async def orchestrator(store, embedder):
    """Orchestrator with no registered sources; tests pass batches to run()."""
    return IngestionOrchestrator(store, embedder, sources=SourceRegistry())


class FailingEmbedder:
    """Embeds like the hash provider but fails for texts containing a marker."""

    model = "failing-test"
    version = "0"

    def __init__(self, fail_on: str = "EMBED_FAIL", dimensions: int = TEST_DIM):
        self.fail_on = fail_on
        self.dimensions = dimensions
        self._inner = HashEmbeddingProvider(dimensions=dimensions)
        self.calls = 0

    async def embed(self, text: str) -> list[float]:
        return (await self.embed_many([text]))[0]

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        self.calls += 1
        if any(self.fail_on in text for text in texts):
            raise EmbeddingError("Embedding request timed out after 10s")
        return await self._inner.embed_many(texts)

    async def close(self) -> None:
        pass


class BlockingEmbedder:
    """Hash embedder that waits for ``release`` before its first answer."""

    model = "blocking-test"
    version = "0"

    def __init__(self, dimensions: int = TEST_DIM):
        self.dimensions = dimensions
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self._inner = HashEmbeddingProvider(dimensions=dimensions)

    async def embed(self, text: str) -> list[float]:
        return (await self.embed_many([text]))[0]

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        self.started.set()
        await self.release.wait()
        return await self._inner.embed_many(texts)

    async def close(self) -> None:
        pass


# -- Raw record factories --


def make_project(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": "airdropops",
        "project_name": "AirdropOps",
        "objective": "Automate airdrop farming across chains",
        "system_architecture": "Event-driven async workers with modular adapters",
        "outcome": "Hands-off farming with audited transactions",
        "metrics": {"roi": "300%", "efficiency_gain": "85%", "transactions_processed": "10k"},
        "tech_stack": ["n8n", "Web3.js", "LangChain"],
        "visual_flow": "Scheduler -> Wallet pool -> Chain adapters",
        "status": "production",
    }
    record.update(overrides)
    return record


def make_blueprint(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": "async-architecture",
        "label": "Async Architecture",
        "parent_node": None,
        "category": "architecture",
        "description": "Design every boundary as a queue so parts evolve independently",
        "implementation": "Message queues between AirdropOps services",
        "examples": ["Event bus for wallet updates", "Retry queues"],
    }
    record.update(overrides)
    return record


def make_insight(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": "0",
        "text": "Clear beats clever when the system has to be debugged at 3 AM by someone tired.",
        "context_keywords": ["principles", "design"],
        "category": "principle",
    }
    record.update(overrides)
    return record


def make_testimonial(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": "airdrop-ops-1",
        "quote": "The automation paid for itself in a week.",
        "author": "Dana Reyes",
        "role": "Founder",
        "company": "Chain Labs",
        "related_project_id": "airdropops",
        "category": "project",
        "impact": "3x ROI in the first month",
    }
    record.update(overrides)
    return record


def make_batch(kind: KnowledgeType, records: list[Any], source: str = "test") -> SourceBatch:
    return SourceBatch(kind=kind, source=source, records=records)


def make_entity(
    entity_id: str,
    title: str = "Title",
    content: str = "Content",
    *,
    entity_type: KnowledgeType = KnowledgeType.INSIGHT,
    source: str = "test_source",
    category: str = "insight",
    subcategory: str | None = None,
    tags: list[str] | None = None,
    projects: list[str] | None = None,
    tech: list[str] | None = None,
) -> KnowledgeEntity:
    return KnowledgeEntity(
        id=entity_id,
        type=entity_type,
        title=title,
        content=content,
        summary=content[:50],
        metadata=KnowledgeMetadata(
            source=source,
            author="tester",
            tags=tags or [],
            category=category,
            subcategory=subcategory,
            project_associations=projects or [],
            technology_stack=tech or [],
        ),
    )
