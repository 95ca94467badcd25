"""Embedding provider module."""

from knowledge_arsenal.config import get_embedding_provider
from knowledge_arsenal.embeddings.hashing import HashEmbeddingProvider, hash_expand
from knowledge_arsenal.embeddings.ollama import OllamaEmbeddingProvider
from knowledge_arsenal.embeddings.provider import EmbeddingError, EmbeddingProvider


def create_embedding_provider(name: str | None = None) -> EmbeddingProvider:
    """Create an embedding provider by name (defaults to KA_EMBEDDING_PROVIDER)."""
    provider = name or get_embedding_provider()
    if provider == "hash":
        return HashEmbeddingProvider()
    if provider == "ollama":
        return OllamaEmbeddingProvider()
    raise ValueError(f"Unknown embedding provider: {provider}")


__all__ = [
    "EmbeddingError",
    "EmbeddingProvider",
    "HashEmbeddingProvider",
    "OllamaEmbeddingProvider",
    "create_embedding_provider",
    "hash_expand",
]
