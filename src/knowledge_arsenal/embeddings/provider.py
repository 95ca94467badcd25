"""Embedding provider protocol for pluggable vector backends."""

from typing import Protocol, runtime_checkable


class EmbeddingError(Exception):
    """Raised when a vector cannot be produced for a text."""


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Produces fixed-length vectors for text.

    The same input text must always produce the same vector, and every
    vector has exactly ``dimensions`` components. Failures raise
    ``EmbeddingError``.
    """

    model: str
    version: str
    dimensions: int

    async def embed(self, text: str) -> list[float]:
        """Return the vector for a single text."""
        ...

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Return vectors for several texts, in input order."""
        ...

    async def close(self) -> None:
        """Release resources."""
        ...
