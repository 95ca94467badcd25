"""Ollama embedding client."""

import logging

import httpx

from knowledge_arsenal.config import (
    get_embedding_dim,
    get_embedding_model,
    get_ollama_timeout,
    get_ollama_url,
)
from knowledge_arsenal.embeddings.provider import EmbeddingError

logger = logging.getLogger(__name__)


class OllamaEmbeddingProvider:
    """Generates embeddings via Ollama's /api/embed endpoint.

    Every request is bounded by KA_OLLAMA_TIMEOUT; a timeout, an HTTP
    error or a vector of the wrong length raises ``EmbeddingError`` so the
    caller can drop just the affected entity.
    """

    version = "1.0"

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        *,
        model: str | None = None,
        dimensions: int | None = None,
    ) -> None:
        """Initialize with an optional HTTP client, model name and vector length."""
        self._http = http_client
        self._available: bool | None = None
        self.model = model or get_embedding_model()
        self.dimensions = dimensions if dimensions is not None else get_embedding_dim()

    async def is_available(self) -> bool:
        """Check if Ollama is reachable. Only caches success; retries on failure."""
        if self._available is True:
            return True
        try:
            client = self._get_client()
            resp = await client.get(f"{get_ollama_url()}/api/tags", timeout=get_ollama_timeout())
            resp.raise_for_status()
            self._available = True
        except httpx.HTTPError:
            logger.warning("Ollama not available at %s", get_ollama_url())
            self._available = None
        return self._available is True

    async def embed(self, text: str) -> list[float]:
        """Return the vector for a single text."""
        vectors = await self._request([text])
        return vectors[0]

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Return vectors for several texts in one request, in input order."""
        if not texts:
            return []
        return await self._request(texts)

    async def _request(self, texts: list[str]) -> list[list[float]]:
        timeout = get_ollama_timeout()
        try:
            client = self._get_client()
            resp = await client.post(
                f"{get_ollama_url()}/api/embed",
                json={"model": self.model, "input": texts},
                timeout=timeout,
            )
            resp.raise_for_status()
            # Ollama /api/embed returns {"embeddings": [[...], ...]}
            vectors = resp.json()["embeddings"]
        except httpx.TimeoutException as e:
            raise EmbeddingError(f"Embedding request timed out after {timeout:g}s") from e
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        if len(vectors) != len(texts):
            raise EmbeddingError(f"Expected {len(texts)} vectors, got {len(vectors)}")
        for vec in vectors:
            if len(vec) != self.dimensions:
                raise EmbeddingError(
                    f"Model {self.model} returned {len(vec)} dimensions, expected {self.dimensions}"
                )
        return [[float(v) for v in vec] for vec in vectors]

    def _get_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient()
        return self._http

    async def close(self) -> None:
        """Close the HTTP client if open."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
