"""Deterministic hash-expansion embeddings.

Stands in for a real embedding model: vectors carry no semantics, but
identical text always yields bit-identical vectors.
"""

import hashlib
import math
import struct

from knowledge_arsenal.config import get_embedding_dim

_WORD = struct.Struct(">I")
_MAX_WORD = 0xFFFFFFFF


def hash_expand(text: str, dimensions: int) -> list[float]:
    """Expand ``text`` into a unit vector of ``dimensions`` floats.

    SHA-256 is run in counter mode over the UTF-8 bytes; each 32-bit word
    of output becomes one component in [-1, 1] before L2 normalization.
    """
    if dimensions <= 0:
        raise ValueError(f"dimensions must be positive, got {dimensions}")
    data = text.encode("utf-8")
    values: list[float] = []
    block = 0
    while len(values) < dimensions:
        digest = hashlib.sha256(block.to_bytes(4, "big") + data).digest()
        values.extend(word / _MAX_WORD * 2.0 - 1.0 for (word,) in _WORD.iter_unpack(digest))
        block += 1
    del values[dimensions:]

    norm = math.sqrt(sum(v * v for v in values))
    if norm == 0.0:
        return values
    return [v / norm for v in values]


class HashEmbeddingProvider:
    """Placeholder provider backed by ``hash_expand``."""

    model = "hash-expansion"
    version = "1.0"

    def __init__(self, dimensions: int | None = None) -> None:
        """Initialize with the vector length (defaults to KA_EMBEDDING_DIM)."""
        self.dimensions = dimensions if dimensions is not None else get_embedding_dim()

    async def embed(self, text: str) -> list[float]:
        """Return the vector for a single text."""
        return hash_expand(text, self.dimensions)

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Return vectors for several texts, in input order."""
        return [hash_expand(text, self.dimensions) for text in texts]

    async def close(self) -> None:
        """Nothing to release."""
