"""Environment-variable-based configuration."""

import os
from pathlib import Path


def get_db_path() -> Path:
    """Return the database file path from KA_DB_PATH."""
    raw = os.environ.get("KA_DB_PATH", "~/.local/share/knowledge_arsenal/knowledge.db")
    return Path(raw).expanduser()


def get_sources_dir() -> Path | None:
    """Return the source data directory from KA_SOURCES_DIR, or None for bundled data."""
    raw = os.environ.get("KA_SOURCES_DIR")
    if not raw:
        return None
    return Path(raw).expanduser()


def get_embedding_provider() -> str:
    """Return the embedding provider name from KA_EMBEDDING_PROVIDER."""
    return os.environ.get("KA_EMBEDDING_PROVIDER", "hash").lower()


def get_embedding_model() -> str:
    """Return the Ollama embedding model name from KA_EMBEDDING_MODEL."""
    return os.environ.get("KA_EMBEDDING_MODEL", "nomic-embed-text")


def get_embedding_dim() -> int:
    """Return the embedding vector dimensions from KA_EMBEDDING_DIM."""
    return int(os.environ.get("KA_EMBEDDING_DIM", "1536"))


def get_ollama_url() -> str:
    """Return the Ollama API URL from KA_OLLAMA_URL."""
    return os.environ.get("KA_OLLAMA_URL", "http://localhost:11434")


def get_ollama_timeout() -> float:
    """Return the Ollama timeout in seconds from KA_OLLAMA_TIMEOUT."""
    return float(os.environ.get("KA_OLLAMA_TIMEOUT", "10.0"))


def get_search_top_k() -> int:
    """Return the default number of search results from KA_SEARCH_TOP_K."""
    return int(os.environ.get("KA_SEARCH_TOP_K", "8"))


def get_log_level() -> str:
    """Return the logging level from KA_LOG_LEVEL."""
    return os.environ.get("KA_LOG_LEVEL", "WARNING").upper()
