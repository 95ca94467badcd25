"""Source discovery: registered loaders that produce raw record batches."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from knowledge_arsenal.config import get_sources_dir
from knowledge_arsenal.models.entity import KnowledgeType

logger = logging.getLogger(__name__)

_BUNDLED_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass
class SourceBatch:
    """Raw records of a single source kind, as pulled from one source."""

    kind: KnowledgeType
    source: str
    records: list[Any] = field(default_factory=list)


class SourceLoadError(Exception):
    """A registered source could not be read."""


SourceLoader = Callable[[], SourceBatch]


class SourceRegistry:
    """Named source loaders, consulted in registration order."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._loaders: dict[str, SourceLoader] = {}

    def register(self, name: str, loader: SourceLoader) -> None:
        """Register (or replace) a loader under a name."""
        self._loaders[name] = loader

    @property
    def names(self) -> list[str]:
        """Registered source names."""
        return list(self._loaders)

    def load_all(self) -> tuple[list[SourceBatch], list[str]]:
        """Load every registered source.

        A source that fails to load is reported in the returned error list
        and skipped; the others are still returned.
        """
        batches: list[SourceBatch] = []
        errors: list[str] = []
        for name, loader in self._loaders.items():
            try:
                batch = loader()
            except SourceLoadError as e:
                logger.warning("Source %s unavailable: %s", name, e)
                errors.append(f"Source {name} unavailable: {e}")
                continue
            logger.info("Loaded %d %s records from %s", len(batch.records), batch.kind, name)
            batches.append(batch)
        return batches, errors


def json_file_source(
    path: Path, kind: KnowledgeType, source: str, *, index_ids: bool = False
) -> SourceLoader:
    """Loader for a JSON file holding an array of raw records.

    With ``index_ids``, records without an ``id`` get their array position
    as id, so kinds without a natural key still map to stable ids.
    """

    def load() -> SourceBatch:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise SourceLoadError(f"cannot read {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise SourceLoadError(f"invalid JSON in {path}: {e}") from e
        if not isinstance(raw, list):
            raise SourceLoadError(f"{path} must contain a JSON array")
        if index_ids:
            raw = [_with_index_id(record, i) for i, record in enumerate(raw)]
        return SourceBatch(kind=kind, source=source, records=raw)

    return load


def _with_index_id(record: Any, index: int) -> Any:
    if isinstance(record, dict) and "id" not in record:
        return {**record, "id": str(index)}
    return record


def bundled_data_dir() -> Path:
    """Directory of the portfolio data shipped with the package."""
    return _BUNDLED_DATA_DIR


def default_sources(data_dir: Path | None = None) -> SourceRegistry:
    """Registry of the four portfolio sources.

    Files are read from ``data_dir``, else KA_SOURCES_DIR, else the
    bundled data directory.
    """
    base = data_dir or get_sources_dir() or bundled_data_dir()
    registry = SourceRegistry()
    registry.register(
        "projects",
        json_file_source(
            base / "projects.json", KnowledgeType.PROJECT_CASE_STUDY, "portfolio_projects"
        ),
    )
    registry.register(
        "blueprint",
        json_file_source(
            base / "blueprint.json",
            KnowledgeType.ARCHITECTURAL_PRINCIPLE,
            "architectural_blueprint",
        ),
    )
    registry.register(
        "insights",
        json_file_source(
            base / "insights.json",
            KnowledgeType.INSIGHT,
            "galyarder_insights",
            index_ids=True,
        ),
    )
    registry.register(
        "testimonials",
        json_file_source(
            base / "testimonials.json", KnowledgeType.TESTIMONIAL, "client_testimonials"
        ),
    )
    return registry
