"""Ingestion job models."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class JobStatus(StrEnum):
    """Lifecycle of an ingestion job: pending → processing → completed | failed."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class IngestionJob(BaseModel):
    """One batch run of the ingestion pipeline."""

    id: str
    source: str
    status: JobStatus = JobStatus.PENDING
    entities_processed: int = 0
    entities_created: int = 0
    entities_updated: int = 0
    entities_unchanged: int = 0
    errors: list[str] = Field(default_factory=list)
    started_at: datetime
    completed_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_finished(self) -> bool:
        """True once the job reached a terminal status."""
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)

    def status_view(self) -> dict[str, Any]:
        """The job status document surfaced to UI collaborators."""
        return {
            "id": self.id,
            "status": self.status.value,
            "entities_processed": self.entities_processed,
            "entities_created": self.entities_created,
            "errors": list(self.errors),
        }
