"""Model Version Domain Entity.

One ingested revision of a building model; elements are stored under it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from bim_ingest.domain.models.parsed_model import ParseMetadata


class VersionStatus(str, Enum):
    """Ingestion lifecycle of a model version."""

    PENDING = "pending"
    PARSED = "parsed"
    FAILED = "failed"


@dataclass
class ModelVersion:
    """Model Version.

    Attributes:
        id: Version UUID
        model_name: Human-readable model name
        source_format: Format tag the raw file was parsed with
        object_ref: Object storage key of the raw file
        status: Ingestion status
        schema: Source schema (e.g. "IFC4") once parsed
        element_count: Number of persisted elements
        storeys_detected: Storeys found during the spatial walk
        parsed_at: When the parse finished
        error: Failure message for failed versions
    """

    id: UUID
    model_name: str
    source_format: str
    object_ref: str
    status: VersionStatus = VersionStatus.PENDING
    schema: str | None = None
    element_count: int = 0
    storeys_detected: int = 0
    parsed_at: datetime | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(cls, model_name: str, source_format: str, object_ref: str) -> ModelVersion:
        return cls(
            id=uuid4(),
            model_name=model_name,
            source_format=source_format,
            object_ref=object_ref,
        )

    def mark_parsed(self, metadata: ParseMetadata, element_count: int) -> None:
        """Record a successful parse."""
        self.status = VersionStatus.PARSED
        self.schema = metadata.schema
        self.element_count = element_count
        self.storeys_detected = metadata.storeys_detected
        self.parsed_at = metadata.parsed_at
        self.error = None

    def mark_failed(self, error: str) -> None:
        self.status = VersionStatus.FAILED
        self.error = error

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "model_name": self.model_name,
            "source_format": self.source_format,
            "object_ref": self.object_ref,
            "status": self.status.value,
            "schema": self.schema,
            "element_count": self.element_count,
            "storeys_detected": self.storeys_detected,
            "parsed_at": self.parsed_at.isoformat() if self.parsed_at else None,
            "error": self.error,
        }
