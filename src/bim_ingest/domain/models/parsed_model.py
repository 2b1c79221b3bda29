"""Parsed Model Envelope.

Adapter output: the normalized elements of one ingestion call plus
parse metadata and per-element diagnostics.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from bim_ingest.domain.models.element import NormalizedElement


class ResolutionStage(str, Enum):
    """Where a per-element resolution failed."""

    GEOMETRY = "geometry"
    PROPERTIES = "properties"
    # Entity record unreadable; the element is kept with what is known
    RECORD = "record"
    # Source guid repeated an earlier element; a new one was synthesized
    GUID = "guid"


@dataclass(frozen=True)
class ElementResolutionFailure:
    """Non-fatal failure resolving one element.

    Never raised; carried in Failure results and ParsedModel.diagnostics.
    """

    element_ref: str
    stage: ResolutionStage
    reason: str
    guid: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "element_ref": self.element_ref,
            "guid": self.guid,
            "stage": self.stage.value,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ParseMetadata:
    """Facts about a single parse."""

    source_format: str
    element_count: int
    schema: str | None = None
    storeys_detected: int = 0
    model_name: str | None = None
    parsed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema": self.schema,
            "parsed_at": self.parsed_at.isoformat(),
            "element_count": self.element_count,
            "storeys_detected": self.storeys_detected,
            "source_format": self.source_format,
            "model_name": self.model_name,
        }


@dataclass(frozen=True)
class ParsedModel:
    """Immutable result of one adapter invocation."""

    elements: tuple[NormalizedElement, ...]
    metadata: ParseMetadata | None = None
    diagnostics: tuple[ElementResolutionFailure, ...] = ()

    @classmethod
    def create(
        cls,
        elements: list[NormalizedElement],
        metadata: ParseMetadata | None = None,
        diagnostics: list[ElementResolutionFailure] | None = None,
    ) -> ParsedModel:
        return cls(
            elements=tuple(elements),
            metadata=metadata,
            diagnostics=tuple(diagnostics or ()),
        )

    def __len__(self) -> int:
        return len(self.elements)
