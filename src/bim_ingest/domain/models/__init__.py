"""Domain Models.

Canonical element model, parse envelope, filters and model versions.
"""
from __future__ import annotations

from bim_ingest.domain.models.element import (
    ElementRecord,
    GeometrySummary,
    NormalizedElement,
    PropertyEntry,
    Scalar,
    Vector3,
)
from bim_ingest.domain.models.filters import NO_FILTER, ElementFilter
from bim_ingest.domain.models.parsed_model import (
    ElementResolutionFailure,
    ParsedModel,
    ParseMetadata,
    ResolutionStage,
)
from bim_ingest.domain.models.version import ModelVersion, VersionStatus

__all__ = [
    # Element
    "NormalizedElement",
    "ElementRecord",
    "GeometrySummary",
    "PropertyEntry",
    "Scalar",
    "Vector3",
    # Parse envelope
    "ParsedModel",
    "ParseMetadata",
    "ElementResolutionFailure",
    "ResolutionStage",
    # Filters
    "ElementFilter",
    "NO_FILTER",
    # Versions
    "ModelVersion",
    "VersionStatus",
]
