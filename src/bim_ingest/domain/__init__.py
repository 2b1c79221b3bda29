"""Domain Layer.

Contains the canonical element model, exceptions and repository interfaces.
This layer has NO external dependencies (no SQLAlchemy, no IfcOpenShell).
"""
from __future__ import annotations

from bim_ingest.domain.exceptions import (
    DomainError,
    EntityNotFoundError,
    FileTooLargeError,
    FormatError,
    ObjectStorageError,
    RepositoryError,
    UnsupportedFormatError,
    ValidationError,
)
from bim_ingest.domain.models import (
    NO_FILTER,
    ElementFilter,
    ElementRecord,
    ElementResolutionFailure,
    GeometrySummary,
    ModelVersion,
    NormalizedElement,
    ParsedModel,
    ParseMetadata,
    PropertyEntry,
    ResolutionStage,
    Scalar,
    Vector3,
    VersionStatus,
)
from bim_ingest.domain.repositories import (
    IElementRepository,
    IModelVersionRepository,
    IObjectStorage,
    IUnitOfWork,
)

__all__ = [
    # Exceptions
    "DomainError",
    "EntityNotFoundError",
    "ValidationError",
    "FormatError",
    "UnsupportedFormatError",
    "FileTooLargeError",
    "RepositoryError",
    "ObjectStorageError",
    # Models
    "NormalizedElement",
    "ElementRecord",
    "GeometrySummary",
    "PropertyEntry",
    "Scalar",
    "Vector3",
    "ParsedModel",
    "ParseMetadata",
    "ElementResolutionFailure",
    "ResolutionStage",
    "ElementFilter",
    "NO_FILTER",
    "ModelVersion",
    "VersionStatus",
    # Repositories
    "IElementRepository",
    "IModelVersionRepository",
    "IObjectStorage",
    "IUnitOfWork",
]
