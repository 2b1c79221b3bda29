"""Repository Implementations.

SQLAlchemy and in-memory implementations of the domain repository
interfaces.
"""
from __future__ import annotations

from bim_ingest.infrastructure.repositories.element_repository import ElementRepository
from bim_ingest.infrastructure.repositories.memory import (
    InMemoryElementRepository,
    InMemoryModelVersionRepository,
    InMemoryUnitOfWork,
)
from bim_ingest.infrastructure.repositories.unit_of_work import UnitOfWork
from bim_ingest.infrastructure.repositories.version_repository import ModelVersionRepository

__all__ = [
    "ElementRepository",
    "ModelVersionRepository",
    "UnitOfWork",
    "InMemoryElementRepository",
    "InMemoryModelVersionRepository",
    "InMemoryUnitOfWork",
]
