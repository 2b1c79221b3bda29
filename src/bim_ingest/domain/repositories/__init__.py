"""Repository Interfaces (Protocols).

Defines the contracts for persistence and object storage without
implementation details.
"""
from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable
from uuid import UUID

from bim_ingest.domain.models import (
    ElementFilter,
    ElementRecord,
    ModelVersion,
    NormalizedElement,
)


@runtime_checkable
class IElementRepository(Protocol):
    """Repository interface for persisted elements, keyed by model version."""

    async def save_elements(
        self, version_id: UUID, elements: Sequence[NormalizedElement],
    ) -> int: ...
    async def find_elements(
        self, version_id: UUID, filters: ElementFilter, *,
        limit: int | None = None, offset: int = 0,
        include_properties: bool = False, include_geometry: bool = True,
    ) -> list[ElementRecord]: ...
    async def count_elements(self, version_id: UUID, filters: ElementFilter) -> int: ...
    async def delete_for_version(self, version_id: UUID) -> int: ...


@runtime_checkable
class IModelVersionRepository(Protocol):
    """Repository interface for model versions."""

    async def get_by_id(self, version_id: UUID) -> ModelVersion | None: ...
    async def add(self, version: ModelVersion) -> ModelVersion: ...
    async def update(self, version: ModelVersion) -> ModelVersion: ...


@runtime_checkable
class IObjectStorage(Protocol):
    """Storage for raw source files referenced by model versions."""

    async def upload_raw_file(self, data: bytes) -> str: ...
    async def get_file(self, object_ref: str) -> bytes: ...
    async def head_file(self, object_ref: str) -> bool: ...


@runtime_checkable
class IUnitOfWork(Protocol):
    """Unit of Work pattern for transaction management."""

    elements: IElementRepository
    versions: IModelVersionRepository

    async def __aenter__(self) -> "IUnitOfWork": ...
    async def __aexit__(
        self, exc_type: type[BaseException] | None,
        exc_val: BaseException | None, exc_tb: object,
    ) -> None: ...
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
