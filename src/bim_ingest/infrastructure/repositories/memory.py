"""In-memory repositories.

Dict-backed implementations of the repository interfaces for tests and
local runs without a database. Filtering and ordering follow the SQL
repositories: filter semantics come from ElementFilter.matches and rows
are ordered by record id.
"""
from __future__ import annotations

import copy
from dataclasses import replace
from typing import Sequence
from uuid import UUID

from bim_ingest.domain import (
    ElementFilter,
    ElementRecord,
    EntityNotFoundError,
    ModelVersion,
    NormalizedElement,
    RepositoryError,
)


class InMemoryElementRepository:
    def __init__(self) -> None:
        self._rows: dict[UUID, list[ElementRecord]] = {}

    async def save_elements(
        self,
        version_id: UUID,
        elements: Sequence[NormalizedElement],
    ) -> int:
        """Store elements; a guid may only appear once per version.

        Raises:
            RepositoryError: On a duplicate guid
        """
        rows = self._rows.setdefault(version_id, [])
        known = {row.guid for row in rows}
        for element in elements:
            if element.guid in known:
                raise RepositoryError(
                    "Duplicate element guid", {"version_id": str(version_id), "guid": element.guid}
                )
            known.add(element.guid)
            rows.append(ElementRecord.from_normalized(version_id, element))
        return len(elements)

    async def find_elements(
        self,
        version_id: UUID,
        filters: ElementFilter,
        *,
        limit: int | None = None,
        offset: int = 0,
        include_properties: bool = False,
        include_geometry: bool = True,
    ) -> list[ElementRecord]:
        rows = sorted(
            (row for row in self._rows.get(version_id, ()) if filters.matches(row)),
            key=lambda row: row.id,
        )
        page = rows[offset:] if limit is None else rows[offset:offset + limit]
        return [
            replace(
                copy.deepcopy(row),
                property_entries=row.property_entries if include_properties else None,
                geometry=row.geometry if include_geometry else None,
            )
            for row in page
        ]

    async def count_elements(self, version_id: UUID, filters: ElementFilter) -> int:
        return sum(1 for row in self._rows.get(version_id, ()) if filters.matches(row))

    async def delete_for_version(self, version_id: UUID) -> int:
        return len(self._rows.pop(version_id, []))


class InMemoryModelVersionRepository:
    def __init__(self) -> None:
        self._versions: dict[UUID, ModelVersion] = {}

    async def get_by_id(self, version_id: UUID) -> ModelVersion | None:
        version = self._versions.get(version_id)
        return copy.copy(version) if version is not None else None

    async def add(self, version: ModelVersion) -> ModelVersion:
        self._versions[version.id] = copy.copy(version)
        return version

    async def update(self, version: ModelVersion) -> ModelVersion:
        if version.id not in self._versions:
            raise EntityNotFoundError("ModelVersion", version.id)
        self._versions[version.id] = copy.copy(version)
        return version


class InMemoryUnitOfWork:
    """Unit of work over in-memory repositories.

    Changes are staged on snapshots and only become visible to later
    units of work after commit(); leaving the context with an exception
    discards them.
    """

    def __init__(
        self,
        elements: InMemoryElementRepository | None = None,
        versions: InMemoryModelVersionRepository | None = None,
    ) -> None:
        self._committed_elements = elements or InMemoryElementRepository()
        self._committed_versions = versions or InMemoryModelVersionRepository()
        self.elements = self._committed_elements
        self.versions = self._committed_versions
        self.commits = 0

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        self.elements = copy.deepcopy(self._committed_elements)
        self.versions = copy.deepcopy(self._committed_versions)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        if exc_type is not None:
            await self.rollback()

    async def commit(self) -> None:
        self._committed_elements.__dict__.update(copy.deepcopy(self.elements.__dict__))
        self._committed_versions.__dict__.update(copy.deepcopy(self.versions.__dict__))
        self.commits += 1

    async def rollback(self) -> None:
        self.elements = copy.deepcopy(self._committed_elements)
        self.versions = copy.deepcopy(self._committed_versions)
