"""Element Repository Implementation.

SQLAlchemy-based implementation of IElementRepository.
"""
from __future__ import annotations

from typing import Any, Sequence
from uuid import UUID, uuid4

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import noload, selectinload

from bim_ingest.domain import (
    ElementFilter,
    ElementRecord,
    GeometrySummary,
    NormalizedElement,
    PropertyEntry,
    RepositoryError,
)
from bim_ingest.infrastructure.database.models import (
    BimElementORM,
    BimGeometrySummaryORM,
    BimPropertyEntryORM,
)
from bim_ingest.shared.config import get_settings
from bim_ingest.shared.logging import get_logger

logger = get_logger(__name__)


class ElementRepository:
    """SQLAlchemy implementation of element repository."""

    def __init__(self, session: AsyncSession, batch_size: int | None = None) -> None:
        self._session = session
        self._batch_size = batch_size or get_settings().save_batch_size

    # =========================================================================
    # Read Operations
    # =========================================================================

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
        """Find elements of a version, ordered by id.

        Args:
            version_id: Model version
            filters: Element filter
            limit: Page size, None for all rows
            offset: Rows to skip
            include_properties: Load property entries
            include_geometry: Load geometry summaries

        Returns:
            Matching element records
        """
        stmt = (
            select(BimElementORM)
            .options(
                selectinload(BimElementORM.geometry)
                if include_geometry
                else noload(BimElementORM.geometry),
                selectinload(BimElementORM.property_entries)
                if include_properties
                else noload(BimElementORM.property_entries),
            )
            .where(self._conditions(version_id, filters))
            .order_by(BimElementORM.id)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._session.execute(stmt)
        return [
            self._to_domain(orm, include_properties, include_geometry)
            for orm in result.scalars().all()
        ]

    async def count_elements(self, version_id: UUID, filters: ElementFilter) -> int:
        stmt = (
            select(func.count())
            .select_from(BimElementORM)
            .where(self._conditions(version_id, filters))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    # =========================================================================
    # Write Operations
    # =========================================================================

    async def save_elements(
        self,
        version_id: UUID,
        elements: Sequence[NormalizedElement],
    ) -> int:
        """Persist parsed elements under a version, flushing in batches.

        Raises:
            RepositoryError: If the database rejects a batch
        """
        saved = 0
        for start in range(0, len(elements), self._batch_size):
            batch = elements[start:start + self._batch_size]
            self._session.add_all([self._to_orm(version_id, element) for element in batch])
            try:
                await self._session.flush()
            except SQLAlchemyError as e:
                raise RepositoryError(
                    "Failed to save elements",
                    {"version_id": str(version_id), "batch_start": start, "error": str(e)},
                ) from e
            saved += len(batch)

        logger.debug("Elements saved", version_id=str(version_id), count=saved)
        return saved

    async def delete_for_version(self, version_id: UUID) -> int:
        """Delete every element of a version (children cascade)."""
        stmt = delete(BimElementORM).where(BimElementORM.version_id == version_id)
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    # =========================================================================
    # Filters
    # =========================================================================

    @staticmethod
    def _conditions(version_id: UUID, filters: ElementFilter) -> Any:
        conditions = [BimElementORM.version_id == version_id]

        if filters.categories:
            conditions.append(BimElementORM.category.in_(filters.categories))
        if filters.systems:
            conditions.append(BimElementORM.system.in_(filters.systems))
        if filters.levels:
            conditions.append(BimElementORM.level.in_(filters.levels))
        if filters.types:
            conditions.append(BimElementORM.type.in_(filters.types))
        if filters.search:
            pattern = f"%{_escape_like(filters.search)}%"
            conditions.append(
                or_(
                    *(
                        getattr(BimElementORM, name).ilike(pattern, escape="\\")
                        for name in ElementFilter.SEARCH_FIELDS
                    )
                )
            )

        return and_(*conditions)

    # =========================================================================
    # Mapping
    # =========================================================================

    def _to_orm(self, version_id: UUID, element: NormalizedElement) -> BimElementORM:
        orm = BimElementORM(
            id=uuid4(),
            version_id=version_id,
            guid=element.guid,
            name=element.name,
            category=element.category,
            type=element.type,
            family=element.family,
            system=element.system,
            level=element.level,
            phase=element.phase,
            description=element.description,
            properties=element.properties,
        )

        geometry = element.geometry
        if geometry is not None:
            bbox_min = geometry.bbox_min or (None, None, None)
            bbox_max = geometry.bbox_max or (None, None, None)
            orm.geometry = BimGeometrySummaryORM(
                bbox_min_x=bbox_min[0],
                bbox_min_y=bbox_min[1],
                bbox_min_z=bbox_min[2],
                bbox_max_x=bbox_max[0],
                bbox_max_y=bbox_max[1],
                bbox_max_z=bbox_max[2],
                length=geometry.length,
                area=geometry.area,
                volume=geometry.volume,
                units=geometry.units,
            )

        orm.property_entries = [
            BimPropertyEntryORM(
                position=position,
                group_name=entry.group,
                name=entry.name,
                value=entry.value,
                unit=entry.unit,
                raw_value=entry.raw_value,
            )
            for position, entry in enumerate(element.property_entries or ())
        ]
        return orm

    def _to_domain(
        self,
        orm: BimElementORM,
        include_properties: bool,
        include_geometry: bool,
    ) -> ElementRecord:
        geometry = None
        if include_geometry and orm.geometry is not None:
            geometry = _geometry_to_domain(orm.geometry)

        entries = None
        if include_properties and orm.property_entries:
            entries = [
                PropertyEntry(
                    group=p.group_name,
                    name=p.name,
                    value=p.value,
                    unit=p.unit,
                    raw_value=p.raw_value,
                )
                for p in orm.property_entries
            ]

        return ElementRecord(
            id=orm.id,
            version_id=orm.version_id,
            guid=orm.guid,
            name=orm.name,
            category=orm.category,
            type=orm.type,
            family=orm.family,
            system=orm.system,
            level=orm.level,
            phase=orm.phase,
            description=orm.description,
            properties=orm.properties,
            property_entries=entries,
            geometry=geometry,
        )


def _geometry_to_domain(orm: BimGeometrySummaryORM) -> GeometrySummary:
    # A units-only summary has no bounds and no quantities
    bbox_min = (orm.bbox_min_x, orm.bbox_min_y, orm.bbox_min_z)
    bbox_max = (orm.bbox_max_x, orm.bbox_max_y, orm.bbox_max_z)
    has_bounds = None not in bbox_min and None not in bbox_max
    return GeometrySummary.build(
        bbox_min=bbox_min if has_bounds else None,  # type: ignore[arg-type]
        bbox_max=bbox_max if has_bounds else None,  # type: ignore[arg-type]
        length=orm.length,
        area=orm.area,
        volume=orm.volume,
        units=orm.units,
    ) or GeometrySummary(units=orm.units)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
