"""Model Version Repository Implementation."""
from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bim_ingest.domain import EntityNotFoundError, ModelVersion, VersionStatus
from bim_ingest.infrastructure.database.models import BimModelVersionORM


class ModelVersionRepository:
    """SQLAlchemy implementation of model version repository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, version_id: UUID) -> ModelVersion | None:
        result = await self._session.execute(
            select(BimModelVersionORM).where(BimModelVersionORM.id == version_id)
        )
        orm = result.scalar_one_or_none()
        return self._to_domain(orm) if orm is not None else None

    async def add(self, version: ModelVersion) -> ModelVersion:
        orm = BimModelVersionORM(id=version.id)
        self._apply(orm, version)
        self._session.add(orm)
        await self._session.flush()
        return version

    async def update(self, version: ModelVersion) -> ModelVersion:
        """Write back status and parse metadata.

        Raises:
            EntityNotFoundError: If the version does not exist
        """
        orm = await self._session.get(BimModelVersionORM, version.id)
        if orm is None:
            raise EntityNotFoundError("ModelVersion", version.id)
        self._apply(orm, version)
        await self._session.flush()
        return version

    @staticmethod
    def _apply(orm: BimModelVersionORM, version: ModelVersion) -> None:
        orm.model_name = version.model_name
        orm.source_format = version.source_format
        orm.object_ref = version.object_ref
        orm.status = version.status.value
        orm.source_schema = version.schema
        orm.element_count = version.element_count
        orm.storeys_detected = version.storeys_detected
        orm.parsed_at = version.parsed_at
        orm.error = version.error

    @staticmethod
    def _to_domain(orm: BimModelVersionORM) -> ModelVersion:
        version = ModelVersion(
            id=orm.id,
            model_name=orm.model_name,
            source_format=orm.source_format,
            object_ref=orm.object_ref,
            status=VersionStatus(orm.status),
            schema=orm.source_schema,
            element_count=orm.element_count,
            storeys_detected=orm.storeys_detected,
            parsed_at=orm.parsed_at,
            error=orm.error,
        )
        if orm.created_at is not None:
            version.created_at = orm.created_at
        return version
