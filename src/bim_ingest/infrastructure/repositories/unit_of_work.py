"""Unit of Work.

One database transaction spanning the element and version repositories.
"""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bim_ingest.infrastructure.database.connection import get_session_factory
from bim_ingest.infrastructure.repositories.element_repository import ElementRepository
from bim_ingest.infrastructure.repositories.version_repository import ModelVersionRepository
from bim_ingest.shared.config import get_settings


class UnitOfWork:
    """SQLAlchemy unit of work.

    Usage:
        async with UnitOfWork() as uow:
            await uow.versions.add(version)
            await uow.elements.save_elements(version.id, parsed.elements)
            await uow.commit()

    Leaving the block with an exception rolls back; the session is closed
    on every exit path. Repositories are created on first access.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        batch_size: int | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._batch_size = batch_size or get_settings().save_batch_size
        self._session: AsyncSession | None = None
        self._elements: ElementRepository | None = None
        self._versions: ModelVersionRepository | None = None

    async def __aenter__(self) -> UnitOfWork:
        factory = self._session_factory or get_session_factory()
        self._session = factory()
        self._elements = None
        self._versions = None
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
        finally:
            await self.session.close()
            self._session = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork not entered; use 'async with UnitOfWork() as uow:'")
        return self._session

    @property
    def elements(self) -> ElementRepository:
        if self._elements is None:
            self._elements = ElementRepository(self.session, self._batch_size)
        return self._elements

    @property
    def versions(self) -> ModelVersionRepository:
        if self._versions is None:
            self._versions = ModelVersionRepository(self.session)
        return self._versions

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
