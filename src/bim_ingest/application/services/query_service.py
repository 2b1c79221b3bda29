"""Query Service.

Filtered, paginated reads of the elements of a model version.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from bim_ingest.domain import (
    NO_FILTER,
    ElementFilter,
    ElementRecord,
    EntityNotFoundError,
    IUnitOfWork,
    ValidationError,
)
from bim_ingest.shared.config import Settings, get_settings
from bim_ingest.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ElementPage:
    """One page of query results.

    Attributes:
        elements: Elements on this page, ordered by id
        total: Number of elements matching the filter (all pages)
        limit: Effective page size
        offset: Rows skipped
    """

    elements: list[ElementRecord]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.elements) < self.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "elements": [element.to_dict() for element in self.elements],
        }


class QueryService:
    """Read-only element queries."""

    def __init__(self, uow: IUnitOfWork, settings: Settings | None = None) -> None:
        self._uow = uow
        self._settings = settings or get_settings()

    async def query_elements(
        self,
        version_id: UUID,
        filters: ElementFilter | None = None,
        limit: int | None = None,
        offset: int = 0,
        include_properties: bool = False,
        include_geometry: bool = True,
    ) -> ElementPage:
        """Query elements of a model version.

        Args:
            version_id: Model version UUID
            filters: Optional element filter
            limit: Page size (default query_default_limit, capped at query_max_limit)
            offset: Rows to skip
            include_properties: Attach ordered property entries
            include_geometry: Attach geometry summaries

        Returns:
            ElementPage with the page and the full filtered count

        Raises:
            ValidationError: For negative limit or offset
            EntityNotFoundError: If the version does not exist
        """
        if limit is None:
            limit = self._settings.query_default_limit
        if limit < 0:
            raise ValidationError("limit", "must be >= 0", limit)
        if offset < 0:
            raise ValidationError("offset", "must be >= 0", offset)
        limit = min(limit, self._settings.query_max_limit)
        filters = filters or NO_FILTER

        await require_version(self._uow, version_id)

        elements = await self._uow.elements.find_elements(
            version_id,
            filters,
            limit=limit,
            offset=offset,
            include_properties=include_properties,
            include_geometry=include_geometry,
        )
        total = await self._uow.elements.count_elements(version_id, filters)

        logger.debug(
            "Elements queried",
            version_id=str(version_id),
            filters=filters.to_dict(),
            returned=len(elements),
            total=total,
        )

        return ElementPage(elements=elements, total=total, limit=limit, offset=offset)


async def require_version(uow: IUnitOfWork, version_id: UUID) -> None:
    """Raise EntityNotFoundError for unknown versions."""
    if await uow.versions.get_by_id(version_id) is None:
        raise EntityNotFoundError("ModelVersion", version_id)
