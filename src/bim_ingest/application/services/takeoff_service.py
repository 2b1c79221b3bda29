"""Takeoff Service.

Aggregates length, area and volume over the elements of a model version,
optionally grouped by category, system, level or type.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from bim_ingest.application.services.query_service import require_version
from bim_ingest.domain import (
    NO_FILTER,
    ElementFilter,
    IUnitOfWork,
    NormalizedElement,
    ValidationError,
)
from bim_ingest.infrastructure.adapters.base import to_number
from bim_ingest.shared.logging import get_logger

logger = get_logger(__name__)

GROUP_FIELDS = ("category", "system", "level", "type")
UNSPECIFIED = "Unspecified"

# Property keys tried when the geometry summary lacks a quantity
QUANTITY_PROPERTY_KEYS = {
    "length": ("length", "Length"),
    "area": ("area", "Area"),
    "volume": ("volume", "Volume"),
}


@dataclass
class TakeoffTotals:
    element_count: int = 0
    total_length: float = 0.0
    total_area: float = 0.0
    total_volume: float = 0.0

    def add(self, length: float | None, area: float | None, volume: float | None) -> None:
        self.element_count += 1
        self.total_length += length or 0.0
        self.total_area += area or 0.0
        self.total_volume += volume or 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "element_count": self.element_count,
            "total_length": self.total_length,
            "total_area": self.total_area,
            "total_volume": self.total_volume,
        }


@dataclass
class TakeoffGroup(TakeoffTotals):
    group: str = UNSPECIFIED

    def to_dict(self) -> dict[str, Any]:
        return {"group": self.group, **super().to_dict()}


@dataclass
class TakeoffResult:
    summary: TakeoffTotals = field(default_factory=TakeoffTotals)
    groups: list[TakeoffGroup] = field(default_factory=list)
    group_by: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_by": self.group_by,
            "summary": self.summary.to_dict(),
            "groups": [g.to_dict() for g in self.groups],
        }


def resolve_quantity(element: NormalizedElement, quantity: str) -> float | None:
    """Quantity of an element: geometry summary first, then properties."""
    if element.geometry is not None:
        value = getattr(element.geometry, quantity)
        if value is not None:
            return float(value)

    properties = element.properties or {}
    for key in QUANTITY_PROPERTY_KEYS[quantity]:
        value = to_number(properties.get(key))
        if value is not None:
            return value
    return None


class TakeoffService:
    """Quantity takeoff over persisted elements."""

    def __init__(self, uow: IUnitOfWork) -> None:
        self._uow = uow

    async def compute_takeoff(
        self,
        version_id: UUID,
        filters: ElementFilter | None = None,
        group_by: str | None = None,
    ) -> TakeoffResult:
        """Compute takeoff totals.

        Args:
            version_id: Model version UUID
            filters: Optional element filter
            group_by: One of category, system, level, type

        Returns:
            TakeoffResult with grand totals and groups in first-seen order

        Raises:
            ValidationError: If group_by is not a supported field
            EntityNotFoundError: If the version does not exist
        """
        if group_by is not None and group_by not in GROUP_FIELDS:
            raise ValidationError("group_by", f"must be one of {', '.join(GROUP_FIELDS)}", group_by)

        await require_version(self._uow, version_id)

        elements = await self._uow.elements.find_elements(
            version_id,
            filters or NO_FILTER,
            limit=None,
            include_properties=False,
            include_geometry=True,
        )

        result = TakeoffResult(group_by=group_by)
        groups: dict[str, TakeoffGroup] = {}

        for element in elements:
            length = resolve_quantity(element, "length")
            area = resolve_quantity(element, "area")
            volume = resolve_quantity(element, "volume")
            result.summary.add(length, area, volume)

            if group_by is None:
                continue
            key = getattr(element, group_by) or UNSPECIFIED
            group = groups.get(key)
            if group is None:
                group = groups[key] = TakeoffGroup(group=key)
                result.groups.append(group)
            group.add(length, area, volume)

        logger.info(
            "Takeoff computed",
            version_id=str(version_id),
            group_by=group_by,
            elements=result.summary.element_count,
            groups=len(result.groups),
        )
        return result
