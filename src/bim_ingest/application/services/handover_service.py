"""Handover Service.

Builds the asset register handed to facility management.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence
from uuid import UUID

from bim_ingest.application.services.query_service import require_version
from bim_ingest.domain import NO_FILTER, ElementFilter, IUnitOfWork, NormalizedElement, Scalar
from bim_ingest.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass
class HandoverAsset:
    guid: str
    name: str | None = None
    category: str | None = None
    system: str | None = None
    level: str | None = None
    type: str | None = None
    properties: dict[str, Scalar] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "guid": self.guid,
            "name": self.name,
            "category": self.category,
            "system": self.system,
            "level": self.level,
            "type": self.type,
        }
        if self.properties:
            data["properties"] = self.properties
        return data


@dataclass
class HandoverRegister:
    asset_count: int = 0
    assets: list[HandoverAsset] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_count": self.asset_count,
            "assets": [asset.to_dict() for asset in self.assets],
        }


def select_properties(
    element: NormalizedElement,
    property_keys: Sequence[str] | None,
) -> dict[str, Scalar] | None:
    """All properties when property_keys is None, else the requested keys present.

    Returns None when nothing remains.
    """
    properties = element.properties or {}
    if property_keys is not None:
        properties = {key: properties[key] for key in property_keys if key in properties}
    return dict(properties) or None


class HandoverService:
    """Handover register generation."""

    def __init__(self, uow: IUnitOfWork) -> None:
        self._uow = uow

    async def compute_handover_register(
        self,
        version_id: UUID,
        filters: ElementFilter | None = None,
        property_keys: Sequence[str] | None = None,
    ) -> HandoverRegister:
        """Build the asset register.

        Args:
            version_id: Model version UUID
            filters: Optional element filter
            property_keys: Property keys to keep; None keeps all, an empty
                sequence keeps none

        Returns:
            HandoverRegister with one asset per matching element

        Raises:
            EntityNotFoundError: If the version does not exist
        """
        await require_version(self._uow, version_id)

        elements = await self._uow.elements.find_elements(
            version_id,
            filters or NO_FILTER,
            limit=None,
            include_properties=False,
            include_geometry=False,
        )

        assets = [
            HandoverAsset(
                guid=element.guid,
                name=element.name,
                category=element.category,
                system=element.system,
                level=element.level,
                type=element.type,
                properties=select_properties(element, property_keys),
            )
            for element in elements
        ]

        logger.info("Handover register built", version_id=str(version_id), assets=len(assets))
        return HandoverRegister(asset_count=len(assets), assets=assets)
