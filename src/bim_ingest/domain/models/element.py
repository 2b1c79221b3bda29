"""Canonical Element Model.

Source-format-agnostic representation of a building element, shared by
every format adapter and by the query/compute layers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union
from uuid import UUID, uuid4

Scalar = Union[str, int, float, bool, None]
Vector3 = tuple[float, float, float]


@dataclass(frozen=True)
class PropertyEntry:
    """One named property or quantity value with its originating group."""

    name: str
    group: str | None = None
    value: Scalar = None
    unit: str | None = None
    raw_value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "group": self.group,
            "name": self.name,
            "value": self.value,
            "unit": self.unit,
            "raw_value": self.raw_value,
        }


@dataclass(frozen=True)
class GeometrySummary:
    """Derived spatial and quantity facts for an element.

    Bounding box and centroid are world coordinates after placement.
    Length/area/volume come from quantities, never from mesh integration.
    """

    bbox_min: Vector3 | None = None
    bbox_max: Vector3 | None = None
    centroid: Vector3 | None = None
    length: float | None = None
    area: float | None = None
    volume: float | None = None
    units: str | None = None

    @classmethod
    def build(
        cls,
        *,
        bbox_min: Vector3 | None = None,
        bbox_max: Vector3 | None = None,
        length: float | None = None,
        area: float | None = None,
        volume: float | None = None,
        units: str | None = None,
    ) -> GeometrySummary | None:
        """Create a summary, or None when nothing is known.

        The centroid is derived as the bounding-box midpoint. Absence of both
        a bounding box and every quantity means "unknown", which is modelled
        as None rather than a zero-filled summary.

        Args:
            bbox_min: Minimum corner
            bbox_max: Maximum corner
            length: Accumulated length
            area: Accumulated area
            volume: Accumulated volume
            units: Unit label

        Returns:
            GeometrySummary or None
        """
        has_bounds = bbox_min is not None and bbox_max is not None
        if not has_bounds and length is None and area is None and volume is None:
            return None

        centroid = None
        if has_bounds:
            centroid = (
                (bbox_min[0] + bbox_max[0]) / 2,
                (bbox_min[1] + bbox_max[1]) / 2,
                (bbox_min[2] + bbox_max[2]) / 2,
            )

        return cls(
            bbox_min=bbox_min if has_bounds else None,
            bbox_max=bbox_max if has_bounds else None,
            centroid=centroid,
            length=length,
            area=area,
            volume=volume,
            units=units,
        )

    @property
    def has_bounds(self) -> bool:
        return self.bbox_min is not None and self.bbox_max is not None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "bbox_min": list(self.bbox_min) if self.bbox_min else None,
            "bbox_max": list(self.bbox_max) if self.bbox_max else None,
            "centroid": list(self.centroid) if self.centroid else None,
            "length": self.length,
            "area": self.area,
            "volume": self.volume,
            "units": self.units,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class NormalizedElement:
    """Normalized Element.

    One physical or logical building element, independent of the format it
    was read from.

    Attributes:
        guid: Globally unique id (source GUID or synthesized)
        name: Element name
        category: Discipline-level grouping (e.g. "Walls")
        type: Element type / predefined type
        family: Family or object type
        system: Building system
        level: Storey / floor label
        phase: Construction phase
        description: Free text
        properties: Flat scalar map
        property_entries: Ordered entries keeping group provenance
        geometry: Derived geometry summary, None when unknown
    """

    guid: str
    name: str | None = None
    category: str | None = None
    type: str | None = None
    family: str | None = None
    system: str | None = None
    level: str | None = None
    phase: str | None = None
    description: str | None = None
    properties: dict[str, Scalar] | None = None
    property_entries: list[PropertyEntry] | None = None
    geometry: GeometrySummary | None = None

    def __post_init__(self) -> None:
        if not self.guid:
            raise ValueError("NormalizedElement.guid cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict, dropping absent fields."""
        data: dict[str, Any] = {
            "guid": self.guid,
            "name": self.name,
            "category": self.category,
            "type": self.type,
            "family": self.family,
            "system": self.system,
            "level": self.level,
            "phase": self.phase,
            "description": self.description,
            "properties": self.properties,
        }
        if self.property_entries:
            data["property_entries"] = [p.to_dict() for p in self.property_entries]
        if self.geometry is not None:
            data["geometry"] = self.geometry.to_dict()
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class ElementRecord(NormalizedElement):
    """Persisted element, addressed by row id within a model version."""

    id: UUID = field(default_factory=uuid4)
    version_id: UUID | None = None

    @classmethod
    def from_normalized(
        cls,
        version_id: UUID,
        element: NormalizedElement,
        *,
        record_id: UUID | None = None,
    ) -> ElementRecord:
        """Wrap a parsed element for storage under a model version."""
        return cls(
            id=record_id or uuid4(),
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
            properties=dict(element.properties) if element.properties else None,
            property_entries=list(element.property_entries) if element.property_entries else None,
            geometry=element.geometry,
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["id"] = str(self.id)
        return data

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ElementRecord):
            return self.id == other.id
        return False
