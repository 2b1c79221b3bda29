"""Property set and quantity extraction."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bim_ingest.domain import PropertyEntry
from bim_ingest.infrastructure.ifc.engine import IfcEngine
from bim_ingest.infrastructure.ifc.values import (
    ExtractedValue,
    extract_unit,
    extract_value,
    ifc_string,
    to_scalar,
)

DEFAULT_GROUP = "PropertySet"


@dataclass
class QuantityTotals:
    """Running per-element quantity totals.

    Values from every property set are summed: two NetArea quantities in
    two sets add up.
    """

    length: float | None = None
    area: float | None = None
    volume: float | None = None
    units: str | None = None

    def add(self, extracted: ExtractedValue, unit: str | None) -> None:
        if not extracted.is_number:
            return
        amount = float(to_scalar(extracted.value))  # type: ignore[arg-type]
        if extracted.field == "LengthValue":
            self.length = (self.length or 0.0) + amount
        elif extracted.field == "AreaValue":
            self.area = (self.area or 0.0) + amount
        elif extracted.field == "VolumeValue":
            self.volume = (self.volume or 0.0) + amount
        else:
            return
        self.units = self.units or unit

    @property
    def is_empty(self) -> bool:
        return self.length is None and self.area is None and self.volume is None


def extract_property_entries(
    engine: IfcEngine,
    model_id: int,
    express_id: int,
) -> tuple[list[PropertyEntry], QuantityTotals]:
    """Read every property/quantity of an element.

    Args:
        engine: Open engine
        model_id: Model handle
        express_id: Element express id

    Returns:
        One PropertyEntry per named item, grouped by set name, and the
        accumulated length/area/volume totals
    """
    entries: list[PropertyEntry] = []
    totals = QuantityTotals()

    for pset in engine.get_property_sets(model_id, express_id, include_type_properties=True):
        group = ifc_string(pset.get("Name")) or ifc_string(pset.get("LongName")) or DEFAULT_GROUP
        items = [*_items(pset.get("HasProperties")), *_items(pset.get("Quantities"))]

        for item in items:
            name = ifc_string(item.get("Name"))
            if not name:
                continue

            extracted = extract_value(item)
            unit = extract_unit(item)
            totals.add(extracted, unit)

            value = to_scalar(extracted.value)
            entries.append(
                PropertyEntry(group=group, name=name, value=value, unit=unit, raw_value=value)
            )

    return entries, totals


def _items(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]
