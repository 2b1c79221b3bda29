"""IFC value normalization.

Engine records carry loosely typed values: plain Python scalars, wrapped
defined types ({"type": "IfcLabel", "value": ...}) or nested entity
records. Everything is normalized into the IfcValue tagged union before
the parser looks at it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from bim_ingest.domain import Scalar


@dataclass(frozen=True)
class IfcNumber:
    value: int | float


@dataclass(frozen=True)
class IfcText:
    value: str


@dataclass(frozen=True)
class IfcBool:
    value: bool


@dataclass(frozen=True)
class IfcEnum:
    """Enumeration literal such as STANDARD or SQUARE_METRE."""

    value: str


@dataclass(frozen=True)
class IfcUnset:
    pass


IfcValue = Union[IfcNumber, IfcText, IfcBool, IfcEnum, IfcUnset]
UNSET = IfcUnset()

# Checked in order; the first field present on a record wins
VALUE_FIELDS = (
    "NominalValue",
    "LengthValue",
    "AreaValue",
    "VolumeValue",
    "CountValue",
    "WeightValue",
    "TimeValue",
    "Value",
)
QUANTITY_FIELDS = ("LengthValue", "AreaValue", "VolumeValue")


def to_ifc_value(raw: Any) -> IfcValue:
    """Normalize a raw engine value.

    Wrapped values ({"value": ...}) are unwrapped recursively; anything
    that is not a scalar is Unset.
    """
    if raw is None:
        return UNSET
    if isinstance(raw, (IfcNumber, IfcText, IfcBool, IfcEnum, IfcUnset)):
        return raw
    if isinstance(raw, bool):
        return IfcBool(raw)
    if isinstance(raw, (int, float)):
        return IfcNumber(raw)
    if isinstance(raw, str):
        return IfcText(raw)
    if isinstance(raw, Mapping) and "value" in raw:
        return to_ifc_value(raw["value"])
    return UNSET


def to_scalar(value: IfcValue) -> Scalar:
    """Convert an IfcValue to a plain scalar (Unset -> None)."""
    if isinstance(value, IfcUnset):
        return None
    return value.value


def ifc_string(raw: Any) -> str | None:
    """String form of a raw value, None when unset or empty."""
    scalar = to_scalar(to_ifc_value(raw))
    if scalar is None:
        return None
    text = str(scalar)
    return text or None


@dataclass(frozen=True)
class ExtractedValue:
    """Value found on a property or quantity record, and the field it came from."""

    value: IfcValue
    field: str | None

    @property
    def is_number(self) -> bool:
        return isinstance(self.value, IfcNumber)


def extract_value(record: Mapping[str, Any]) -> ExtractedValue:
    """Pull the value out of a property/quantity record.

    The first field of VALUE_FIELDS present on the record wins, even when
    its value is unset. Records carrying none of them fall back to a
    direct "value" key.
    """
    for field in VALUE_FIELDS:
        if field in record:
            return ExtractedValue(to_ifc_value(record[field]), field)

    direct = to_ifc_value(record)
    if not isinstance(direct, IfcUnset):
        return ExtractedValue(direct, "value")

    return ExtractedValue(UNSET, None)


def extract_unit(record: Mapping[str, Any]) -> str | None:
    """Unit label of a record: unit Name, else UnitType, else the unit value."""
    if "Unit" not in record:
        return None
    unit = record["Unit"]
    if isinstance(unit, Mapping):
        return ifc_string(unit.get("Name")) or ifc_string(unit.get("UnitType")) or ifc_string(unit)
    return ifc_string(unit)
