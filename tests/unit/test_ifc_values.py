"""Tests for IFC value normalization."""
from __future__ import annotations

import pytest

from bim_ingest.infrastructure.ifc.values import (
    UNSET,
    IfcBool,
    IfcEnum,
    IfcNumber,
    IfcText,
    extract_unit,
    extract_value,
    ifc_string,
    to_ifc_value,
    to_scalar,
)


class TestToIfcValue:
    """Tests for to_ifc_value."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, UNSET),
            (True, IfcBool(True)),
            (3, IfcNumber(3)),
            (2.5, IfcNumber(2.5)),
            ("EI60", IfcText("EI60")),
            ({"type": "IfcLabel", "value": "EI60"}, IfcText("EI60")),
            ({"type": "IfcAreaMeasure", "value": {"value": 4.0}}, IfcNumber(4.0)),
            ({"type": "IfcUnit", "id": 12}, UNSET),
            ([1, 2], UNSET),
        ],
    )
    def test_normalization(self, raw, expected) -> None:
        assert to_ifc_value(raw) == expected

    def test_enum_passes_through(self) -> None:
        assert to_ifc_value(IfcEnum("STANDARD")) == IfcEnum("STANDARD")
        assert to_scalar(IfcEnum("STANDARD")) == "STANDARD"

    def test_ifc_string(self) -> None:
        assert ifc_string({"value": "Level 1"}) == "Level 1"
        assert ifc_string("") is None
        assert ifc_string(None) is None
        assert ifc_string(7) == "7"


class TestExtractValue:
    """Tests for extract_value."""

    def test_first_present_field_wins(self) -> None:
        record = {"Name": "NetArea", "AreaValue": 12.0, "Value": 99}
        extracted = extract_value(record)

        assert extracted.value == IfcNumber(12.0)
        assert extracted.field == "AreaValue"
        assert extracted.is_number

    def test_present_but_unset_field_still_wins(self) -> None:
        extracted = extract_value({"NominalValue": None, "AreaValue": 5.0})

        assert extracted.value == UNSET
        assert extracted.field == "NominalValue"
        assert not extracted.is_number

    def test_wrapped_nominal_value(self) -> None:
        extracted = extract_value({"NominalValue": {"type": "IfcBoolean", "value": False}})

        assert extracted.value == IfcBool(False)

    def test_direct_value_fallback(self) -> None:
        extracted = extract_value({"type": "IfcLabel", "value": "x"})

        assert extracted.value == IfcText("x")
        assert extracted.field == "value"

    def test_no_value(self) -> None:
        extracted = extract_value({"Name": "Empty"})

        assert extracted.value == UNSET
        assert extracted.field is None


class TestExtractUnit:
    """Tests for extract_unit."""

    def test_unit_name(self) -> None:
        record = {"Unit": {"Name": IfcEnum("SQUARE_METRE"), "UnitType": IfcEnum("AREAUNIT")}}
        assert extract_unit(record) == "SQUARE_METRE"

    def test_unit_type_fallback(self) -> None:
        assert extract_unit({"Unit": {"Name": None, "UnitType": "LENGTHUNIT"}}) == "LENGTHUNIT"

    def test_unit_value_fallback(self) -> None:
        assert extract_unit({"Unit": {"type": "IfcLabel", "value": "mm"}}) == "mm"
        assert extract_unit({"Unit": "kg"}) == "kg"

    def test_missing_unit(self) -> None:
        assert extract_unit({"Name": "x"}) is None
        assert extract_unit({"Unit": None}) is None
