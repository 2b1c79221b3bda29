"""Tests for the tabular (CSV/TSV) adapter."""
from __future__ import annotations

import pytest

from bim_ingest.domain import FormatError, ResolutionStage
from bim_ingest.infrastructure.adapters import ParseContext, get_adapter
from bim_ingest.infrastructure.adapters.tabular import TabularAdapter


def _context(fmt: str = "csv", **kwargs) -> ParseContext:
    return ParseContext(source_format=fmt, **kwargs)


class TestTabularAdapter:
    """Tests for TabularAdapter."""

    @pytest.mark.asyncio
    async def test_known_columns_map_to_fields(self) -> None:
        data = (
            "GUID,Name,Category,Type,Family,System,Level,Phase,Description\n"
            "G1,Door 01,Doors,Single,Flush,Arch,Level 1,New,Main entrance\n"
        )
        parsed = await TabularAdapter().parse(data, _context())

        assert len(parsed) == 1
        element = parsed.elements[0]
        assert element.guid == "G1"
        assert element.name == "Door 01"
        assert element.category == "Doors"
        assert element.type == "Single"
        assert element.family == "Flush"
        assert element.system == "Arch"
        assert element.level == "Level 1"
        assert element.phase == "New"
        assert element.description == "Main entrance"
        assert element.properties is None
        assert element.geometry is None

    @pytest.mark.asyncio
    async def test_unknown_columns_become_properties(self) -> None:
        data = "guid,fireRating,count,ratio,isExternal,note,empty\nG1,EI30,3,0.5,TRUE,abc,\n"
        parsed = await TabularAdapter().parse(data, _context())

        element = parsed.elements[0]
        assert element.properties == {
            "firerating": "EI30",
            "count": 3,
            "ratio": 0.5,
            "isexternal": True,
            "note": "abc",
            "empty": None,
        }
        assert [e.name for e in element.property_entries] == [
            "firerating", "count", "ratio", "isexternal", "note", "empty",
        ]
        assert all(e.group == "Tabular" for e in element.property_entries)
        assert element.property_entries[1].raw_value == "3"

    @pytest.mark.asyncio
    async def test_quoted_fields_with_doubled_quotes(self) -> None:
        data = 'guid,name,comment\nG1,"Wall, exterior","He said ""hi"""\n'
        parsed = await TabularAdapter().parse(data, _context())

        element = parsed.elements[0]
        assert element.name == "Wall, exterior"
        assert element.properties == {"comment": 'He said "hi"'}

    @pytest.mark.asyncio
    async def test_guid_fallback_columns(self) -> None:
        data = "elementguid,id,name\nE1,I1,a\n,I2,b\n,,c\n"
        parsed = await TabularAdapter().parse(data, _context())

        guids = [e.guid for e in parsed.elements]
        assert guids[0] == "E1"
        assert guids[1] == "I2"
        assert guids[2] not in ("", None, "E1", "I2")

    @pytest.mark.asyncio
    async def test_synthesized_guids_are_unique(self) -> None:
        data = "name\na\nb\nc\n"
        parsed = await TabularAdapter().parse(data, _context())

        guids = {e.guid for e in parsed.elements}
        assert len(guids) == 3

    @pytest.mark.asyncio
    async def test_stable_guids_repeat_across_parses(self) -> None:
        data = "name\na\nb\n"
        first = await TabularAdapter().parse(data, _context(stable_guids=True))
        second = await TabularAdapter().parse(data, _context(stable_guids=True))

        assert [e.guid for e in first.elements] == [e.guid for e in second.elements]

    @pytest.mark.asyncio
    async def test_geometry_only_with_quantity_columns(self) -> None:
        data = "guid,length,area,volume,units\nG1,4.5,,,m\nG2,,,,\n"
        parsed = await TabularAdapter().parse(data, _context())

        first, second = parsed.elements
        assert first.geometry is not None
        assert first.geometry.length == 4.5
        assert first.geometry.area is None
        assert first.geometry.units == "m"
        assert first.geometry.bbox_min is None
        assert second.geometry is None

    @pytest.mark.asyncio
    async def test_non_numeric_quantities_and_units_alone_give_no_geometry(self) -> None:
        data = "guid,length,units\nG1,n/a,\nG2,,m\nG3,n/a,m\n"
        parsed = await TabularAdapter().parse(data, _context())

        assert [e.geometry for e in parsed.elements] == [None, None, None]

    @pytest.mark.asyncio
    async def test_duplicate_source_guids_are_resynthesized(self) -> None:
        data = "id,name,length\nA,x,1\nA,y,2\n"
        parsed = await TabularAdapter().parse(data, _context())

        first, second = parsed.elements
        assert first.guid == "A"
        assert second.guid not in ("", "A")
        assert (first.name, second.name) == ("x", "y")
        assert second.geometry.length == 2.0

        [failure] = parsed.diagnostics
        assert failure.stage is ResolutionStage.GUID
        assert failure.element_ref == "row 2"
        assert failure.guid == second.guid

    @pytest.mark.asyncio
    async def test_duplicate_guid_replacement_is_stable(self) -> None:
        data = "guid\nA\nA\n"
        first = await TabularAdapter().parse(data, _context(stable_guids=True))
        second = await TabularAdapter().parse(data, _context(stable_guids=True))

        assert first.elements[1].guid == second.elements[1].guid != "A"

    @pytest.mark.asyncio
    async def test_short_rows_are_padded(self) -> None:
        data = "guid,name,category\nG1\n"
        parsed = await TabularAdapter().parse(data, _context())

        element = parsed.elements[0]
        assert element.guid == "G1"
        assert element.name is None
        assert element.category is None

    @pytest.mark.asyncio
    async def test_blank_lines_are_ignored(self) -> None:
        data = "guid,name\n\nG1,a\n\n"
        parsed = await TabularAdapter().parse(data, _context())

        assert len(parsed) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", ["", "guid,name\n", "\n\n"])
    async def test_header_only_raises_format_error(self, data: str) -> None:
        with pytest.raises(FormatError):
            await TabularAdapter().parse(data, _context())

    @pytest.mark.asyncio
    async def test_invalid_utf8_raises_format_error(self) -> None:
        with pytest.raises(FormatError):
            await TabularAdapter().parse(b"guid\n\xff\xfe\xfa\n", _context())

    @pytest.mark.asyncio
    async def test_utf8_bom_is_stripped(self) -> None:
        data = "\ufeffguid,name\nG1,a\n".encode("utf-8")
        parsed = await TabularAdapter().parse(data, _context())

        assert parsed.elements[0].guid == "G1"

    @pytest.mark.asyncio
    async def test_tsv_through_registry(self) -> None:
        adapter = get_adapter("tsv")
        parsed = await adapter.parse("guid\tname\nG1\tBeam, A\n", _context("tsv"))

        assert parsed.elements[0].name == "Beam, A"
        assert parsed.metadata.source_format == "tsv"

    @pytest.mark.asyncio
    async def test_metadata(self) -> None:
        data = "guid\nG1\nG2\n"
        parsed = await TabularAdapter().parse(data, _context(model_name="export"))

        assert parsed.metadata.element_count == 2
        assert parsed.metadata.storeys_detected == 0
        assert parsed.metadata.model_name == "export"
        assert parsed.diagnostics == ()
