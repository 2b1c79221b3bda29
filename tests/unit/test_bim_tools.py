"""Tests for the MCP tool handler."""
from __future__ import annotations

import json

import pytest

from bim_ingest.presentation.tools.bim_tools import BimToolHandler, tool_definitions

BEAMS_CSV = "guid,name,category,length\nG1,Beam-A,Structural,4.5\nG2,Beam-B,Structural,3.0\n"


@pytest.fixture
def handler(uow, storage) -> BimToolHandler:
    return BimToolHandler(uow_factory=lambda: uow, storage=storage)


async def call(handler: BimToolHandler, name: str, arguments: dict) -> dict:
    content = await handler.call(name, arguments)
    return json.loads(content[0].text)


class TestBimTools:
    """Tests for BimToolHandler.call."""

    def test_tool_definitions(self) -> None:
        names = [tool.name for tool in tool_definitions()]
        assert names == ["bim_ingest", "bim_query", "bim_takeoff", "bim_handover"]

    @pytest.mark.asyncio
    async def test_ingest_query_takeoff_handover(self, handler) -> None:
        ingested = await call(
            handler, "bim_ingest", {"content": BEAMS_CSV, "source_format": "csv"}
        )
        version_id = ingested["version"]["id"]
        assert ingested["version"]["status"] == "parsed"

        page = await call(handler, "bim_query", {"version_id": version_id, "limit": 1})
        assert page["total"] == 2
        assert len(page["elements"]) == 1

        takeoff = await call(
            handler, "bim_takeoff", {"version_id": version_id, "group_by": "category"}
        )
        assert takeoff["groups"][0]["group"] == "Structural"
        assert takeoff["summary"]["total_length"] == 7.5

        register = await call(
            handler,
            "bim_handover",
            {"version_id": version_id, "filters": {"search": "Beam-A"}},
        )
        assert register["asset_count"] == 1
        assert register["assets"][0]["guid"] == "G1"

    @pytest.mark.asyncio
    async def test_handover_property_keys(self, handler) -> None:
        ingested = await call(
            handler, "bim_ingest", {"content": "guid,maker\nG1,Acme\n", "source_format": "csv"}
        )
        version_id = ingested["version"]["id"]

        omitted = await call(handler, "bim_handover", {"version_id": version_id})
        assert omitted["assets"][0]["properties"] == {"maker": "Acme"}

        empty = await call(handler, "bim_handover", {"version_id": version_id, "property_keys": []})
        assert "properties" not in empty["assets"][0]

        handover = next(t for t in tool_definitions() if t.name == "bim_handover")
        description = handover.inputSchema["properties"]["property_keys"]["description"]
        assert "empty list for none" in description

    @pytest.mark.asyncio
    async def test_ingest_from_file(self, handler, tmp_path) -> None:
        path = tmp_path / "beams.csv"
        path.write_text(BEAMS_CSV)

        ingested = await call(handler, "bim_ingest", {"file_path": str(path), "source_format": "csv"})

        assert ingested["version"]["element_count"] == 2

    @pytest.mark.asyncio
    async def test_domain_errors_are_reported(self, handler) -> None:
        bad_id = await call(handler, "bim_query", {"version_id": "not-a-uuid"})
        assert bad_id["details"]["field"] == "version_id"

        no_input = await call(handler, "bim_ingest", {"source_format": "csv"})
        assert "error" in no_input

        unsupported = await call(
            handler, "bim_ingest", {"content": "x", "source_format": "dwg"}
        )
        assert "error" in unsupported

    @pytest.mark.asyncio
    async def test_unknown_tool(self, handler) -> None:
        content = await handler.call("bim_delete", {})
        assert content[0].text == "Unknown tool: bim_delete"
