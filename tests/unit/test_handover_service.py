"""Tests for HandoverService."""
from __future__ import annotations

import pytest
from conftest import seed_version

from bim_ingest.application.services.handover_service import HandoverService
from bim_ingest.domain import ElementFilter, NormalizedElement


def sample_elements() -> list[NormalizedElement]:
    return [
        NormalizedElement(
            guid="D-1", name="Door 1", category="Doors", level="L1", type="Single",
            properties={"fireRating": "EI30", "manufacturer": "Acme"},
        ),
        NormalizedElement(
            guid="D-2", name="Door 2", category="Doors", level="L1",
            properties={"manufacturer": "Acme"},
        ),
        NormalizedElement(guid="P-1", name="Pump", category="Mechanical Equipment", system="CHW"),
    ]


class TestHandoverService:
    """Tests for HandoverService.compute_handover_register."""

    @pytest.mark.asyncio
    async def test_full_property_maps(self, uow) -> None:
        version_id = await seed_version(uow, sample_elements())

        async with uow:
            register = await HandoverService(uow).compute_handover_register(version_id)

        assert register.asset_count == 3
        assets = {a.guid: a for a in register.assets}
        assert assets["D-1"].properties == {"fireRating": "EI30", "manufacturer": "Acme"}
        assert assets["P-1"].properties is None
        assert "properties" not in assets["P-1"].to_dict()
        assert assets["P-1"].to_dict()["system"] == "CHW"

    @pytest.mark.asyncio
    async def test_requested_keys_only(self, uow) -> None:
        version_id = await seed_version(uow, sample_elements())

        async with uow:
            register = await HandoverService(uow).compute_handover_register(
                version_id,
                ElementFilter(categories=("Doors",)),
                property_keys=["fireRating"],
            )

        assets = {a.guid: a.to_dict() for a in register.assets}
        assert register.asset_count == 2
        assert assets["D-1"]["properties"] == {"fireRating": "EI30"}
        assert "properties" not in assets["D-2"]

    @pytest.mark.asyncio
    async def test_empty_key_list_selects_no_properties(self, uow) -> None:
        version_id = await seed_version(uow, sample_elements())

        async with uow:
            register = await HandoverService(uow).compute_handover_register(
                version_id, property_keys=[]
            )

        assert register.asset_count == 3
        for asset in register.assets:
            assert asset.properties is None
            assert "properties" not in asset.to_dict()

    @pytest.mark.asyncio
    async def test_asset_fields(self, uow) -> None:
        version_id = await seed_version(uow, sample_elements())

        async with uow:
            register = await HandoverService(uow).compute_handover_register(
                version_id, ElementFilter(search="Door 1")
            )

        assert register.to_dict() == {
            "asset_count": 1,
            "assets": [
                {
                    "guid": "D-1",
                    "name": "Door 1",
                    "category": "Doors",
                    "system": None,
                    "level": "L1",
                    "type": "Single",
                    "properties": {"fireRating": "EI30", "manufacturer": "Acme"},
                }
            ],
        }
