"""Tests for TakeoffService."""
from __future__ import annotations

import pytest
from conftest import seed_version

from bim_ingest.application.services.query_service import QueryService
from bim_ingest.application.services.takeoff_service import TakeoffService, resolve_quantity
from bim_ingest.domain import ElementFilter, GeometrySummary, NormalizedElement, ValidationError


def sample_elements() -> list[NormalizedElement]:
    return [
        NormalizedElement(
            guid="A", category="Walls", level="L1",
            geometry=GeometrySummary(length=4.0, area=10.0, volume=2.0),
        ),
        NormalizedElement(
            guid="B", category="Walls", level="L2",
            geometry=GeometrySummary(area=5.0),
            properties={"length": "1.5", "Volume": 3},
        ),
        NormalizedElement(guid="C", category="Doors", properties={"Area": 2.0}),
        NormalizedElement(guid="D", category=None, properties={"length": True, "area": "n/a"}),
    ]


class TestResolveQuantity:
    """Tests for per-element quantity resolution."""

    def test_geometry_wins_over_properties(self) -> None:
        element = NormalizedElement(
            guid="x", geometry=GeometrySummary(length=2.0), properties={"length": 9.0}
        )
        assert resolve_quantity(element, "length") == 2.0

    def test_lowercase_key_before_capitalized(self) -> None:
        element = NormalizedElement(guid="x", properties={"length": "1.5", "Length": 7})
        assert resolve_quantity(element, "length") == 1.5

    def test_non_numeric_values_are_absent(self) -> None:
        element = NormalizedElement(guid="x", properties={"length": True, "area": "n/a"})
        assert resolve_quantity(element, "length") is None
        assert resolve_quantity(element, "area") is None
        assert resolve_quantity(element, "volume") is None


class TestTakeoffService:
    """Tests for TakeoffService.compute_takeoff."""

    @pytest.mark.asyncio
    async def test_summary_totals(self, uow) -> None:
        version_id = await seed_version(uow, sample_elements())

        async with uow:
            result = await TakeoffService(uow).compute_takeoff(version_id)

        assert result.summary.element_count == 4
        assert result.summary.total_length == pytest.approx(5.5)
        assert result.summary.total_area == pytest.approx(17.0)
        assert result.summary.total_volume == pytest.approx(5.0)
        assert result.groups == []

    @pytest.mark.asyncio
    async def test_group_by_category_with_unspecified_bucket(self, uow) -> None:
        version_id = await seed_version(uow, sample_elements())

        async with uow:
            result = await TakeoffService(uow).compute_takeoff(version_id, group_by="category")

        groups = {g.group: g for g in result.groups}
        assert set(groups) == {"Walls", "Doors", "Unspecified"}
        assert groups["Walls"].element_count == 2
        assert groups["Walls"].total_area == pytest.approx(15.0)
        assert groups["Doors"].total_area == pytest.approx(2.0)
        assert groups["Unspecified"].element_count == 1
        assert groups["Unspecified"].total_length == 0.0
        assert sum(g.element_count for g in result.groups) == result.summary.element_count

    @pytest.mark.asyncio
    async def test_groups_follow_first_seen_order(self, uow, test_settings) -> None:
        version_id = await seed_version(uow, sample_elements())

        async with uow:
            result = await TakeoffService(uow).compute_takeoff(version_id, group_by="level")
            page = await QueryService(uow, test_settings).query_elements(version_id)

        expected: list[str] = []
        for element in page.elements:
            key = element.level or "Unspecified"
            if key not in expected:
                expected.append(key)
        assert [g.group for g in result.groups] == expected

    @pytest.mark.asyncio
    async def test_filters_apply(self, uow) -> None:
        version_id = await seed_version(uow, sample_elements())

        async with uow:
            result = await TakeoffService(uow).compute_takeoff(
                version_id, ElementFilter(categories=("Doors",))
            )

        assert result.summary.element_count == 1
        assert result.summary.total_area == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_repeated_runs_are_identical(self, uow) -> None:
        version_id = await seed_version(uow, sample_elements())

        async with uow:
            first = await TakeoffService(uow).compute_takeoff(version_id, group_by="type")
            second = await TakeoffService(uow).compute_takeoff(version_id, group_by="type")

        assert first.to_dict() == second.to_dict()

    @pytest.mark.asyncio
    async def test_empty_version(self, uow) -> None:
        version_id = await seed_version(uow, [])

        async with uow:
            result = await TakeoffService(uow).compute_takeoff(version_id, group_by="system")

        assert result.to_dict() == {
            "group_by": "system",
            "summary": {
                "element_count": 0,
                "total_length": 0.0,
                "total_area": 0.0,
                "total_volume": 0.0,
            },
            "groups": [],
        }

    @pytest.mark.asyncio
    async def test_invalid_group_by(self, uow) -> None:
        version_id = await seed_version(uow, sample_elements())

        async with uow:
            with pytest.raises(ValidationError):
                await TakeoffService(uow).compute_takeoff(version_id, group_by="phase")
