"""Parse a small IFC model built with IfcOpenShell.

Geometry is disabled: the model carries no representations.
"""
from __future__ import annotations

import ifcopenshell
import ifcopenshell.guid
import pytest

from bim_ingest.infrastructure.adapters import ParseContext
from bim_ingest.infrastructure.ifc.adapter import IfcAdapter
from bim_ingest.infrastructure.ifc.engine import IfcOpenShellEngine, engine_session, opened_model

WALL_GUID = ifcopenshell.guid.new()


def _aggregate(model, parent, child) -> None:
    model.create_entity(
        "IfcRelAggregates",
        GlobalId=ifcopenshell.guid.new(),
        RelatingObject=parent,
        RelatedObjects=[child],
    )


def build_model() -> str:
    model = ifcopenshell.file(schema="IFC4")

    project = model.create_entity("IfcProject", GlobalId=ifcopenshell.guid.new(), Name="Demo")
    site = model.create_entity("IfcSite", GlobalId=ifcopenshell.guid.new(), Name="Site")
    building = model.create_entity("IfcBuilding", GlobalId=ifcopenshell.guid.new(), Name="Building")
    storey = model.create_entity(
        "IfcBuildingStorey", GlobalId=ifcopenshell.guid.new(), Name="Ground Floor"
    )
    _aggregate(model, project, site)
    _aggregate(model, site, building)
    _aggregate(model, building, storey)

    wall = model.create_entity(
        "IfcWall",
        GlobalId=WALL_GUID,
        Name="W1",
        PredefinedType="STANDARD",
        Tag="T1",
    )
    model.create_entity(
        "IfcRelContainedInSpatialStructure",
        GlobalId=ifcopenshell.guid.new(),
        RelatingStructure=storey,
        RelatedElements=[wall],
    )

    pset = model.create_entity(
        "IfcPropertySet",
        GlobalId=ifcopenshell.guid.new(),
        Name="Pset_WallCommon",
        HasProperties=[
            model.create_entity(
                "IfcPropertySingleValue",
                Name="FireRating",
                NominalValue=model.create_entity("IfcLabel", "EI60"),
            ),
        ],
    )
    qto = model.create_entity(
        "IfcElementQuantity",
        GlobalId=ifcopenshell.guid.new(),
        Name="Qto_WallBaseQuantities",
        Quantities=[model.create_entity("IfcQuantityArea", Name="NetSideArea", AreaValue=12.5)],
    )
    for definition in (pset, qto):
        model.create_entity(
            "IfcRelDefinesByProperties",
            GlobalId=ifcopenshell.guid.new(),
            RelatedObjects=[wall],
            RelatingPropertyDefinition=definition,
        )

    return model.to_string()


class TestIfcOpenShellModel:
    """End-to-end parse through IfcOpenShellEngine."""

    @pytest.mark.asyncio
    async def test_parse_small_model(self) -> None:
        context = ParseContext(source_format="ifc", model_name="demo", include_geometry=False)

        parsed = await IfcAdapter().parse(build_model(), context)

        assert parsed.metadata.schema == "IFC4"
        assert parsed.metadata.storeys_detected == 1
        assert len(parsed) == 1

        wall = parsed.elements[0]
        assert wall.guid == WALL_GUID
        assert wall.name == "W1"
        assert wall.category == "Walls"
        assert wall.type == "STANDARD"
        assert wall.level == "Ground Floor"
        assert wall.properties["ifcType"] == "IfcWall"
        assert wall.properties["ifcTag"] == "T1"

        entries = {(e.group, e.name): e.value for e in wall.property_entries}
        assert entries == {
            ("Pset_WallCommon", "FireRating"): "EI60",
            ("Qto_WallBaseQuantities", "NetSideArea"): 12.5,
        }
        assert wall.geometry.area == 12.5
        assert wall.geometry.bbox_min is None

    def test_engine_handles(self) -> None:
        with engine_session(IfcOpenShellEngine) as engine:
            with opened_model(engine, build_model().encode("utf-8")) as model_id:
                assert model_id > 0
                assert engine.get_model_schema(model_id) == "IFC4"
                walls = engine.get_line_ids_with_type(model_id, "IfcWall")
                assert len(walls) == 1
                assert engine.get_guid(model_id, walls[0]) == WALL_GUID

    def test_unknown_type_yields_no_ids(self) -> None:
        with engine_session(IfcOpenShellEngine) as engine:
            with opened_model(engine, build_model().encode("utf-8")) as model_id:
                assert engine.get_line_ids_with_type(model_id, "IfcNotAType") == []

    def test_spatial_structure_order(self) -> None:
        with engine_session(IfcOpenShellEngine) as engine:
            with opened_model(engine, build_model().encode("utf-8")) as model_id:
                root = engine.get_spatial_structure(model_id)

        path = []
        node = root
        while node is not None:
            path.append(node.type)
            node = node.children[0] if node.children else None
        assert path == ["IfcProject", "IfcSite", "IfcBuilding", "IfcBuildingStorey", "IfcWall"]

    def test_deep_spatial_structure(self) -> None:
        depth = 3000
        model = ifcopenshell.file(schema="IFC4")
        parent = model.create_entity("IfcProject", GlobalId=ifcopenshell.guid.new())
        for index in range(depth):
            space = model.create_entity(
                "IfcSpace", GlobalId=ifcopenshell.guid.new(), Name=f"S{index}"
            )
            _aggregate(model, parent, space)
            parent = space

        with engine_session(IfcOpenShellEngine) as engine:
            with opened_model(engine, model.to_string().encode("utf-8")) as model_id:
                root = engine.get_spatial_structure(model_id)

        levels = 0
        node = root
        while node.children:
            assert len(node.children) == 1
            node = node.children[0]
            levels += 1
        assert levels == depth
        assert node.type == "IfcSpace"
