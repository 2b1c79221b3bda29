"""Static IFC type tables.

Read-only lookup data, initialized once at import.
"""
from __future__ import annotations

from types import MappingProxyType

STOREY_TYPE = "IfcBuildingStorey"

SUPPORTED_SCHEMAS = frozenset({"IFC2X3", "IFC4", "IFC4X1", "IFC4X2", "IFC4X3"})

# Queried with subtypes included; overlapping entries are de-duplicated
# during enumeration.
ELEMENT_TYPES: tuple[str, ...] = (
    # Architecture
    "IfcWall",
    "IfcWallStandardCase",
    "IfcCurtainWall",
    "IfcSlab",
    "IfcRoof",
    "IfcCovering",
    "IfcDoor",
    "IfcWindow",
    "IfcStair",
    "IfcStairFlight",
    "IfcRamp",
    "IfcRampFlight",
    "IfcRailing",
    "IfcSpace",
    # Structure
    "IfcBeam",
    "IfcColumn",
    "IfcMember",
    "IfcPlate",
    "IfcFooting",
    "IfcPile",
    # Furnishing / generic
    "IfcFurnishingElement",
    "IfcBuildingElementProxy",
    # Distribution
    "IfcFlowSegment",
    "IfcFlowFitting",
    "IfcFlowTerminal",
    "IfcFlowController",
    "IfcFlowMovingDevice",
    "IfcFlowStorageDevice",
    "IfcFlowTreatmentDevice",
    "IfcEnergyConversionDevice",
    "IfcDistributionControlElement",
)

TYPE_CATEGORY: MappingProxyType[str, str] = MappingProxyType({
    "IfcWall": "Walls",
    "IfcWallStandardCase": "Walls",
    "IfcWallElementedCase": "Walls",
    "IfcCurtainWall": "Curtain Walls",
    "IfcSlab": "Floors",
    "IfcSlabStandardCase": "Floors",
    "IfcRoof": "Roofs",
    "IfcCovering": "Ceilings",
    "IfcDoor": "Doors",
    "IfcDoorStandardCase": "Doors",
    "IfcWindow": "Windows",
    "IfcWindowStandardCase": "Windows",
    "IfcStair": "Stairs",
    "IfcStairFlight": "Stairs",
    "IfcRamp": "Ramps",
    "IfcRampFlight": "Ramps",
    "IfcRailing": "Railings",
    "IfcSpace": "Rooms",
    "IfcBeam": "Structural Framing",
    "IfcBeamStandardCase": "Structural Framing",
    "IfcMember": "Structural Framing",
    "IfcMemberStandardCase": "Structural Framing",
    "IfcColumn": "Structural Columns",
    "IfcColumnStandardCase": "Structural Columns",
    "IfcPlate": "Plates",
    "IfcPlateStandardCase": "Plates",
    "IfcFooting": "Structural Foundations",
    "IfcPile": "Structural Foundations",
    "IfcFurnishingElement": "Furniture",
    "IfcFurniture": "Furniture",
    "IfcBuildingElementProxy": "Generic Models",
    "IfcFlowSegment": "Ducts & Pipes",
    "IfcDuctSegment": "Ducts",
    "IfcPipeSegment": "Pipes",
    "IfcCableCarrierSegment": "Cable Trays",
    "IfcCableSegment": "Cables",
    "IfcFlowFitting": "Fittings",
    "IfcDuctFitting": "Duct Fittings",
    "IfcPipeFitting": "Pipe Fittings",
    "IfcFlowTerminal": "Terminals",
    "IfcAirTerminal": "Air Terminals",
    "IfcSanitaryTerminal": "Plumbing Fixtures",
    "IfcLightFixture": "Lighting Fixtures",
    "IfcFlowController": "Controllers",
    "IfcValve": "Valves",
    "IfcDamper": "Dampers",
    "IfcFlowMovingDevice": "Mechanical Equipment",
    "IfcPump": "Mechanical Equipment",
    "IfcFan": "Mechanical Equipment",
    "IfcFlowStorageDevice": "Mechanical Equipment",
    "IfcFlowTreatmentDevice": "Mechanical Equipment",
    "IfcEnergyConversionDevice": "Mechanical Equipment",
    "IfcDistributionControlElement": "Controls",
})


def category_for(actual_type: str, queried_type: str | None = None) -> str | None:
    """Category of an entity: its own type first, then the type it was found by."""
    category = TYPE_CATEGORY.get(actual_type)
    if category is None and queried_type is not None:
        category = TYPE_CATEGORY.get(queried_type)
    return category
