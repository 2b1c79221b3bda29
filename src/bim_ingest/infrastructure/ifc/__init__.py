"""IFC Infrastructure.

IfcOpenShell-backed engine wrapper and the IFC format adapter.
"""
from __future__ import annotations

from bim_ingest.infrastructure.ifc.adapter import IfcAdapter
from bim_ingest.infrastructure.ifc.engine import (
    FlatMesh,
    IfcEngine,
    IfcOpenShellEngine,
    PlacedGeometry,
    SpatialNode,
)

__all__ = [
    "IfcAdapter",
    "IfcEngine",
    "IfcOpenShellEngine",
    "SpatialNode",
    "PlacedGeometry",
    "FlatMesh",
]
