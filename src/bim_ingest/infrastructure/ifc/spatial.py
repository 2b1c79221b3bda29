"""Spatial structure walk.

Assigns storey (level) names to every node below a building storey.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from bim_ingest.infrastructure.ifc.engine import IfcEngine, SpatialNode
from bim_ingest.infrastructure.ifc.types import STOREY_TYPE
from bim_ingest.infrastructure.ifc.values import ifc_string


@dataclass
class StoreyMap:
    """Express id -> storey name, plus the number of storeys seen."""

    levels: dict[int, str] = field(default_factory=dict)
    storey_count: int = 0

    def get(self, express_id: int) -> str | None:
        return self.levels.get(express_id)

    def __len__(self) -> int:
        return len(self.levels)


def build_storey_map(engine: IfcEngine, model_id: int) -> StoreyMap:
    """Walk the spatial tree with storey context inheritance.

    Pre-order walk: a storey node sets the current storey to its Name (or
    "Storey-<id>" when unnamed). The storey itself and every transitive
    descendant get that name until a nested storey overrides it. Nodes
    above the first storey get no level.

    Args:
        engine: Open engine
        model_id: Model handle

    Returns:
        StoreyMap for the model (empty when there is no spatial tree)
    """
    storey_map = StoreyMap()
    root = engine.get_spatial_structure(model_id)
    if root is None:
        return storey_map

    storey_type = STOREY_TYPE.upper()
    # Iterative to keep deep containment trees off the call stack
    stack: list[tuple[SpatialNode, str | None]] = [(root, None)]
    while stack:
        node, current = stack.pop()

        if (node.type or "").upper() == storey_type:
            line = engine.get_line(model_id, node.express_id)
            current = ifc_string(line.get("Name")) or f"Storey-{node.express_id}"
            storey_map.storey_count += 1

        if current is not None:
            storey_map.levels[node.express_id] = current

        for child in reversed(node.children):
            stack.append((child, current))

    return storey_map
