"""Geometry resolution.

Folds the placed vertices of an element's flattened mesh into a world
bounding box and merges it with the element's quantity totals.
"""
from __future__ import annotations

import math
from typing import Sequence

from bim_ingest.domain import (
    ElementResolutionFailure,
    GeometrySummary,
    ResolutionStage,
    Vector3,
)
from bim_ingest.infrastructure.ifc.engine import VERTEX_STRIDE, IfcEngine
from bim_ingest.infrastructure.ifc.properties import QuantityTotals
from bim_ingest.shared.logging import get_logger
from bim_ingest.shared.result import Result, err, ok

logger = get_logger(__name__)

Bounds = tuple[Vector3, Vector3]


def apply_transform(x: float, y: float, z: float, matrix: Sequence[float]) -> Vector3:
    """Apply a column-major 4x4 affine transform to a point."""
    return (
        matrix[0] * x + matrix[4] * y + matrix[8] * z + matrix[12],
        matrix[1] * x + matrix[5] * y + matrix[9] * z + matrix[13],
        matrix[2] * x + matrix[6] * y + matrix[10] * z + matrix[14],
    )


class BoundingBox:
    """Running min/max over observed points."""

    def __init__(self) -> None:
        self.min = [math.inf, math.inf, math.inf]
        self.max = [-math.inf, -math.inf, -math.inf]

    def add(self, point: Vector3) -> None:
        for axis in range(3):
            if point[axis] < self.min[axis]:
                self.min[axis] = point[axis]
            if point[axis] > self.max[axis]:
                self.max[axis] = point[axis]

    @property
    def is_empty(self) -> bool:
        return self.min[0] == math.inf

    def corners(self) -> Bounds | None:
        if self.is_empty:
            return None
        return (
            (self.min[0], self.min[1], self.min[2]),
            (self.max[0], self.max[1], self.max[2]),
        )


def mesh_bounds(
    engine: IfcEngine,
    model_id: int,
    express_id: int,
    guid: str | None = None,
) -> Result[Bounds | None, ElementResolutionFailure]:
    """World bounding box of an element's flattened mesh.

    Any engine or decoding error is contained and returned as a Failure;
    an element without vertices succeeds with None.
    """
    box = BoundingBox()
    try:
        mesh = engine.get_flat_mesh(model_id, express_id)
        for placed in mesh.geometries:
            matrix = placed.flat_transformation
            if len(matrix) != 16:
                raise ValueError(f"transformation has {len(matrix)} values, expected 16")
            data = placed.vertex_data
            for v in range(0, len(data) - 2, VERTEX_STRIDE):
                box.add(apply_transform(data[v], data[v + 1], data[v + 2], matrix))
    except Exception as e:
        logger.debug("Geometry resolution failed", express_id=express_id, error=str(e))
        return err(
            ElementResolutionFailure(
                element_ref=f"#{express_id}",
                guid=guid,
                stage=ResolutionStage.GEOMETRY,
                reason=str(e) or type(e).__name__,
            )
        )
    return ok(box.corners())


def summarize(bounds: Bounds | None, quantities: QuantityTotals) -> GeometrySummary | None:
    """Merge bounds and quantities; None when neither is known."""
    bbox_min, bbox_max = bounds if bounds is not None else (None, None)
    return GeometrySummary.build(
        bbox_min=bbox_min,
        bbox_max=bbox_max,
        length=quantities.length,
        area=quantities.area,
        volume=quantities.volume,
        units=quantities.units,
    )
