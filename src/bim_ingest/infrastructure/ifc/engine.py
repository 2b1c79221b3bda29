"""IFC geometry engine.

IfcOpenShellEngine wraps IfcOpenShell behind a handle-based interface:
models are opened from a byte buffer into integer handles, entities are
addressed by express id and read as plain records, and meshes come back
flattened (placed geometries with interleaved vertex buffers and
column-major transforms). The engine and every opened model are scoped
resources; use engine_session() and opened_model().
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Protocol

import ifcopenshell
import ifcopenshell.geom
import ifcopenshell.util.element

from bim_ingest.domain import FormatError
from bim_ingest.infrastructure.ifc.types import SUPPORTED_SCHEMAS
from bim_ingest.infrastructure.ifc.values import IfcEnum
from bim_ingest.shared.logging import get_logger

logger = get_logger(__name__)

# Position (3) + normal (3)
VERTEX_STRIDE = 6

# Attributes never followed when reading records
SKIPPED_ATTRIBUTES = frozenset({"OwnerHistory", "Representation", "ObjectPlacement"})


@dataclass
class SpatialNode:
    """Node of the spatial tree."""

    express_id: int
    type: str
    children: list[SpatialNode] = field(default_factory=list)


@dataclass(frozen=True)
class PlacedGeometry:
    """One placed sub-geometry of a flattened mesh.

    Attributes:
        vertex_data: Interleaved [x, y, z, nx, ny, nz, ...]
        flat_transformation: 4x4 column-major matrix, translation at 12..14
    """

    vertex_data: tuple[float, ...]
    flat_transformation: tuple[float, ...]


@dataclass(frozen=True)
class FlatMesh:
    express_id: int
    geometries: tuple[PlacedGeometry, ...] = ()


class IfcEngine(Protocol):
    """Handle-based IFC engine interface."""

    def init(self) -> None: ...
    def dispose(self) -> None: ...
    def open_model(self, data: bytes) -> int: ...
    def close_model(self, model_id: int) -> None: ...
    def get_model_schema(self, model_id: int) -> str: ...
    def get_spatial_structure(self, model_id: int) -> SpatialNode | None: ...
    def get_line_ids_with_type(self, model_id: int, type_name: str) -> list[int]: ...
    def get_line(self, model_id: int, express_id: int) -> dict[str, Any]: ...
    def get_line_type(self, model_id: int, express_id: int) -> str: ...
    def get_guid(self, model_id: int, express_id: int) -> str | None: ...
    def get_property_sets(
        self, model_id: int, express_id: int, include_type_properties: bool = True,
    ) -> list[dict[str, Any]]: ...
    def get_flat_mesh(self, model_id: int, express_id: int) -> FlatMesh: ...


@contextmanager
def engine_session(factory: Callable[[], IfcEngine]) -> Iterator[IfcEngine]:
    """Create and initialize an engine, disposing it on every exit path."""
    engine = factory()
    engine.init()
    try:
        yield engine
    finally:
        engine.dispose()


@contextmanager
def opened_model(engine: IfcEngine, data: bytes, source_format: str = "ifc") -> Iterator[int]:
    """Open a model handle, closing it on every exit path.

    Raises:
        FormatError: If the engine returns a non-positive handle
    """
    model_id = engine.open_model(data)
    if model_id <= 0:
        raise FormatError(source_format, "failed to open IFC model", {"handle": model_id})
    try:
        yield model_id
    finally:
        engine.close_model(model_id)


class IfcOpenShellEngine:
    """IfcEngine backed by IfcOpenShell."""

    def __init__(self) -> None:
        self._models: dict[int, ifcopenshell.file] = {}
        self._next_handle = 1
        self._geom_settings: Any = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def init(self) -> None:
        # Default settings keep vertices local; placement comes back as
        # the shape transformation.
        self._geom_settings = ifcopenshell.geom.settings()

    def dispose(self) -> None:
        self._models.clear()
        self._geom_settings = None

    def open_model(self, data: bytes) -> int:
        """Decode an IFC STEP payload into a model handle."""
        try:
            model = ifcopenshell.file.from_string(data.decode("utf-8", errors="ignore"))
            schema = model.schema
        except Exception as e:
            raise FormatError("ifc", f"undecodable IFC payload: {e}") from e

        if schema not in SUPPORTED_SCHEMAS:
            raise FormatError(
                "ifc",
                f"unsupported IFC schema: {schema}",
                {"supported_schemas": sorted(SUPPORTED_SCHEMAS)},
            )

        handle = self._next_handle
        self._next_handle += 1
        self._models[handle] = model
        return handle

    def close_model(self, model_id: int) -> None:
        self._models.pop(model_id, None)

    def _model(self, model_id: int) -> ifcopenshell.file:
        model = self._models.get(model_id)
        if model is None:
            raise KeyError(f"IFC model handle not open: {model_id}")
        return model

    # =========================================================================
    # Queries
    # =========================================================================

    def get_model_schema(self, model_id: int) -> str:
        return self._model(model_id).schema

    def get_spatial_structure(self, model_id: int) -> SpatialNode | None:
        """Spatial tree rooted at IfcProject.

        Children are aggregated objects (site, building, storey, space)
        followed by elements contained in the node.
        """
        projects = self._model(model_id).by_type("IfcProject")
        if not projects:
            return None

        root: SpatialNode | None = None
        visited: set[int] = set()
        # Explicit depth-first stack; children are pushed reversed to keep order
        stack: list[tuple[Any, SpatialNode | None]] = [(projects[0], None)]
        while stack:
            entity, parent = stack.pop()
            if entity.id() in visited:
                continue
            visited.add(entity.id())

            node = SpatialNode(express_id=entity.id(), type=entity.is_a())
            if parent is None:
                root = node
            else:
                parent.children.append(node)

            related = self._spatial_children(entity)
            stack.extend((child, node) for child in reversed(related))
        return root

    @staticmethod
    def _spatial_children(entity: Any) -> list[Any]:
        related: list[Any] = []
        for rel in getattr(entity, "IsDecomposedBy", None) or ():
            related.extend(rel.RelatedObjects or ())
        for rel in getattr(entity, "ContainsElements", None) or ():
            related.extend(rel.RelatedElements or ())
        return related

    def get_line_ids_with_type(self, model_id: int, type_name: str) -> list[int]:
        """Express ids of entities of a type, subtypes included.

        Types unknown to the model's schema yield no ids.
        """
        try:
            entities = self._model(model_id).by_type(type_name, include_subtypes=True)
        except (RuntimeError, ValueError):
            logger.debug("IFC type not in schema", ifc_type=type_name)
            return []
        return [entity.id() for entity in entities]

    def get_line(self, model_id: int, express_id: int) -> dict[str, Any]:
        return self._record(self._model(model_id).by_id(express_id), depth=1)

    def get_line_type(self, model_id: int, express_id: int) -> str:
        return self._model(model_id).by_id(express_id).is_a()

    def get_guid(self, model_id: int, express_id: int) -> str | None:
        entity = self._model(model_id).by_id(express_id)
        return getattr(entity, "GlobalId", None)

    def get_property_sets(
        self,
        model_id: int,
        express_id: int,
        include_type_properties: bool = True,
    ) -> list[dict[str, Any]]:
        """Property sets and quantity sets of an element, as records.

        Args:
            model_id: Model handle
            express_id: Element express id
            include_type_properties: Also return sets of the element's type

        Returns:
            Records with Name and HasProperties or Quantities item lists
        """
        entity = self._model(model_id).by_id(express_id)
        definitions: list[Any] = []

        for rel in getattr(entity, "IsDefinedBy", None) or ():
            if not rel.is_a("IfcRelDefinesByProperties"):
                continue
            definition = rel.RelatingPropertyDefinition
            if isinstance(definition, (list, tuple)):
                definitions.extend(definition)
            elif definition is not None:
                definitions.append(definition)

        if include_type_properties:
            element_type = ifcopenshell.util.element.get_type(entity)
            if element_type is not None:
                definitions.extend(getattr(element_type, "HasPropertySets", None) or ())

        return [
            self._record(definition, depth=3)
            for definition in definitions
            if definition.is_a("IfcPropertySet") or definition.is_a("IfcElementQuantity")
        ]

    def get_flat_mesh(self, model_id: int, express_id: int) -> FlatMesh:
        """Tessellate an element.

        Elements without a representation have an empty mesh.
        """
        entity = self._model(model_id).by_id(express_id)
        if getattr(entity, "Representation", None) is None:
            return FlatMesh(express_id=express_id)

        shape = ifcopenshell.geom.create_shape(self._geom_settings, entity)
        verts = tuple(shape.geometry.verts)
        normals = tuple(shape.geometry.normals)
        if len(normals) != len(verts):
            normals = (0.0,) * len(verts)

        vertex_data: list[float] = []
        for i in range(0, len(verts) - 2, 3):
            vertex_data.extend(verts[i:i + 3])
            vertex_data.extend(normals[i:i + 3])

        return FlatMesh(
            express_id=express_id,
            geometries=(
                PlacedGeometry(
                    vertex_data=tuple(vertex_data),
                    flat_transformation=_column_major_4x4(shape.transformation.matrix),
                ),
            ),
        )

    # =========================================================================
    # Records
    # =========================================================================

    def _record(self, entity: Any, depth: int) -> dict[str, Any]:
        """Plain dict view of an entity.

        Defined-type wrappers become {"type", "value"}; enumeration
        attributes become IfcEnum; referenced entities are expanded while
        depth remains, otherwise reduced to {"type", "id"}.
        """
        info = entity.get_info(include_identifier=True, recursive=False)
        record: dict[str, Any] = {"id": info.pop("id", None), "type": info.pop("type", entity.is_a())}
        for name, value in info.items():
            if name in SKIPPED_ATTRIBUTES:
                continue
            if isinstance(value, str) and _is_enumeration(entity, name):
                record[name] = IfcEnum(value)
            else:
                record[name] = self._plain(value, depth)
        return record

    def _plain(self, value: Any, depth: int) -> Any:
        if isinstance(value, ifcopenshell.entity_instance):
            if value.id() == 0:
                return {"type": value.is_a(), "value": value.wrappedValue}
            if depth > 0:
                return self._record(value, depth - 1)
            return {"type": value.is_a(), "id": value.id()}
        if isinstance(value, (list, tuple)):
            return [self._plain(v, depth) for v in value]
        return value


def _is_enumeration(entity: Any, attribute: str) -> bool:
    try:
        return entity.attribute_type(attribute) == "ENUMERATION"
    except (AttributeError, IndexError, RuntimeError):
        return False


def _column_major_4x4(matrix: Any) -> tuple[float, ...]:
    """Normalize an IfcOpenShell shape matrix to 16 column-major values.

    Older releases return a 4x3 column-major matrix (12 values) with an
    implicit last row of (0, 0, 0, 1).
    """
    values = tuple(float(v) for v in getattr(matrix, "data", matrix))
    if len(values) == 16:
        return values
    if len(values) == 12:
        return (
            *values[0:3], 0.0,
            *values[3:6], 0.0,
            *values[6:9], 0.0,
            *values[9:12], 1.0,
        )
    raise ValueError(f"Unexpected transformation matrix size: {len(values)}")
