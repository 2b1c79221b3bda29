"""IFC Adapter.

Parses IFC STEP payloads into normalized elements:
- Spatial structure walk (storey assignment)
- Element enumeration over the supported IFC types
- Property set / quantity extraction
- Placed-geometry bounding boxes
"""
from __future__ import annotations

from typing import Callable

from bim_ingest.domain import (
    ElementResolutionFailure,
    NormalizedElement,
    ParsedModel,
    ParseMetadata,
    PropertyEntry,
    ResolutionStage,
    Scalar,
)
from bim_ingest.infrastructure.adapters.base import (
    GuidFactory,
    ParseContext,
    duplicate_guid,
    to_bytes,
)
from bim_ingest.infrastructure.ifc.engine import (
    IfcEngine,
    IfcOpenShellEngine,
    engine_session,
    opened_model,
)
from bim_ingest.infrastructure.ifc.geometry import mesh_bounds, summarize
from bim_ingest.infrastructure.ifc.properties import QuantityTotals, extract_property_entries
from bim_ingest.infrastructure.ifc.spatial import StoreyMap, build_storey_map
from bim_ingest.infrastructure.ifc.types import ELEMENT_TYPES, category_for
from bim_ingest.infrastructure.ifc.values import ifc_string
from bim_ingest.shared.logging import get_logger

logger = get_logger(__name__)


class IfcAdapter:
    """Adapter for IFC models.

    A fresh engine is created for every parse; the engine and the opened
    model are released on every exit path. Only a failure to open the
    model is fatal. Geometry or property failures for a single element
    are recorded in ParsedModel.diagnostics and the element is kept.
    """

    def __init__(self, engine_factory: Callable[[], IfcEngine] = IfcOpenShellEngine) -> None:
        self._engine_factory = engine_factory

    async def parse(self, data: bytes | str, context: ParseContext) -> ParsedModel:
        """Parse an IFC payload.

        Args:
            data: Raw IFC content
            context: Parse options

        Returns:
            ParsedModel with elements, metadata and diagnostics

        Raises:
            FormatError: If the model cannot be opened
        """
        payload = to_bytes(data)
        logger.info("Parsing IFC model", size_bytes=len(payload), model_name=context.model_name)

        with engine_session(self._engine_factory) as engine:
            with opened_model(engine, payload, context.source_format) as model_id:
                return self._parse_model(engine, model_id, payload, context)

    def _parse_model(
        self,
        engine: IfcEngine,
        model_id: int,
        payload: bytes,
        context: ParseContext,
    ) -> ParsedModel:
        schema = engine.get_model_schema(model_id)

        storeys = StoreyMap()
        if context.include_spatial_structure:
            storeys = build_storey_map(engine, model_id)

        guids = GuidFactory(payload, context.source_format, stable=context.stable_guids)
        elements: list[NormalizedElement] = []
        diagnostics: list[ElementResolutionFailure] = []
        seen: set[int] = set()

        for queried_type in ELEMENT_TYPES:
            ids = engine.get_line_ids_with_type(model_id, queried_type)
            if not ids:
                continue

            for express_id in ids:
                if express_id in seen:
                    continue
                seen.add(express_id)

                index = len(elements)
                element = self._parse_element(
                    engine, model_id, express_id, queried_type,
                    storeys, guids, index, context, diagnostics,
                )
                guid = guids.claim(element.guid, "ifc", index)
                if guid != element.guid:
                    diagnostics.append(duplicate_guid(f"#{express_id}", element.guid, guid))
                    element.guid = guid
                elements.append(element)

        metadata = ParseMetadata(
            source_format=context.source_format,
            element_count=len(elements),
            schema=schema,
            storeys_detected=storeys.storey_count,
            model_name=context.model_name,
        )

        logger.info(
            "IFC parse complete",
            schema=schema,
            elements=len(elements),
            storeys=storeys.storey_count,
            diagnostics=len(diagnostics),
        )

        return ParsedModel.create(elements, metadata, diagnostics)

    def _parse_element(
        self,
        engine: IfcEngine,
        model_id: int,
        express_id: int,
        queried_type: str,
        storeys: StoreyMap,
        guids: GuidFactory,
        index: int,
        context: ParseContext,
        diagnostics: list[ElementResolutionFailure],
    ) -> NormalizedElement:
        """Build one element from its entity record."""
        try:
            line = engine.get_line(model_id, express_id)
            ifc_type = engine.get_line_type(model_id, express_id) or queried_type
        except Exception as e:
            logger.debug("Entity record unreadable", express_id=express_id, error=str(e))
            element = self._unreadable_element(
                engine, model_id, express_id, queried_type, storeys, guids, index,
            )
            diagnostics.append(
                ElementResolutionFailure(
                    element_ref=f"#{express_id}",
                    guid=element.guid,
                    stage=ResolutionStage.RECORD,
                    reason=str(e) or type(e).__name__,
                )
            )
            return element

        guid = (
            ifc_string(line.get("GlobalId"))
            or engine.get_guid(model_id, express_id)
            or guids.new(ifc_type, index)
        )
        predefined_type = ifc_string(line.get("PredefinedType"))
        object_type = ifc_string(line.get("ObjectType"))

        properties: dict[str, Scalar] = {"ifcExpressId": express_id, "ifcType": ifc_type}
        if predefined_type:
            properties["ifcPredefinedType"] = predefined_type
        tag = ifc_string(line.get("Tag"))
        if tag:
            properties["ifcTag"] = tag

        entries: list[PropertyEntry] = []
        totals = QuantityTotals()
        if context.include_properties:
            try:
                entries, totals = extract_property_entries(engine, model_id, express_id)
            except Exception as e:
                logger.debug("Property extraction failed", express_id=express_id, error=str(e))
                diagnostics.append(
                    ElementResolutionFailure(
                        element_ref=f"#{express_id}",
                        guid=guid,
                        stage=ResolutionStage.PROPERTIES,
                        reason=str(e) or type(e).__name__,
                    )
                )

        bounds = None
        if context.include_geometry:
            result = mesh_bounds(engine, model_id, express_id, guid)
            if result.is_success():
                bounds = result.unwrap()
            else:
                diagnostics.append(result.error)

        return NormalizedElement(
            guid=guid,
            name=ifc_string(line.get("Name")),
            category=category_for(ifc_type, queried_type),
            type=predefined_type or object_type or ifc_type,
            family=object_type,
            level=storeys.get(express_id),
            description=ifc_string(line.get("Description")),
            properties=properties,
            property_entries=entries or None,
            geometry=summarize(bounds, totals),
        )

    def _unreadable_element(
        self,
        engine: IfcEngine,
        model_id: int,
        express_id: int,
        queried_type: str,
        storeys: StoreyMap,
        guids: GuidFactory,
        index: int,
    ) -> NormalizedElement:
        """Minimal element for an entity whose record cannot be read.

        Type and category come from the type the entity was enumerated
        under; the guid from the engine when it can still provide one.
        """
        try:
            guid = engine.get_guid(model_id, express_id)
        except Exception:
            guid = None

        return NormalizedElement(
            guid=guid or guids.new(queried_type, index),
            category=category_for(queried_type, queried_type),
            type=queried_type,
            level=storeys.get(express_id),
            properties={"ifcExpressId": express_id, "ifcType": queried_type},
        )
