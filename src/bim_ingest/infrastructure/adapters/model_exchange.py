"""Model-Exchange Adapter.

Parses object-graph JSON exports (Speckle-style commits) into normalized
elements. The graph is walked depth first through child collections and
objects are de-duplicated by id, since exporters may reference one object
from several parents.
"""
from __future__ import annotations

import json
from typing import Any, Iterator

from bim_ingest.domain import (
    ElementResolutionFailure,
    FormatError,
    GeometrySummary,
    NormalizedElement,
    ParsedModel,
    ParseMetadata,
    PropertyEntry,
    Scalar,
    Vector3,
)
from bim_ingest.infrastructure.adapters.base import (
    GuidFactory,
    ParseContext,
    decode_text,
    duplicate_guid,
    to_bytes,
    to_number,
)
from bim_ingest.shared.logging import get_logger

logger = get_logger(__name__)

CHILD_COLLECTIONS = ("elements", "@elements", "children", "@children")
PARAMETER_KEYS = ("parameters", "properties")
GUID_KEYS = ("applicationId", "guid", "elementId", "id")
BUILT_ELEMENT_PREFIX = "Objects.BuiltElements"

# Bookkeeping keys exporters put inside parameter maps
IGNORED_PARAMETER_KEYS = frozenset({"id", "speckle_type", "applicationId", "totalChildrenCount"})

PROPERTY_GROUP = "Parameters"


class ModelExchangeAdapter:
    """Adapter for JSON object-graph exports."""

    async def parse(self, data: bytes | str, context: ParseContext) -> ParsedModel:
        """Parse a JSON object graph.

        Args:
            data: Raw JSON document
            context: Parse options

        Returns:
            ParsedModel with one element per element object in the graph

        Raises:
            FormatError: If the document is not JSON or its root is not an
                object or list of objects
        """
        text = decode_text(data, context.source_format)
        try:
            root = json.loads(text)
        except json.JSONDecodeError as e:
            raise FormatError(context.source_format, f"invalid JSON: {e.msg}", {"line": e.lineno}) from e

        if not isinstance(root, (dict, list)):
            raise FormatError(context.source_format, "root must be an object or a list of objects")

        guids = GuidFactory(to_bytes(data), context.source_format, stable=context.stable_guids)
        elements: list[NormalizedElement] = []
        diagnostics: list[ElementResolutionFailure] = []

        for index, node in enumerate(self._walk(root)):
            element = self._to_element(node, index, guids, context)
            # Same applicationId on two distinct objects
            guid = guids.claim(element.guid, "object", index)
            if guid != element.guid:
                diagnostics.append(duplicate_guid(f"object {index}", element.guid, guid))
                element.guid = guid
            elements.append(element)

        logger.info(
            "Model-exchange parse complete",
            source_format=context.source_format,
            elements=len(elements),
            duplicate_guids=len(diagnostics),
        )

        return ParsedModel.create(
            elements,
            ParseMetadata(
                source_format=context.source_format,
                element_count=len(elements),
                schema=root.get("speckle_type") if isinstance(root, dict) else None,
                model_name=context.model_name,
            ),
            diagnostics,
        )

    # =========================================================================
    # Graph traversal
    # =========================================================================

    def _walk(self, root: dict[str, Any] | list[Any]) -> Iterator[dict[str, Any]]:
        """Yield element objects in document pre-order, each object once."""
        seen: set[str] = set()
        stack: list[Any] = list(reversed(root)) if isinstance(root, list) else [root]

        while stack:
            node = stack.pop()
            if not isinstance(node, dict):
                continue

            node_id = node.get("id")
            if isinstance(node_id, str):
                if node_id in seen:
                    continue
                seen.add(node_id)

            if self._is_element(node):
                yield node

            children: list[Any] = []
            for key in CHILD_COLLECTIONS:
                value = node.get(key)
                if isinstance(value, list):
                    children.extend(value)
                elif isinstance(value, dict):
                    children.append(value)
            stack.extend(reversed(children))

    @staticmethod
    def _is_element(node: dict[str, Any]) -> bool:
        if node.get("category"):
            return True
        speckle_type = node.get("speckle_type")
        return isinstance(speckle_type, str) and BUILT_ELEMENT_PREFIX in speckle_type

    # =========================================================================
    # Mapping
    # =========================================================================

    def _to_element(
        self,
        node: dict[str, Any],
        index: int,
        guids: GuidFactory,
        context: ParseContext,
    ) -> NormalizedElement:
        guid = next((str(node[k]) for k in GUID_KEYS if node.get(k)), None)
        if guid is None:
            guid = guids.new(str(node.get("speckle_type", "object")), index)

        properties: dict[str, Scalar] = {}
        entries: list[PropertyEntry] = []
        if context.include_properties:
            for name, value, unit, raw in self._iter_parameters(node):
                properties[name] = value
                entries.append(
                    PropertyEntry(group=PROPERTY_GROUP, name=name, value=value, unit=unit, raw_value=raw)
                )

        geometry = self._geometry(node) if context.include_geometry else None

        return NormalizedElement(
            guid=guid,
            name=_text(node.get("name")),
            category=_text(node.get("category")),
            type=_text(node.get("type")),
            family=_text(node.get("family")),
            system=_text(node.get("system")),
            level=_level(node.get("level")),
            phase=_text(node.get("phase")),
            description=_text(node.get("description")),
            properties=properties or None,
            property_entries=entries or None,
            geometry=geometry,
        )

    @staticmethod
    def _iter_parameters(node: dict[str, Any]) -> Iterator[tuple[str, Scalar, str | None, Any]]:
        for key in PARAMETER_KEYS:
            params = node.get(key)
            if not isinstance(params, dict):
                continue
            for param_key, param in params.items():
                if param_key in IGNORED_PARAMETER_KEYS:
                    continue
                if isinstance(param, dict):
                    name = _text(param.get("name")) or param_key
                    raw = param.get("value")
                    unit = _text(param.get("units"))
                else:
                    name, raw, unit = param_key, param, None
                yield name, _scalar(raw), unit, raw

    @staticmethod
    def _geometry(node: dict[str, Any]) -> GeometrySummary | None:
        bbox = node.get("bbox")
        bbox_min = bbox_max = None
        if isinstance(bbox, dict):
            bbox_min = _vector(bbox.get("min"))
            bbox_max = _vector(bbox.get("max"))

        return GeometrySummary.build(
            bbox_min=bbox_min,
            bbox_max=bbox_max,
            length=to_number(node.get("length")),
            area=to_number(node.get("area")),
            volume=to_number(node.get("volume")),
            units=_text(node.get("units")),
        )


def _text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _level(value: Any) -> str | None:
    if isinstance(value, dict):
        return _text(value.get("name"))
    return _text(value)


def _scalar(value: Any) -> Scalar:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return json.dumps(value, sort_keys=True)


def _vector(value: Any) -> Vector3 | None:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        return None
    coords = [to_number(v) for v in value]
    if any(c is None for c in coords):
        return None
    return (coords[0], coords[1], coords[2])  # type: ignore[return-value]
