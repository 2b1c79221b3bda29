"""Tabular Adapter.

Parses delimited text exports (one element per row) into normalized
elements.
"""
from __future__ import annotations

import csv
import io

from bim_ingest.domain import (
    ElementResolutionFailure,
    FormatError,
    GeometrySummary,
    NormalizedElement,
    ParsedModel,
    ParseMetadata,
    PropertyEntry,
    Scalar,
)
from bim_ingest.infrastructure.adapters.base import (
    GuidFactory,
    ParseContext,
    coerce_scalar,
    decode_text,
    duplicate_guid,
    to_bytes,
    to_number,
)
from bim_ingest.shared.logging import get_logger

logger = get_logger(__name__)

GUID_COLUMNS = ("guid", "elementguid", "id")
TEXT_COLUMNS = (
    "name",
    "category",
    "type",
    "family",
    "system",
    "level",
    "phase",
    "description",
)
QUANTITY_COLUMNS = ("length", "area", "volume")
KNOWN_COLUMNS = frozenset((*GUID_COLUMNS, *TEXT_COLUMNS, *QUANTITY_COLUMNS, "units"))

PROPERTY_GROUP = "Tabular"


class TabularAdapter:
    """Adapter for CSV/TSV exports with a header row."""

    def __init__(self, delimiter: str = ",") -> None:
        self._delimiter = delimiter

    async def parse(self, data: bytes | str, context: ParseContext) -> ParsedModel:
        """Parse delimited text.

        Args:
            data: Raw file content
            context: Parse options

        Returns:
            ParsedModel with one element per data row

        Raises:
            FormatError: If there is no header plus at least one data row
        """
        text = decode_text(data, context.source_format)
        rows = [
            row
            for row in csv.reader(io.StringIO(text), delimiter=self._delimiter)
            if any(cell.strip() for cell in row)
        ]
        if len(rows) < 2:
            raise FormatError(
                context.source_format,
                "expected a header row and at least one data row",
                {"rows": len(rows)},
            )

        header = [column.strip().lower() for column in rows[0]]
        guids = GuidFactory(to_bytes(data), context.source_format, stable=context.stable_guids)

        elements: list[NormalizedElement] = []
        diagnostics: list[ElementResolutionFailure] = []
        for index, row in enumerate(rows[1:]):
            element = self._parse_row(header, row, index, guids)
            guid = guids.claim(element.guid, "row", index)
            if guid != element.guid:
                diagnostics.append(duplicate_guid(f"row {index + 1}", element.guid, guid))
                element.guid = guid
            elements.append(element)

        logger.info(
            "Tabular parse complete",
            source_format=context.source_format,
            columns=len(header),
            elements=len(elements),
            duplicate_guids=len(diagnostics),
        )

        return ParsedModel.create(
            elements,
            ParseMetadata(
                source_format=context.source_format,
                element_count=len(elements),
                model_name=context.model_name,
            ),
            diagnostics,
        )

    def _parse_row(
        self,
        header: list[str],
        row: list[str],
        index: int,
        guids: GuidFactory,
    ) -> NormalizedElement:
        """Map one data row to an element."""
        # Short rows are padded, extra cells beyond the header are dropped
        cells = {column: (row[i] if i < len(row) else "") for i, column in enumerate(header)}

        def text(column: str) -> str | None:
            value = cells.get(column, "").strip()
            return value or None

        guid = next((text(c) for c in GUID_COLUMNS if text(c)), None) or guids.new("row", index)

        properties: dict[str, Scalar] = {}
        entries: list[PropertyEntry] = []
        for column, raw in cells.items():
            if column in KNOWN_COLUMNS or not column:
                continue
            value = coerce_scalar(raw)
            properties[column] = value
            entries.append(
                PropertyEntry(group=PROPERTY_GROUP, name=column, value=value, raw_value=raw)
            )

        quantities = {column: to_number(text(column)) for column in QUANTITY_COLUMNS}
        # Non-numeric cells ("n/a") count as absent; units alone are not a summary
        geometry = GeometrySummary.build(
            length=quantities["length"],
            area=quantities["area"],
            volume=quantities["volume"],
            units=text("units"),
        )

        return NormalizedElement(
            guid=guid,
            name=text("name"),
            category=text("category"),
            type=text("type"),
            family=text("family"),
            system=text("system"),
            level=text("level"),
            phase=text("phase"),
            description=text("description"),
            properties=properties or None,
            property_entries=entries or None,
            geometry=geometry,
        )
