"""BIM MCP Tools.

Tools for ingesting model files and querying normalized elements.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Awaitable, Callable
from uuid import UUID

from mcp.server import Server
from mcp.types import TextContent, Tool

from bim_ingest.application.services.handover_service import HandoverService
from bim_ingest.application.services.ingestion_service import IngestionService
from bim_ingest.application.services.query_service import QueryService
from bim_ingest.application.services.takeoff_service import GROUP_FIELDS, TakeoffService
from bim_ingest.domain import DomainError, ElementFilter, IObjectStorage, IUnitOfWork, ValidationError
from bim_ingest.infrastructure.adapters import supported_formats
from bim_ingest.infrastructure.repositories.unit_of_work import UnitOfWork
from bim_ingest.infrastructure.storage import LocalObjectStorage
from bim_ingest.shared.logging import get_logger

logger = get_logger(__name__)

UnitOfWorkFactory = Callable[[], IUnitOfWork]

_FILTER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "description": "Element filter",
    "properties": {
        "categories": {"type": "array", "items": {"type": "string"}},
        "systems": {"type": "array", "items": {"type": "string"}},
        "levels": {"type": "array", "items": {"type": "string"}},
        "types": {"type": "array", "items": {"type": "string"}},
        "search": {
            "type": "string",
            "description": "Case-insensitive match on name, guid, category or system",
        },
    },
}

_VERSION_ID: dict[str, Any] = {"type": "string", "description": "Model version UUID"}


def tool_definitions() -> list[Tool]:
    return [
        Tool(
            name="bim_ingest",
            description=(
                "Ingest a building model file (IFC, CSV/TSV export or model-exchange JSON). "
                "Returns the new model version and per-element diagnostics."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "file_path": {"type": "string", "description": "Path to the model file"},
                    "content": {
                        "type": "string",
                        "description": "Inline file content (alternative to file_path)",
                    },
                    "source_format": {"type": "string", "enum": supported_formats()},
                    "model_name": {"type": "string"},
                    "options": {
                        "type": "object",
                        "properties": {
                            "include_geometry": {"type": "boolean"},
                            "include_properties": {"type": "boolean"},
                            "include_spatial_structure": {"type": "boolean"},
                            "stable_guids": {"type": "boolean"},
                        },
                    },
                },
                "required": ["source_format"],
            },
        ),
        Tool(
            name="bim_query",
            description="Query the normalized elements of a model version with filters and paging.",
            inputSchema={
                "type": "object",
                "properties": {
                    "version_id": _VERSION_ID,
                    "filters": _FILTER_SCHEMA,
                    "limit": {"type": "integer", "default": 200},
                    "offset": {"type": "integer", "default": 0},
                    "include_properties": {"type": "boolean", "default": False},
                    "include_geometry": {"type": "boolean", "default": True},
                },
                "required": ["version_id"],
            },
        ),
        Tool(
            name="bim_takeoff",
            description="Compute length/area/volume totals, optionally grouped.",
            inputSchema={
                "type": "object",
                "properties": {
                    "version_id": _VERSION_ID,
                    "filters": _FILTER_SCHEMA,
                    "group_by": {"type": "string", "enum": list(GROUP_FIELDS)},
                },
                "required": ["version_id"],
            },
        ),
        Tool(
            name="bim_handover",
            description="Build the handover asset register for a model version.",
            inputSchema={
                "type": "object",
                "properties": {
                    "version_id": _VERSION_ID,
                    "filters": _FILTER_SCHEMA,
                    "property_keys": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Properties to include; omit for all, empty list for none",
                    },
                },
                "required": ["version_id"],
            },
        ),
    ]


class BimToolHandler:
    """Dispatches tool calls to the application services."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory = UnitOfWork,
        storage: IObjectStorage | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._storage = storage or LocalObjectStorage()
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]] = {
            "bim_ingest": self._ingest,
            "bim_query": self._query,
            "bim_takeoff": self._takeoff,
            "bim_handover": self._handover,
        }

    async def call(self, name: str, arguments: dict[str, Any]) -> list[TextContent]:
        handler = self._handlers.get(name)
        if handler is None:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

        try:
            result = await handler(arguments or {})
        except DomainError as e:
            logger.warning("Tool failed", tool=name, error=e.message, details=e.details)
            result = {"error": e.message, "details": e.details}
        except Exception as e:
            logger.error("Tool error", tool=name, error=str(e))
            return [TextContent(type="text", text=f"Error: {str(e)}")]

        return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]

    async def _ingest(self, args: dict[str, Any]) -> dict[str, Any]:
        if args.get("file_path"):
            path = Path(args["file_path"])
            if not path.is_file():
                raise ValidationError("file_path", "file not found", str(path))
            data: bytes | str = path.read_bytes()
        elif args.get("content") is not None:
            data = args["content"]
        else:
            raise ValidationError("file_path", "file_path or content is required")

        async with self._uow_factory() as uow:
            service = IngestionService(uow, self._storage)
            result = await service.ingest(
                data,
                source_format=args["source_format"],
                model_name=args.get("model_name"),
                options=args.get("options"),
            )
        return result.to_dict()

    async def _query(self, args: dict[str, Any]) -> dict[str, Any]:
        async with self._uow_factory() as uow:
            page = await QueryService(uow).query_elements(
                _version_id(args),
                ElementFilter.from_dict(args.get("filters")),
                limit=args.get("limit"),
                offset=args.get("offset", 0),
                include_properties=args.get("include_properties", False),
                include_geometry=args.get("include_geometry", True),
            )
        return page.to_dict()

    async def _takeoff(self, args: dict[str, Any]) -> dict[str, Any]:
        async with self._uow_factory() as uow:
            result = await TakeoffService(uow).compute_takeoff(
                _version_id(args),
                ElementFilter.from_dict(args.get("filters")),
                group_by=args.get("group_by"),
            )
        return result.to_dict()

    async def _handover(self, args: dict[str, Any]) -> dict[str, Any]:
        async with self._uow_factory() as uow:
            register = await HandoverService(uow).compute_handover_register(
                _version_id(args),
                ElementFilter.from_dict(args.get("filters")),
                property_keys=args.get("property_keys"),
            )
        return register.to_dict()


def _version_id(args: dict[str, Any]) -> UUID:
    raw = args.get("version_id")
    try:
        return UUID(str(raw))
    except ValueError as e:
        raise ValidationError("version_id", "not a valid UUID", raw) from e


def register_bim_tools(server: Server, handler: BimToolHandler | None = None) -> None:
    """Register the BIM tools.

    Args:
        server: MCP Server instance
        handler: Tool handler (defaults to database-backed repositories)
    """
    handler = handler or BimToolHandler()

    @server.list_tools()
    async def list_bim_tools() -> list[Tool]:
        return tool_definitions()

    @server.call_tool()
    async def call_bim_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        return await handler.call(name, arguments)
