"""Ingestion Service.

Stores a raw model file, parses it with the adapter for its format and
persists the normalized elements under a new model version.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping
from uuid import UUID

from bim_ingest.domain import (
    DomainError,
    ElementResolutionFailure,
    EntityNotFoundError,
    FileTooLargeError,
    IObjectStorage,
    IUnitOfWork,
    ModelVersion,
    ParsedModel,
    ValidationError,
)
from bim_ingest.infrastructure.adapters import FormatAdapter, ParseContext, get_adapter
from bim_ingest.shared.config import Settings, get_settings
from bim_ingest.shared.logging import get_logger, log_context

logger = get_logger(__name__)

PARSE_OPTIONS = frozenset({
    "include_geometry",
    "include_properties",
    "include_spatial_structure",
    "stable_guids",
})


@dataclass
class IngestionResult:
    version: ModelVersion
    diagnostics: list[ElementResolutionFailure] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version.to_dict(),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


class IngestionService:
    """Service for ingesting raw model files.

    The unit of work must already be entered. The pending version is
    committed before parsing so a failed parse leaves a failed version
    behind; elements and the parsed status are committed together.
    """

    def __init__(
        self,
        uow: IUnitOfWork,
        storage: IObjectStorage,
        settings: Settings | None = None,
    ) -> None:
        self._uow = uow
        self._storage = storage
        self._settings = settings or get_settings()

    async def ingest(
        self,
        data: bytes | str,
        *,
        source_format: str,
        model_name: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> IngestionResult:
        """Ingest a raw file as a new model version.

        Args:
            data: Raw file content
            source_format: Format tag (csv, tsv, model-exchange, json, ifc)
            model_name: Optional model name
            options: Parse option overrides (include_geometry,
                include_properties, include_spatial_structure, stable_guids)

        Returns:
            IngestionResult with the parsed version and diagnostics

        Raises:
            FileTooLargeError: If the payload exceeds max_upload_size_mb
            UnsupportedFormatError: If no adapter handles the format
            FormatError: If the payload cannot be parsed
        """
        payload = data.encode("utf-8") if isinstance(data, str) else data
        limit = self._settings.max_upload_size_bytes
        if len(payload) > limit:
            raise FileTooLargeError(source_format, len(payload), limit)

        adapter = get_adapter(source_format)
        source_format = source_format.strip().lower()
        context = self._context(source_format, model_name, options)

        object_ref = await self._storage.upload_raw_file(payload)
        version = ModelVersion.create(
            model_name=model_name or f"model-{object_ref[:12]}",
            source_format=source_format,
            object_ref=object_ref,
        )
        await self._uow.versions.add(version)
        await self._uow.commit()

        with log_context(version_id=str(version.id), source_format=source_format):
            logger.info("Ingestion started", size_bytes=len(payload))
            return await self._parse_and_store(version, adapter, payload, context)

    async def reingest(
        self,
        version_id: UUID,
        options: Mapping[str, Any] | None = None,
    ) -> IngestionResult:
        """Re-parse the stored raw file of an existing version.

        Previously stored elements of the version are replaced.

        Raises:
            EntityNotFoundError: If the version or its raw file is unknown
            FormatError: If the payload cannot be parsed
        """
        version = await self._uow.versions.get_by_id(version_id)
        if version is None:
            raise EntityNotFoundError("ModelVersion", version_id)

        payload = await self._storage.get_file(version.object_ref)
        adapter = get_adapter(version.source_format)
        context = self._context(version.source_format, version.model_name, options)

        with log_context(version_id=str(version.id), source_format=version.source_format):
            logger.info("Re-ingestion started", size_bytes=len(payload))
            return await self._parse_and_store(version, adapter, payload, context, replace=True)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _parse_and_store(
        self,
        version: ModelVersion,
        adapter: FormatAdapter,
        payload: bytes,
        context: ParseContext,
        replace: bool = False,
    ) -> IngestionResult:
        # Any failure past this point leaves the version failed, never pending
        try:
            parsed = await adapter.parse(payload, context)
            if replace:
                await self._uow.elements.delete_for_version(version.id)
            return await self._store(version, parsed)
        except Exception as e:
            await self._uow.rollback()
            await self._fail(version, e)
            raise

    def _context(
        self,
        source_format: str,
        model_name: str | None,
        options: Mapping[str, Any] | None,
    ) -> ParseContext:
        options = dict(options or {})
        unknown = sorted(set(options) - PARSE_OPTIONS)
        if unknown:
            raise ValidationError("options", f"unknown parse options: {', '.join(unknown)}", unknown)

        return ParseContext(
            source_format=source_format,
            model_name=model_name,
            include_geometry=bool(options.get("include_geometry", self._settings.ifc_include_geometry)),
            include_properties=bool(
                options.get("include_properties", self._settings.ifc_include_properties)
            ),
            include_spatial_structure=bool(
                options.get("include_spatial_structure", self._settings.ifc_include_spatial_structure)
            ),
            stable_guids=bool(options.get("stable_guids", self._settings.stable_guids)),
        )

    async def _store(self, version: ModelVersion, parsed: ParsedModel) -> IngestionResult:
        saved = await self._uow.elements.save_elements(version.id, parsed.elements)
        if parsed.metadata is not None:
            version.mark_parsed(parsed.metadata, saved)
        else:
            version.element_count = saved
        await self._uow.versions.update(version)
        await self._uow.commit()

        logger.info(
            "Ingestion complete",
            schema=version.schema,
            elements=saved,
            storeys=version.storeys_detected,
            diagnostics=len(parsed.diagnostics),
        )
        return IngestionResult(version=version, diagnostics=list(parsed.diagnostics))

    async def _fail(self, version: ModelVersion, error: Exception) -> None:
        if isinstance(error, DomainError):
            message, details = error.message, error.details
        else:
            message = str(error) or type(error).__name__
            details = {"type": type(error).__name__}

        version.mark_failed(message)
        await self._uow.versions.update(version)
        await self._uow.commit()
        logger.warning("Ingestion failed", error=message, details=details)
