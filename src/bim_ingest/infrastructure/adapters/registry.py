"""Adapter registry.

Maps format tags to adapter factories. Adapters are imported lazily so
the IFC engine is only loaded when an IFC file is parsed.
"""
from __future__ import annotations

from typing import Callable

from bim_ingest.domain import UnsupportedFormatError
from bim_ingest.infrastructure.adapters.base import FormatAdapter


def _tabular() -> FormatAdapter:
    from bim_ingest.infrastructure.adapters.tabular import TabularAdapter

    return TabularAdapter(",")


def _tabular_tsv() -> FormatAdapter:
    from bim_ingest.infrastructure.adapters.tabular import TabularAdapter

    return TabularAdapter("\t")


def _model_exchange() -> FormatAdapter:
    from bim_ingest.infrastructure.adapters.model_exchange import ModelExchangeAdapter

    return ModelExchangeAdapter()


def _ifc() -> FormatAdapter:
    from bim_ingest.infrastructure.ifc.adapter import IfcAdapter

    return IfcAdapter()


_FACTORIES: dict[str, Callable[[], FormatAdapter]] = {
    "csv": _tabular,
    "tsv": _tabular_tsv,
    "model-exchange": _model_exchange,
    "json": _model_exchange,
    "ifc": _ifc,
}


def supported_formats() -> list[str]:
    return sorted(_FACTORIES)


def get_adapter(source_format: str) -> FormatAdapter:
    """Create the adapter for a format tag.

    Args:
        source_format: Format tag (case-insensitive)

    Returns:
        Adapter instance

    Raises:
        UnsupportedFormatError: If no adapter handles the tag
    """
    factory = _FACTORIES.get(source_format.strip().lower())
    if factory is None:
        raise UnsupportedFormatError(source_format, supported_formats())
    return factory()


def register_adapter(source_format: str, factory: Callable[[], FormatAdapter]) -> None:
    """Register or replace the factory for a format tag."""
    _FACTORIES[source_format.strip().lower()] = factory
