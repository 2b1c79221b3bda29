"""Format Adapters.

Pluggable parsers turning raw source files into ParsedModel envelopes.
"""
from __future__ import annotations

from bim_ingest.infrastructure.adapters.base import (
    FormatAdapter,
    GuidFactory,
    ParseContext,
)
from bim_ingest.infrastructure.adapters.registry import (
    get_adapter,
    register_adapter,
    supported_formats,
)

__all__ = [
    "FormatAdapter",
    "GuidFactory",
    "ParseContext",
    "get_adapter",
    "register_adapter",
    "supported_formats",
]
