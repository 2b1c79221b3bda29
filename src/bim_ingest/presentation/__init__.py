"""Presentation Layer.

MCP server and tools.
"""
from __future__ import annotations

from bim_ingest.presentation.server import main

__all__ = ["main"]
