"""MCP Tools registration."""
from __future__ import annotations

from bim_ingest.presentation.tools.bim_tools import (
    BimToolHandler,
    register_bim_tools,
    tool_definitions,
)

__all__ = ["BimToolHandler", "register_bim_tools", "tool_definitions"]
