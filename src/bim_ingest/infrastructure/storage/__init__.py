"""Object storage for raw source files."""
from __future__ import annotations

from bim_ingest.infrastructure.storage.object_storage import LocalObjectStorage

__all__ = ["LocalObjectStorage"]
