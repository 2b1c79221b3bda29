"""Application services.

Query, takeoff, handover and ingestion use cases.
"""
from __future__ import annotations

# Re-export services for convenient imports:
#   from bim_ingest.application.services import TakeoffService

__all__ = [
    "HandoverService",
    "IngestionService",
    "QueryService",
    "TakeoffService",
]


def __getattr__(name: str):
    """Lazy imports for services."""
    if name == "HandoverService":
        from bim_ingest.application.services.handover_service import HandoverService
        return HandoverService
    elif name == "IngestionService":
        from bim_ingest.application.services.ingestion_service import IngestionService
        return IngestionService
    elif name == "QueryService":
        from bim_ingest.application.services.query_service import QueryService
        return QueryService
    elif name == "TakeoffService":
        from bim_ingest.application.services.takeoff_service import TakeoffService
        return TakeoffService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
