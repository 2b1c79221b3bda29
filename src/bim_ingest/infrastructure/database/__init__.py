"""Database Infrastructure.

SQLAlchemy ORM models and connection management.
"""
from __future__ import annotations

from bim_ingest.infrastructure.database.connection import (
    close_database,
    get_engine,
    get_session_factory,
    init_database,
)
from bim_ingest.infrastructure.database.models import (
    Base,
    BimElementORM,
    BimGeometrySummaryORM,
    BimModelVersionORM,
    BimPropertyEntryORM,
)

__all__ = [
    # Connection
    "get_engine",
    "get_session_factory",
    "init_database",
    "close_database",
    # Models
    "Base",
    "BimModelVersionORM",
    "BimElementORM",
    "BimGeometrySummaryORM",
    "BimPropertyEntryORM",
]
