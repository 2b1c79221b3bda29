"""SQLAlchemy ORM Models.

Maps model versions and normalized elements to database tables.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)
from sqlalchemy.sql import func


# =============================================================================
# Base Class
# =============================================================================


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# =============================================================================
# ORM Models
# =============================================================================


class BimModelVersionORM(Base):
    """One ingested revision of a model."""

    __tablename__ = "bim_model_versions"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True)
    model_name: Mapped[str] = mapped_column(String(255), nullable=False)
    source_format: Mapped[str] = mapped_column(String(32), nullable=False)
    object_ref: Mapped[str] = mapped_column(String(1024), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    source_schema: Mapped[str | None] = mapped_column(String(20))
    element_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    storeys_detected: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    parsed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    error: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    elements: Mapped[list["BimElementORM"]] = relationship(
        back_populates="version",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_versions_model_name", "model_name"),
    )


class BimElementORM(Base):
    """Normalized element of a model version."""

    __tablename__ = "bim_elements"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True)
    version_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("bim_model_versions.id", ondelete="CASCADE"),
        nullable=False,
    )

    guid: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))
    category: Mapped[str | None] = mapped_column(String(255))
    type: Mapped[str | None] = mapped_column(String(255))
    family: Mapped[str | None] = mapped_column(String(255))
    system: Mapped[str | None] = mapped_column(String(255))
    level: Mapped[str | None] = mapped_column(String(255))
    phase: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    properties: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    # Relationships
    version: Mapped["BimModelVersionORM"] = relationship(back_populates="elements")
    geometry: Mapped["BimGeometrySummaryORM | None"] = relationship(
        back_populates="element",
        cascade="all, delete-orphan",
        uselist=False,
    )
    property_entries: Mapped[list["BimPropertyEntryORM"]] = relationship(
        back_populates="element",
        cascade="all, delete-orphan",
        order_by="BimPropertyEntryORM.position",
    )

    __table_args__ = (
        UniqueConstraint("version_id", "guid", name="bim_elements_uk_guid"),
        Index("idx_bim_elements_version_category", "version_id", "category"),
        Index("idx_bim_elements_version_system", "version_id", "system"),
        Index("idx_bim_elements_version_level", "version_id", "level"),
        Index("idx_bim_elements_version_type", "version_id", "type"),
    )


class BimGeometrySummaryORM(Base):
    """Geometry summary, 1:1 with an element."""

    __tablename__ = "bim_geometry_summaries"

    element_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("bim_elements.id", ondelete="CASCADE"),
        primary_key=True,
    )
    bbox_min_x: Mapped[float | None] = mapped_column(Float)
    bbox_min_y: Mapped[float | None] = mapped_column(Float)
    bbox_min_z: Mapped[float | None] = mapped_column(Float)
    bbox_max_x: Mapped[float | None] = mapped_column(Float)
    bbox_max_y: Mapped[float | None] = mapped_column(Float)
    bbox_max_z: Mapped[float | None] = mapped_column(Float)
    length: Mapped[float | None] = mapped_column(Float)
    area: Mapped[float | None] = mapped_column(Float)
    volume: Mapped[float | None] = mapped_column(Float)
    units: Mapped[str | None] = mapped_column(String(64))

    element: Mapped["BimElementORM"] = relationship(back_populates="geometry")


class BimPropertyEntryORM(Base):
    """Property / quantity value with its originating group."""

    __tablename__ = "bim_property_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    element_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("bim_elements.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    group_name: Mapped[str | None] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Any] = mapped_column(JSON)
    unit: Mapped[str | None] = mapped_column(String(64))
    raw_value: Mapped[Any] = mapped_column(JSON)

    element: Mapped["BimElementORM"] = relationship(back_populates="property_entries")

    __table_args__ = (
        Index("idx_bim_property_entries_element", "element_id", "position"),
    )
