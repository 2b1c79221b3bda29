"""Initial schema creation

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create initial database schema."""

    # ==========================================================================
    # MODEL VERSIONS
    # ==========================================================================
    op.create_table(
        "bim_model_versions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("model_name", sa.String(255), nullable=False),
        sa.Column("source_format", sa.String(32), nullable=False),
        sa.Column("object_ref", sa.String(1024), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("source_schema", sa.String(20), nullable=True),
        sa.Column("element_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("storeys_detected", sa.Integer, nullable=False, server_default="0"),
        sa.Column("parsed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("idx_versions_model_name", "bim_model_versions", ["model_name"])

    # ==========================================================================
    # ELEMENTS
    # ==========================================================================
    op.create_table(
        "bim_elements",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "version_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("bim_model_versions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("guid", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("category", sa.String(255), nullable=True),
        sa.Column("type", sa.String(255), nullable=True),
        sa.Column("family", sa.String(255), nullable=True),
        sa.Column("system", sa.String(255), nullable=True),
        sa.Column("level", sa.String(255), nullable=True),
        sa.Column("phase", sa.String(255), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("properties", sa.JSON, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("version_id", "guid", name="bim_elements_uk_guid"),
    )
    op.create_index("idx_bim_elements_version_category", "bim_elements", ["version_id", "category"])
    op.create_index("idx_bim_elements_version_system", "bim_elements", ["version_id", "system"])
    op.create_index("idx_bim_elements_version_level", "bim_elements", ["version_id", "level"])
    op.create_index("idx_bim_elements_version_type", "bim_elements", ["version_id", "type"])

    # ==========================================================================
    # GEOMETRY SUMMARIES
    # ==========================================================================
    op.create_table(
        "bim_geometry_summaries",
        sa.Column(
            "element_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("bim_elements.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("bbox_min_x", sa.Float, nullable=True),
        sa.Column("bbox_min_y", sa.Float, nullable=True),
        sa.Column("bbox_min_z", sa.Float, nullable=True),
        sa.Column("bbox_max_x", sa.Float, nullable=True),
        sa.Column("bbox_max_y", sa.Float, nullable=True),
        sa.Column("bbox_max_z", sa.Float, nullable=True),
        sa.Column("length", sa.Float, nullable=True),
        sa.Column("area", sa.Float, nullable=True),
        sa.Column("volume", sa.Float, nullable=True),
        sa.Column("units", sa.String(64), nullable=True),
    )

    # ==========================================================================
    # PROPERTY ENTRIES
    # ==========================================================================
    op.create_table(
        "bim_property_entries",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "element_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("bim_elements.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("group_name", sa.String(255), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("value", sa.JSON, nullable=True),
        sa.Column("unit", sa.String(64), nullable=True),
        sa.Column("raw_value", sa.JSON, nullable=True),
    )
    op.create_index(
        "idx_bim_property_entries_element",
        "bim_property_entries",
        ["element_id", "position"],
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("bim_property_entries")
    op.drop_table("bim_geometry_summaries")
    op.drop_table("bim_elements")
    op.drop_table("bim_model_versions")
