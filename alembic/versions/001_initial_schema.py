"""Initial schema.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all initial tables."""
    # --- order_states ---
    op.create_table(
        "order_states",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("code", sa.String(2), nullable=False),
        sa.Column("description", sa.String(20), nullable=False),
        sa.Column("active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("display_order", sa.Integer(), server_default="0", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )

    # --- work_centers ---
    op.create_table(
        "work_centers",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("code", sa.String(10), nullable=True),
        sa.Column("description", sa.String(100), nullable=False),
        sa.Column("active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("hourly_capacity", sa.Integer(), nullable=True, comment="Informational; not enforced as a concurrency limit"),
        sa.Column("standard_hourly_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # --- operation_types ---
    op.create_table(
        "operation_types",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("code", sa.String(1), nullable=True),
        sa.Column("description", sa.String(100), nullable=False),
        sa.Column("active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # --- operators ---
    op.create_table(
        "operators",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("code", sa.String(10), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("competence_level", sa.Integer(), nullable=True, comment="1-5, informational only"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )

    # --- production_orders ---
    op.create_table(
        "production_orders",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("order_type", sa.String(1), nullable=False),
        sa.Column("order_year", sa.SmallInteger(), nullable=False),
        sa.Column("order_series", sa.String(3), nullable=False),
        sa.Column("order_number", sa.Integer(), nullable=False),
        sa.Column("order_line", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(100), nullable=True),
        sa.Column("article_code", sa.String(50), nullable=False),
        sa.Column("article_description", sa.String(50), nullable=False),
        sa.Column("unit_of_measure", sa.String(3), nullable=False),
        sa.Column("ordered_quantity", sa.Numeric(10, 3), nullable=False),
        sa.Column("produced_quantity", sa.Numeric(10, 3), server_default="0", nullable=False),
        sa.Column("cycle_time", sa.Float(), nullable=False, comment="Cycle time in seconds"),
        sa.Column("setup_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("setup_time", sa.Float(), nullable=True, comment="Setup time in minutes"),
        sa.Column("start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("actual_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expected_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("priority", sa.Integer(), server_default="2", nullable=False),
        sa.Column("hourly_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("actual_time", sa.Float(), nullable=True, comment="Time actually spent in seconds"),
        sa.Column("notes", sa.String(400), nullable=True),
        sa.Column("state_code", sa.String(2), server_default="ES", nullable=False),
        sa.Column("work_center_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("operation_type_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("operator_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["state_code"], ["order_states.code"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["work_center_id"], ["work_centers.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["operation_type_id"], ["operation_types.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["operator_id"], ["operators.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "order_type", "order_year", "order_series", "order_number", "order_line",
            name="uq_production_orders_business_key",
        ),
    )
    op.create_index("ix_production_orders_work_center_start", "production_orders", ["work_center_id", "start"])
    op.create_index("ix_production_orders_state_code", "production_orders", ["state_code"])
    op.create_index("ix_production_orders_expected_end", "production_orders", ["expected_end"])


def downgrade() -> None:
    """Drop all tables in reverse order."""
    op.drop_index("ix_production_orders_expected_end", table_name="production_orders")
    op.drop_index("ix_production_orders_state_code", table_name="production_orders")
    op.drop_index("ix_production_orders_work_center_start", table_name="production_orders")
    op.drop_table("production_orders")
    op.drop_table("operators")
    op.drop_table("operation_types")
    op.drop_table("work_centers")
    op.drop_table("order_states")
