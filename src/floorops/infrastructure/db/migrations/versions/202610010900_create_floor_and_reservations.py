"""create floor and reservations

Revision ID: 202610010900
Revises:
Create Date: 2026-10-01 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "202610010900"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "areas",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("max_tables", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "floor_tables",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("area_id", sa.String(length=50), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("is_vip", sa.Boolean(), nullable=False),
        sa.Column("can_merge", sa.Boolean(), nullable=False),
        sa.Column("merge_group", sa.String(length=50), nullable=True),
        sa.Column("x", sa.Float(), nullable=False),
        sa.Column("y", sa.Float(), nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["area_id"], ["areas.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_floor_tables_area_id", "floor_tables", ["area_id"], unique=False)

    op.create_table(
        "reservations",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("client_name", sa.String(length=120), nullable=False),
        sa.Column("party_size", sa.Integer(), nullable=False),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("notes", sa.String(length=500), server_default="", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_reservations_date_status", "reservations", ["date", "status"], unique=False
    )

    op.create_table(
        "reservation_tables",
        sa.Column("reservation_id", sa.String(length=50), nullable=False),
        sa.Column("table_id", sa.String(length=50), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["reservation_id"], ["reservations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["table_id"], ["floor_tables.id"]),
        sa.PrimaryKeyConstraint("reservation_id", "table_id"),
        sa.UniqueConstraint("reservation_id", "position", name="uq_reservation_tables_position"),
    )
    op.create_index(
        "ix_reservation_tables_table_id", "reservation_tables", ["table_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_reservation_tables_table_id", table_name="reservation_tables")
    op.drop_table("reservation_tables")
    op.drop_index("ix_reservations_date_status", table_name="reservations")
    op.drop_table("reservations")
    op.drop_index("ix_floor_tables_area_id", table_name="floor_tables")
    op.drop_table("floor_tables")
    op.drop_table("areas")
