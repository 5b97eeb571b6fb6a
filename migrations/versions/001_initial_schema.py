"""Initial schema: providers, day_templates, blocked_dates, bookings.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_BOOKING = "status <> 'cancelled'"


def upgrade() -> None:
    op.create_table(
        "providers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("consultation_duration_minutes", sa.Integer(), nullable=True),
        sa.Column("timezone", sa.String(), nullable=True),
        sa.Column("blocked_dates_version", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "day_templates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.String(length=9), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("slots", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["provider_id"], ["providers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider_id", "day_of_week", name="uq_day_templates_provider_day"),
    )
    op.create_index(op.f("ix_day_templates_provider_id"), "day_templates", ["provider_id"], unique=False)

    op.create_table(
        "blocked_dates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("blocked_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["provider_id"], ["providers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider_id", "blocked_date", name="uq_blocked_dates_provider_date"),
    )
    op.create_index(op.f("ix_blocked_dates_provider_id"), "blocked_dates", ["provider_id"], unique=False)
    op.create_index(op.f("ix_blocked_dates_blocked_date"), "blocked_dates", ["blocked_date"], unique=False)

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("slot_start", sa.Time(), nullable=False),
        sa.Column("slot_end", sa.Time(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="confirmed"),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("released_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["provider_id"], ["providers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_bookings_provider_id"), "bookings", ["provider_id"], unique=False)
    op.create_index(op.f("ix_bookings_patient_id"), "bookings", ["patient_id"], unique=False)
    op.create_index(op.f("ix_bookings_appointment_date"), "bookings", ["appointment_date"], unique=False)
    # One active booking per (provider, date, slot); cancelled rows free the slot
    op.create_index(
        "uq_bookings_active_slot",
        "bookings",
        ["provider_id", "appointment_date", "slot_start", "slot_end"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_BOOKING),
        sqlite_where=sa.text(ACTIVE_BOOKING),
    )


def downgrade() -> None:
    op.drop_index("uq_bookings_active_slot", table_name="bookings")
    op.drop_index(op.f("ix_bookings_appointment_date"), table_name="bookings")
    op.drop_index(op.f("ix_bookings_patient_id"), table_name="bookings")
    op.drop_index(op.f("ix_bookings_provider_id"), table_name="bookings")
    op.drop_table("bookings")
    op.drop_index(op.f("ix_blocked_dates_blocked_date"), table_name="blocked_dates")
    op.drop_index(op.f("ix_blocked_dates_provider_id"), table_name="blocked_dates")
    op.drop_table("blocked_dates")
    op.drop_index(op.f("ix_day_templates_provider_id"), table_name="day_templates")
    op.drop_table("day_templates")
    op.drop_table("providers")
