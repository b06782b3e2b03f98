"""create_guest_lifecycle_tables

Revision ID: 3f1c2a7b9d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3f1c2a7b9d10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("uuid", sa.UUID(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("is_superuser", sa.Boolean(), nullable=True),
        sa.Column("user_metadata", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "guests",
        sa.Column("uuid", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=True),
        sa.Column("first_name", sa.String(length=255), nullable=True),
        sa.Column("last_name", sa.String(length=255), nullable=True),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column(
            "rsvp_status",
            sa.Enum("pending", "confirmed", "declined", name="rsvp_status_enum"),
            nullable=False,
        ),
        sa.Column("rsvp_responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("plus_one_name", sa.String(length=255), nullable=True),
        sa.Column("plus_one_email", sa.String(length=255), nullable=True),
        sa.Column("dietary_needs", sa.JSON(), nullable=False),
        sa.Column("allergies", sa.JSON(), nullable=False),
        sa.Column("table_assignment", sa.String(length=100), nullable=True),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("contact_details", sa.JSON(), nullable=False),
        sa.Column("is_archived", sa.Boolean(), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archive_reason", sa.Text(), nullable=True),
        sa.Column("invitation_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rsvp_deadline", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.uuid"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index(op.f("ix_guests_user_id"), "guests", ["user_id"], unique=False)
    op.create_index(op.f("ix_guests_first_name"), "guests", ["first_name"], unique=False)
    op.create_index(op.f("ix_guests_last_name"), "guests", ["last_name"], unique=False)
    op.create_index(op.f("ix_guests_email"), "guests", ["email"], unique=False)
    op.create_index(op.f("ix_guests_is_archived"), "guests", ["is_archived"], unique=False)
    op.create_index(
        "uq_guests_active_user_id",
        "guests",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("is_archived = false"),
        sqlite_where=sa.text("is_archived = 0"),
    )

    op.create_table(
        "rsvp_history",
        sa.Column("uuid", sa.UUID(), nullable=False),
        sa.Column("guest_id", sa.UUID(), nullable=False),
        sa.Column(
            "new_status",
            sa.Enum("pending", "confirmed", "declined", name="rsvp_history_status_enum"),
            nullable=False,
        ),
        sa.Column("change_method", sa.String(length=50), nullable=False),
        sa.Column("change_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["guest_id"], ["guests.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index(op.f("ix_rsvp_history_guest_id"), "rsvp_history", ["guest_id"], unique=False)

    op.create_table(
        "guest_communications",
        sa.Column("uuid", sa.UUID(), nullable=False),
        sa.Column("guest_id", sa.UUID(), nullable=False),
        sa.Column("communication_type", sa.String(length=50), nullable=False),
        sa.Column("subject", sa.String(length=500), nullable=False),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column(
            "direction",
            sa.Enum("inbound", "outbound", name="communication_direction_enum"),
            nullable=False,
        ),
        sa.Column("status", sa.String(length=50), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["guest_id"], ["guests.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index(
        op.f("ix_guest_communications_guest_id"),
        "guest_communications",
        ["guest_id"],
        unique=False,
    )

    op.create_table(
        "bus_schedules",
        sa.Column("uuid", sa.UUID(), nullable=False),
        sa.Column(
            "route_type",
            sa.Enum("arrival", "departure", name="route_type_enum"),
            nullable=False,
        ),
        sa.Column("route_name", sa.String(length=255), nullable=False),
        sa.Column("departure_datetime", sa.DateTime(timezone=True), nullable=False),
        sa.Column("departure_location", sa.String(length=255), nullable=False),
        sa.Column("arrival_location", sa.String(length=255), nullable=False),
        sa.Column("max_capacity", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index(
        op.f("ix_bus_schedules_departure_datetime"),
        "bus_schedules",
        ["departure_datetime"],
        unique=False,
    )

    op.create_table(
        "bus_bookings",
        sa.Column("uuid", sa.UUID(), nullable=False),
        sa.Column("schedule_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=True),
        sa.Column("seat_number", sa.Integer(), nullable=False),
        sa.Column("guest_count", sa.Integer(), nullable=False),
        sa.Column("passenger_names", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("confirmed", "cancelled", name="booking_status_enum"),
            nullable=False,
        ),
        sa.Column("special_requirements", sa.Text(), nullable=True),
        sa.Column("pickup_location", sa.String(length=255), nullable=True),
        sa.Column("emergency_contact_name", sa.String(length=255), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["schedule_id"], ["bus_schedules.uuid"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.uuid"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index(
        op.f("ix_bus_bookings_schedule_id"), "bus_bookings", ["schedule_id"], unique=False
    )
    op.create_index(op.f("ix_bus_bookings_user_id"), "bus_bookings", ["user_id"], unique=False)
    # two confirmed bookings may never share a seat
    op.create_index(
        "uq_bus_bookings_confirmed_seat",
        "bus_bookings",
        ["schedule_id", "seat_number"],
        unique=True,
        postgresql_where=sa.text("status = 'confirmed'"),
        sqlite_where=sa.text("status = 'confirmed'"),
    )


def downgrade() -> None:
    op.drop_index("uq_bus_bookings_confirmed_seat", table_name="bus_bookings")
    op.drop_table("bus_bookings")
    op.drop_table("bus_schedules")
    op.drop_table("guest_communications")
    op.drop_table("rsvp_history")
    op.drop_index("uq_guests_active_user_id", table_name="guests")
    op.drop_table("guests")
    op.drop_table("users")
    sa.Enum(name="booking_status_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="route_type_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="communication_direction_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="rsvp_history_status_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="rsvp_status_enum").drop(op.get_bind(), checkfirst=True)
