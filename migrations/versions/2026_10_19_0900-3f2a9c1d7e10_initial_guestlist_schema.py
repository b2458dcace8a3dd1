"""initial guestlist schema

Revision ID: 3f2a9c1d7e10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql
from sqlalchemy_utils import UUIDType

# revision identifiers, used by Alembic.
revision = "3f2a9c1d7e10"
down_revision = None
branch_labels = None
depends_on = None

guest_status_enum = postgresql.ENUM(
    "pending", "confirmed", "declined", name="guest_status_enum", create_type=False
)
change_method_enum = postgresql.ENUM(
    "guest_form", "admin_override", name="change_method_enum", create_type=False
)
communication_direction_enum = postgresql.ENUM(
    "inbound", "outbound", name="communication_direction_enum", create_type=False
)
communication_status_enum = postgresql.ENUM(
    "received", "pending", "sent", "failed", name="communication_status_enum", create_type=False
)
carpool_offer_status_enum = postgresql.ENUM(
    "active", "cancelled", name="carpool_offer_status_enum", create_type=False
)
carpool_participant_status_enum = postgresql.ENUM(
    "confirmed", "cancelled", name="carpool_participant_status_enum", create_type=False
)

ENUMS = (
    guest_status_enum,
    change_method_enum,
    communication_direction_enum,
    communication_status_enum,
    carpool_offer_status_enum,
    carpool_participant_status_enum,
)


def _uuid():
    return UUIDType(binary=False)


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        "guests",
        sa.Column("uuid", _uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("rsvp_status", guest_status_enum, nullable=False),
        sa.Column("rsvp_responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rsvp_deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("plus_one_name", sa.String(length=255), nullable=True),
        sa.Column("plus_one_email", sa.String(length=255), nullable=True),
        sa.Column("dietary_needs", sa.JSON(), nullable=False),
        sa.Column("allergies", sa.JSON(), nullable=False),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("table_assignment", sa.String(length=100), nullable=True),
        sa.Column("contact_details", sa.JSON(), nullable=True),
        sa.Column("linked_account_id", _uuid(), nullable=True),
        sa.Column("is_archived", sa.Boolean(), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archive_reason", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_guests_name", "guests", ["name"])
    op.create_index("ix_guests_email", "guests", ["email"])
    op.create_index("ix_guests_rsvp_status", "guests", ["rsvp_status"])
    op.create_index("ix_guests_is_archived", "guests", ["is_archived"])
    op.create_index("ix_guests_linked_account_id", "guests", ["linked_account_id"], unique=True)

    op.create_table(
        "rsvp_history",
        sa.Column("uuid", _uuid(), nullable=False),
        sa.Column("guest_id", _uuid(), nullable=False),
        sa.Column("old_status", guest_status_enum, nullable=False),
        sa.Column("new_status", guest_status_enum, nullable=False),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("change_method", change_method_enum, nullable=False),
        sa.Column("change_reason", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["guest_id"], ["guests.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_rsvp_history_guest_id", "rsvp_history", ["guest_id"])
    op.create_index("ix_rsvp_history_changed_at", "rsvp_history", ["changed_at"])

    op.create_table(
        "communication_logs",
        sa.Column("uuid", _uuid(), nullable=False),
        sa.Column("guest_id", _uuid(), nullable=False),
        sa.Column("direction", communication_direction_enum, nullable=False),
        sa.Column("communication_type", sa.String(length=50), nullable=False),
        sa.Column("subject", sa.String(length=500), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", communication_status_enum, nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["guest_id"], ["guests.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_communication_logs_guest_id", "communication_logs", ["guest_id"])
    op.create_index(
        "ix_communication_logs_communication_type", "communication_logs", ["communication_type"]
    )
    op.create_index("ix_communication_logs_status", "communication_logs", ["status"])

    op.create_table(
        "transport_options",
        sa.Column("uuid", _uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("pickup_locations", sa.JSON(), nullable=False),
        sa.Column("booking_required", sa.Boolean(), nullable=False),
        sa.Column("featured", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("uuid"),
    )

    op.create_table(
        "transport_schedules",
        sa.Column("uuid", _uuid(), nullable=False),
        sa.Column("option_id", _uuid(), nullable=False),
        sa.Column("departure_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("departure_location", sa.String(length=255), nullable=False),
        sa.Column("max_capacity", sa.Integer(), nullable=True),
        sa.Column("current_bookings", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("current_bookings >= 0", name="ck_schedule_bookings_non_negative"),
        sa.CheckConstraint(
            "max_capacity IS NULL OR max_capacity > 0", name="ck_schedule_capacity_positive"
        ),
        sa.CheckConstraint(
            "max_capacity IS NULL OR current_bookings <= max_capacity",
            name="ck_schedule_not_overbooked",
        ),
        sa.ForeignKeyConstraint(["option_id"], ["transport_options.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_transport_schedules_option_id", "transport_schedules", ["option_id"])

    op.create_table(
        "seat_bookings",
        sa.Column("uuid", _uuid(), nullable=False),
        sa.Column("schedule_id", _uuid(), nullable=False),
        sa.Column("guest_id", _uuid(), nullable=False),
        sa.Column("passenger_name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["schedule_id"], ["transport_schedules.uuid"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["guest_id"], ["guests.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
        sa.UniqueConstraint("schedule_id", "guest_id", name="uq_seat_booking_schedule_guest"),
    )
    op.create_index("ix_seat_bookings_schedule_id", "seat_bookings", ["schedule_id"])
    op.create_index("ix_seat_bookings_guest_id", "seat_bookings", ["guest_id"])

    op.create_table(
        "carpool_offers",
        sa.Column("uuid", _uuid(), nullable=False),
        sa.Column("driver_guest_id", _uuid(), nullable=False),
        sa.Column("departure_location", sa.String(length=255), nullable=False),
        sa.Column("departure_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("available_seats", sa.Integer(), nullable=False),
        sa.Column("booked_seats", sa.Integer(), nullable=False),
        sa.Column("vehicle_description", sa.String(length=255), nullable=True),
        sa.Column("contact_phone", sa.String(length=50), nullable=True),
        sa.Column("special_notes", sa.Text(), nullable=True),
        sa.Column("status", carpool_offer_status_enum, nullable=False),
        *_timestamps(),
        sa.CheckConstraint("available_seats >= 1", name="ck_carpool_seats_positive"),
        sa.CheckConstraint("booked_seats >= 0", name="ck_carpool_booked_non_negative"),
        sa.CheckConstraint("booked_seats <= available_seats", name="ck_carpool_not_overbooked"),
        sa.ForeignKeyConstraint(["driver_guest_id"], ["guests.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_carpool_offers_driver_guest_id", "carpool_offers", ["driver_guest_id"])
    op.create_index("ix_carpool_offers_status", "carpool_offers", ["status"])
    op.create_index(
        "uq_carpool_active_offer_per_driver",
        "carpool_offers",
        ["driver_guest_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "carpool_participants",
        sa.Column("uuid", _uuid(), nullable=False),
        sa.Column("offer_id", _uuid(), nullable=False),
        sa.Column("participant_guest_id", _uuid(), nullable=False),
        sa.Column("passenger_name", sa.String(length=255), nullable=False),
        sa.Column("status", carpool_participant_status_enum, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["offer_id"], ["carpool_offers.uuid"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["participant_guest_id"], ["guests.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
        sa.UniqueConstraint(
            "offer_id", "participant_guest_id", name="uq_carpool_participant_offer_guest"
        ),
    )
    op.create_index("ix_carpool_participants_offer_id", "carpool_participants", ["offer_id"])
    op.create_index(
        "ix_carpool_participants_participant_guest_id",
        "carpool_participants",
        ["participant_guest_id"],
    )
    op.create_index("ix_carpool_participants_status", "carpool_participants", ["status"])


def downgrade() -> None:
    op.drop_table("carpool_participants")
    op.drop_table("carpool_offers")
    op.drop_table("seat_bookings")
    op.drop_table("transport_schedules")
    op.drop_table("transport_options")
    op.drop_table("communication_logs")
    op.drop_table("rsvp_history")
    op.drop_table("guests")

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)
