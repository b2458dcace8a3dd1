from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from guestlist.config.table_names import TableNames
from guestlist.guests.dtos import (
    ChangeMethod,
    CommunicationDirection,
    CommunicationStatus,
    GuestStatus,
)
from guestlist.models.base import Base, TimeStamp, utcnow


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


guest_status_enum = Enum(GuestStatus, name="guest_status_enum", values_callable=_enum_values)


class Guest(Base, TimeStamp):
    __tablename__ = TableNames.GUESTS.value

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # RSVP state, owned by the RSVP write model
    rsvp_status: Mapped[GuestStatus] = mapped_column(
        guest_status_enum,
        default=GuestStatus.PENDING,
        nullable=False,
        index=True,
    )
    rsvp_responded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rsvp_deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Response data
    plus_one_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    plus_one_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    dietary_needs: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    allergies: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)
    table_assignment: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # Serialized ContactDetails value object
    contact_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # Weak reference to an externally owned account; at most one guest per account
    linked_account_id: Mapped[UUID | None] = mapped_column(nullable=True, unique=True, index=True)

    # Archival (soft deletion)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    archive_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Guest {self.name} - {self.rsvp_status}>"


class RSVPHistoryEntry(Base):
    """Append-only audit row, one per accepted status transition."""

    __tablename__ = TableNames.RSVP_HISTORY.value

    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    old_status: Mapped[GuestStatus] = mapped_column(
        guest_status_enum,
        nullable=False,
    )
    new_status: Mapped[GuestStatus] = mapped_column(
        guest_status_enum,
        nullable=False,
    )
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    change_method: Mapped[ChangeMethod] = mapped_column(
        Enum(ChangeMethod, name="change_method_enum", values_callable=_enum_values),
        nullable=False,
    )
    change_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<RSVPHistoryEntry {self.guest_id} {self.old_status}->{self.new_status}>"


class CommunicationLogEntry(Base, TimeStamp):
    __tablename__ = TableNames.COMMUNICATION_LOGS.value

    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    direction: Mapped[CommunicationDirection] = mapped_column(
        Enum(
            CommunicationDirection,
            name="communication_direction_enum",
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    communication_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    subject: Mapped[str | None] = mapped_column(String(500), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[CommunicationStatus] = mapped_column(
        Enum(CommunicationStatus, name="communication_status_enum", values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<CommunicationLogEntry {self.communication_type} guest={self.guest_id} status={self.status}>"
