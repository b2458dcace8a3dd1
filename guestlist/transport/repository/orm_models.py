from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from guestlist.config.table_names import TableNames
from guestlist.models.base import Base, TimeStamp


class TransportOption(Base, TimeStamp):
    __tablename__ = TableNames.TRANSPORT_OPTIONS.value

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    pickup_locations: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    booking_required: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<TransportOption {self.name}>"


class Schedule(Base, TimeStamp):
    """One departure of a transport option, with a bounded number of seats."""

    __tablename__ = TableNames.TRANSPORT_SCHEDULES.value
    __table_args__ = (
        CheckConstraint("current_bookings >= 0", name="ck_schedule_bookings_non_negative"),
        CheckConstraint(
            "max_capacity IS NULL OR max_capacity > 0", name="ck_schedule_capacity_positive"
        ),
        CheckConstraint(
            "max_capacity IS NULL OR current_bookings <= max_capacity",
            name="ck_schedule_not_overbooked",
        ),
    )

    option_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.TRANSPORT_OPTIONS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    departure_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    departure_location: Mapped[str] = mapped_column(String(255), nullable=False)
    # NULL means unlimited; the counter is then kept for display only
    max_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<Schedule {self.departure_location} {self.current_bookings}/{self.max_capacity}>"


class SeatBooking(Base, TimeStamp):
    __tablename__ = TableNames.SEAT_BOOKINGS.value
    __table_args__ = (
        UniqueConstraint("schedule_id", "guest_id", name="uq_seat_booking_schedule_guest"),
    )

    schedule_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.TRANSPORT_SCHEDULES.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    passenger_name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<SeatBooking {self.passenger_name} schedule={self.schedule_id}>"
