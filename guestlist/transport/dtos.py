from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from guestlist.transport.repository.orm_models import Schedule, SeatBooking, TransportOption


@dataclass(frozen=True)
class ScheduleDTO:
    id: UUID
    option_id: UUID
    departure_time: datetime
    departure_location: str
    current_bookings: int
    max_capacity: int | None = None

    @property
    def remaining_seats(self) -> int | None:
        """Seats left, or None for an unlimited schedule."""
        if self.max_capacity is None:
            return None
        return max(self.max_capacity - self.current_bookings, 0)

    @classmethod
    def from_schedule(cls, schedule: "Schedule") -> "ScheduleDTO":
        return cls(
            id=schedule.uuid,
            option_id=schedule.option_id,
            departure_time=schedule.departure_time,
            departure_location=schedule.departure_location,
            max_capacity=schedule.max_capacity,
            current_bookings=schedule.current_bookings,
        )


@dataclass(frozen=True)
class TransportOptionDTO:
    id: UUID
    name: str
    booking_required: bool
    featured: bool
    description: str | None = None
    pickup_locations: tuple[str, ...] = ()
    schedules: tuple[ScheduleDTO, ...] = ()

    @classmethod
    def from_option(
        cls, option: "TransportOption", schedules: list[ScheduleDTO] | None = None
    ) -> "TransportOptionDTO":
        return cls(
            id=option.uuid,
            name=option.name,
            description=option.description,
            pickup_locations=tuple(option.pickup_locations or ()),
            booking_required=option.booking_required,
            featured=option.featured,
            schedules=tuple(schedules or ()),
        )


@dataclass(frozen=True)
class SeatBookingDTO:
    id: UUID
    schedule_id: UUID
    guest_id: UUID
    passenger_name: str
    created_at: datetime

    @classmethod
    def from_booking(cls, booking: "SeatBooking") -> "SeatBookingDTO":
        return cls(
            id=booking.uuid,
            schedule_id=booking.schedule_id,
            guest_id=booking.guest_id,
            passenger_name=booking.passenger_name,
            created_at=booking.created_at,
        )
