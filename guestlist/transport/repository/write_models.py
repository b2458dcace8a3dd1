"""Scheduled transport write models. Returns DTOs, never ORM models.

Seats are handed out through the capacity ledger: a booking row is only
inserted after the schedule's counter was atomically incremented in the same
transaction, and deleting a booking gives the seat back.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from functools import partial
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guestlist.capacity import CapacityLedger, SqlCapacityLedger
from guestlist.config.database import async_session_manager
from guestlist.errors import CapacityFullError, ConflictError, NotFoundError, ValidationFailedError
from guestlist.guests.repository.orm_models import Guest
from guestlist.guests.validation import validate_name
from guestlist.transport.dtos import ScheduleDTO, SeatBookingDTO, TransportOptionDTO
from guestlist.transport.repository.orm_models import Schedule, SeatBooking, TransportOption

logger = logging.getLogger(__name__)

schedule_ledger = SqlCapacityLedger(counter=Schedule.current_bookings, key=Schedule.uuid)


class TransportWriteModel(ABC):
    @abstractmethod
    async def create_option(
        self,
        name: str,
        description: str | None = None,
        pickup_locations: list[str] | None = None,
        booking_required: bool = True,
        featured: bool = False,
    ) -> TransportOptionDTO:
        raise NotImplementedError

    @abstractmethod
    async def add_schedule(
        self,
        option_id: UUID,
        departure_time: datetime,
        departure_location: str,
        max_capacity: int | None = None,
    ) -> ScheduleDTO:
        raise NotImplementedError

    @abstractmethod
    async def book_seat(
        self, schedule_id: UUID, guest_id: UUID, passenger_name: str
    ) -> SeatBookingDTO:
        """
        Book one seat on a schedule.
        Raises CapacityFullError when the schedule has no seat left.
        """
        raise NotImplementedError

    @abstractmethod
    async def cancel_booking(self, booking_id: UUID) -> None:
        """Delete a booking and give its seat back."""
        raise NotImplementedError


class SqlTransportWriteModel(TransportWriteModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        ledger: CapacityLedger | None = None,
    ) -> None:
        self.session_overwrite = session_overwrite
        self.ledger = ledger or schedule_ledger

    async def create_option(
        self,
        name: str,
        description: str | None = None,
        pickup_locations: list[str] | None = None,
        booking_required: bool = True,
        featured: bool = False,
    ) -> TransportOptionDTO:
        option = TransportOption(
            name=validate_name(name),
            description=description,
            pickup_locations=[p.strip() for p in pickup_locations or [] if p and p.strip()],
            booking_required=booking_required,
            featured=featured,
        )
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            session.add(option)
            await session.flush()
            dto = TransportOptionDTO.from_option(option)

        logger.info("Created transport option %s (%s)", dto.id, dto.name)
        return dto

    async def add_schedule(
        self,
        option_id: UUID,
        departure_time: datetime,
        departure_location: str,
        max_capacity: int | None = None,
    ) -> ScheduleDTO:
        if max_capacity is not None and max_capacity < 1:
            raise ValidationFailedError("max_capacity must be positive", field="max_capacity")
        departure_location = validate_name(departure_location, field="departure_location")

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            if await session.get(TransportOption, option_id) is None:
                raise NotFoundError("TransportOption", option_id)
            schedule = Schedule(
                option_id=option_id,
                departure_time=departure_time,
                departure_location=departure_location,
                max_capacity=max_capacity,
                current_bookings=0,
            )
            session.add(schedule)
            await session.flush()
            dto = ScheduleDTO.from_schedule(schedule)

        logger.info("Added schedule %s to transport option %s", dto.id, option_id)
        return dto

    async def book_seat(
        self, schedule_id: UUID, guest_id: UUID, passenger_name: str
    ) -> SeatBookingDTO:
        passenger_name = validate_name(passenger_name, field="passenger_name")

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(Schedule.max_capacity).where(Schedule.uuid == schedule_id)
            )
            row = result.one_or_none()
            if row is None:
                raise NotFoundError("Schedule", schedule_id)
            max_capacity = row.max_capacity

            if await session.get(Guest, guest_id) is None:
                raise NotFoundError("Guest", guest_id)

            existing = await session.execute(
                select(SeatBooking.uuid).where(
                    SeatBooking.schedule_id == schedule_id,
                    SeatBooking.guest_id == guest_id,
                )
            )
            if existing.scalar_one_or_none() is not None:
                raise ConflictError(f"Guest '{guest_id}' already booked schedule '{schedule_id}'")

            reservation = await self.ledger.try_reserve(session, schedule_id, max_capacity)
            if not reservation.granted:
                raise CapacityFullError("Schedule", schedule_id)

            booking = SeatBooking(
                schedule_id=schedule_id,
                guest_id=guest_id,
                passenger_name=passenger_name,
            )
            session.add(booking)
            try:
                await session.flush()
            except IntegrityError as e:
                # the seat taken above is rolled back together with the booking
                raise ConflictError(
                    f"Guest '{guest_id}' already booked schedule '{schedule_id}'"
                ) from e
            dto = SeatBookingDTO.from_booking(booking)

        logger.info("Guest %s booked a seat on schedule %s", guest_id, schedule_id)
        return dto

    async def cancel_booking(self, booking_id: UUID) -> None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(SeatBooking.schedule_id).where(SeatBooking.uuid == booking_id)
            )
            schedule_id = result.scalar_one_or_none()
            if schedule_id is None:
                raise NotFoundError("SeatBooking", booking_id)

            deleted = await session.execute(
                delete(SeatBooking)
                .where(SeatBooking.uuid == booking_id)
                .execution_options(synchronize_session=False)
            )
            if deleted.rowcount != 1:
                # cancelled concurrently; the seat was already given back
                raise NotFoundError("SeatBooking", booking_id)
            await self.ledger.release(session, schedule_id)

        logger.info("Cancelled booking %s on schedule %s", booking_id, schedule_id)
