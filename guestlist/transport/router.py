from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from guestlist.transport.dtos import ScheduleDTO, SeatBookingDTO, TransportOptionDTO
from guestlist.transport.repository.read_models import SqlTransportReadModel, TransportReadModel
from guestlist.transport.repository.write_models import SqlTransportWriteModel, TransportWriteModel
from guestlist.transport.urls import (
    BOOKING_URL,
    GUEST_BOOKINGS_URL,
    SCHEDULE_BOOKINGS_URL,
    TRANSPORT_OPTIONS_URL,
    TRANSPORT_SCHEDULES_URL,
)

router = APIRouter(tags=["transport"])


class CreateTransportOptionRequest(BaseModel):
    name: str
    description: str | None = None
    pickup_locations: list[str] = []
    booking_required: bool = True
    featured: bool = False


class AddScheduleRequest(BaseModel):
    departure_time: datetime
    departure_location: str
    max_capacity: int | None = Field(default=None, ge=1)


class BookSeatRequest(BaseModel):
    guest_id: UUID
    passenger_name: str


class ScheduleResponse(BaseModel):
    id: UUID
    option_id: UUID
    departure_time: datetime
    departure_location: str
    max_capacity: int | None = None
    current_bookings: int
    remaining_seats: int | None = None

    @classmethod
    def from_dto(cls, schedule: ScheduleDTO) -> "ScheduleResponse":
        return cls(
            id=schedule.id,
            option_id=schedule.option_id,
            departure_time=schedule.departure_time,
            departure_location=schedule.departure_location,
            max_capacity=schedule.max_capacity,
            current_bookings=schedule.current_bookings,
            remaining_seats=schedule.remaining_seats,
        )


class TransportOptionResponse(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    pickup_locations: list[str] = []
    booking_required: bool
    featured: bool
    schedules: list[ScheduleResponse] = []

    @classmethod
    def from_dto(cls, option: TransportOptionDTO) -> "TransportOptionResponse":
        return cls(
            id=option.id,
            name=option.name,
            description=option.description,
            pickup_locations=list(option.pickup_locations),
            booking_required=option.booking_required,
            featured=option.featured,
            schedules=[ScheduleResponse.from_dto(s) for s in option.schedules],
        )


class SeatBookingResponse(BaseModel):
    id: UUID
    schedule_id: UUID
    guest_id: UUID
    passenger_name: str
    created_at: datetime

    @classmethod
    def from_dto(cls, booking: SeatBookingDTO) -> "SeatBookingResponse":
        return cls(
            id=booking.id,
            schedule_id=booking.schedule_id,
            guest_id=booking.guest_id,
            passenger_name=booking.passenger_name,
            created_at=booking.created_at,
        )


def get_transport_write_model() -> TransportWriteModel:
    return SqlTransportWriteModel()


def get_transport_read_model() -> TransportReadModel:
    return SqlTransportReadModel()


@router.get(TRANSPORT_OPTIONS_URL, response_model=list[TransportOptionResponse])
async def list_transport_options(
    read_model: TransportReadModel = Depends(get_transport_read_model),
) -> list[TransportOptionResponse]:
    return [TransportOptionResponse.from_dto(o) for o in await read_model.list_options()]


@router.post(
    TRANSPORT_OPTIONS_URL,
    response_model=TransportOptionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transport_option(
    request: CreateTransportOptionRequest,
    write_model: TransportWriteModel = Depends(get_transport_write_model),
) -> TransportOptionResponse:
    option = await write_model.create_option(
        name=request.name,
        description=request.description,
        pickup_locations=request.pickup_locations,
        booking_required=request.booking_required,
        featured=request.featured,
    )
    return TransportOptionResponse.from_dto(option)


@router.post(
    TRANSPORT_SCHEDULES_URL,
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_schedule(
    option_id: UUID,
    request: AddScheduleRequest,
    write_model: TransportWriteModel = Depends(get_transport_write_model),
) -> ScheduleResponse:
    schedule = await write_model.add_schedule(
        option_id=option_id,
        departure_time=request.departure_time,
        departure_location=request.departure_location,
        max_capacity=request.max_capacity,
    )
    return ScheduleResponse.from_dto(schedule)


@router.post(
    SCHEDULE_BOOKINGS_URL,
    response_model=SeatBookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def book_seat(
    schedule_id: UUID,
    request: BookSeatRequest,
    write_model: TransportWriteModel = Depends(get_transport_write_model),
) -> SeatBookingResponse:
    """Book one seat. A full schedule answers 409 with code "full"."""
    booking = await write_model.book_seat(
        schedule_id=schedule_id,
        guest_id=request.guest_id,
        passenger_name=request.passenger_name,
    )
    return SeatBookingResponse.from_dto(booking)


@router.delete(BOOKING_URL, status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(
    booking_id: UUID,
    write_model: TransportWriteModel = Depends(get_transport_write_model),
) -> None:
    await write_model.cancel_booking(booking_id)


@router.get(GUEST_BOOKINGS_URL, response_model=list[SeatBookingResponse])
async def list_guest_bookings(
    guest_id: UUID,
    read_model: TransportReadModel = Depends(get_transport_read_model),
) -> list[SeatBookingResponse]:
    return [SeatBookingResponse.from_dto(b) for b in await read_model.list_guest_bookings(guest_id)]
