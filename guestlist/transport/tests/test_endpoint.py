from dataclasses import replace
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from guestlist.capacity.tests.inmemory_ledger import InMemoryCapacityLedger
from guestlist.errors import CapacityFullError, ConflictError, NotFoundError
from guestlist.transport.dtos import ScheduleDTO, SeatBookingDTO, TransportOptionDTO
from guestlist.transport.repository.read_models import TransportReadModel
from guestlist.transport.repository.write_models import TransportWriteModel
from guestlist.transport.router import get_transport_read_model, get_transport_write_model
from guestlist.transport.urls import (
    BOOKING_URL,
    GUEST_BOOKINGS_URL,
    SCHEDULE_BOOKINGS_URL,
    TRANSPORT_OPTIONS_URL,
    TRANSPORT_SCHEDULES_URL,
)


class InMemoryTransportModel(TransportWriteModel, TransportReadModel):
    def __init__(self):
        self.ledger = InMemoryCapacityLedger()
        self.options: dict = {}
        self.schedules: dict = {}
        self.bookings: dict = {}

    async def create_option(
        self, name, description=None, pickup_locations=None, booking_required=True, featured=False
    ):
        option = TransportOptionDTO(
            id=uuid4(),
            name=name,
            description=description,
            pickup_locations=tuple(pickup_locations or ()),
            booking_required=booking_required,
            featured=featured,
        )
        self.options[option.id] = option
        return option

    async def add_schedule(self, option_id, departure_time, departure_location, max_capacity=None):
        if option_id not in self.options:
            raise NotFoundError("TransportOption", option_id)
        schedule = ScheduleDTO(
            id=uuid4(),
            option_id=option_id,
            departure_time=departure_time,
            departure_location=departure_location,
            max_capacity=max_capacity,
            current_bookings=0,
        )
        self.schedules[schedule.id] = schedule
        return schedule

    async def book_seat(self, schedule_id, guest_id, passenger_name):
        schedule = self.schedules.get(schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule", schedule_id)
        if any(
            b.schedule_id == schedule_id and b.guest_id == guest_id for b in self.bookings.values()
        ):
            raise ConflictError("already booked")
        reservation = await self.ledger.try_reserve(None, schedule_id, schedule.max_capacity)
        if not reservation.granted:
            raise CapacityFullError("Schedule", schedule_id)
        booking = SeatBookingDTO(
            id=uuid4(),
            schedule_id=schedule_id,
            guest_id=guest_id,
            passenger_name=passenger_name,
            created_at=datetime.now(UTC),
        )
        self.bookings[booking.id] = booking
        return booking

    async def cancel_booking(self, booking_id):
        booking = self.bookings.pop(booking_id, None)
        if booking is None:
            raise NotFoundError("SeatBooking", booking_id)
        await self.ledger.release(None, booking.schedule_id)

    async def list_options(self):
        return [
            replace(o, schedules=tuple(s for s in self.schedules.values() if s.option_id == o.id))
            for o in self.options.values()
        ]

    async def get_schedule(self, schedule_id):
        return self.schedules.get(schedule_id)

    async def list_guest_bookings(self, guest_id):
        return [b for b in self.bookings.values() if b.guest_id == guest_id]


@pytest.fixture
def transport_overrides():
    model = InMemoryTransportModel()
    return model, {
        get_transport_write_model: lambda: model,
        get_transport_read_model: lambda: model,
    }


@pytest.mark.asyncio
async def test_create_option_and_schedule(client_factory, transport_overrides):
    _, overrides = transport_overrides

    async with client_factory(overrides) as client:
        created = await client.post(
            TRANSPORT_OPTIONS_URL,
            json={"name": "Shuttle Bus", "pickup_locations": ["Hotel"], "featured": True},
        )
        option_id = created.json()["id"]
        schedule = await client.post(
            TRANSPORT_SCHEDULES_URL.format(option_id=option_id),
            json={
                "departure_time": "2026-07-18T15:00:00Z",
                "departure_location": "Hotel lobby",
                "max_capacity": 20,
            },
        )
        listed = await client.get(TRANSPORT_OPTIONS_URL)

    assert created.status_code == 201
    assert schedule.status_code == 201
    assert schedule.json()["remaining_seats"] == 20
    assert listed.json()[0]["schedules"][0]["id"] == schedule.json()["id"]


@pytest.mark.asyncio
async def test_schedule_capacity_must_be_positive(client_factory, transport_overrides):
    model, overrides = transport_overrides
    option = await model.create_option(name="Shuttle Bus")

    async with client_factory(overrides) as client:
        response = await client.post(
            TRANSPORT_SCHEDULES_URL.format(option_id=option.id),
            json={
                "departure_time": "2026-07-18T15:00:00Z",
                "departure_location": "Hotel lobby",
                "max_capacity": 0,
            },
        )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_full_schedule_answers_409(client_factory, transport_overrides):
    model, overrides = transport_overrides
    option = await model.create_option(name="Shuttle Bus")
    schedule = await model.add_schedule(
        option.id, datetime(2026, 7, 18, tzinfo=UTC), "Hotel", max_capacity=1
    )

    async with client_factory(overrides) as client:
        url = SCHEDULE_BOOKINGS_URL.format(schedule_id=schedule.id)
        booked = await client.post(url, json={"guest_id": str(uuid4()), "passenger_name": "Jane"})
        full = await client.post(url, json={"guest_id": str(uuid4()), "passenger_name": "John"})

    assert booked.status_code == 201
    assert full.status_code == 409
    assert full.json()["code"] == "full"


@pytest.mark.asyncio
async def test_duplicate_booking_answers_conflict(client_factory, transport_overrides):
    model, overrides = transport_overrides
    option = await model.create_option(name="Shuttle Bus")
    schedule = await model.add_schedule(option.id, datetime(2026, 7, 18, tzinfo=UTC), "Hotel")
    guest_id = str(uuid4())

    async with client_factory(overrides) as client:
        url = SCHEDULE_BOOKINGS_URL.format(schedule_id=schedule.id)
        await client.post(url, json={"guest_id": guest_id, "passenger_name": "Jane"})
        duplicate = await client.post(url, json={"guest_id": guest_id, "passenger_name": "Jane"})

    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "conflict"


@pytest.mark.asyncio
async def test_cancel_and_list_bookings(client_factory, transport_overrides):
    model, overrides = transport_overrides
    option = await model.create_option(name="Shuttle Bus")
    schedule = await model.add_schedule(option.id, datetime(2026, 7, 18, tzinfo=UTC), "Hotel")
    guest_id = uuid4()
    booking = await model.book_seat(schedule.id, guest_id, "Jane")

    async with client_factory(overrides) as client:
        listed = await client.get(GUEST_BOOKINGS_URL.format(guest_id=guest_id))
        cancelled = await client.delete(BOOKING_URL.format(booking_id=booking.id))
        again = await client.delete(BOOKING_URL.format(booking_id=booking.id))

    assert [b["id"] for b in listed.json()] == [str(booking.id)]
    assert cancelled.status_code == 204
    assert again.status_code == 404
