"""Tests for SqlTransportWriteModel seat booking."""

import asyncio
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from guestlist.config.database import async_session_maker
from guestlist.errors import CapacityFullError, ConflictError, NotFoundError, ValidationFailedError
from guestlist.guests.features.create_guest.write_model import SqlGuestCreateWriteModel
from guestlist.transport.repository.read_models import SqlTransportReadModel
from guestlist.transport.repository.write_models import SqlTransportWriteModel

pytestmark = pytest.mark.usefixtures("clean_db")

DEPARTURE = datetime(2026, 7, 18, 15, 0, tzinfo=UTC)


async def _schedule(write_model, max_capacity):
    option = await write_model.create_option(name="Shuttle Bus", pickup_locations=["Hotel"])
    return await write_model.add_schedule(
        option.id, DEPARTURE, "Hotel lobby", max_capacity=max_capacity
    )


async def _guests(db_session, count):
    create = SqlGuestCreateWriteModel(session_overwrite=db_session)
    return [
        await create.create_guest(name=f"Guest {i}", email=f"guest{i}@example.com")
        for i in range(count)
    ]


async def test_schedule_fills_up():
    async with async_session_maker() as db_session:
        write_model = SqlTransportWriteModel(session_overwrite=db_session)
        schedule = await _schedule(write_model, max_capacity=2)
        first, second, third = await _guests(db_session, 3)

        await write_model.book_seat(schedule.id, first.id, "Guest 0")
        await write_model.book_seat(schedule.id, second.id, "Guest 1")
        with pytest.raises(CapacityFullError):
            await write_model.book_seat(schedule.id, third.id, "Guest 2")

        current = await SqlTransportReadModel(session_overwrite=db_session).get_schedule(
            schedule.id
        )
        assert current.current_bookings == 2
        assert current.remaining_seats == 0
        await db_session.rollback()


async def test_cancel_gives_the_seat_back():
    async with async_session_maker() as db_session:
        write_model = SqlTransportWriteModel(session_overwrite=db_session)
        read_model = SqlTransportReadModel(session_overwrite=db_session)
        schedule = await _schedule(write_model, max_capacity=1)
        first, second = await _guests(db_session, 2)

        booking = await write_model.book_seat(schedule.id, first.id, "Guest 0")
        await write_model.cancel_booking(booking.id)
        assert (await read_model.get_schedule(schedule.id)).current_bookings == 0

        await write_model.book_seat(schedule.id, second.id, "Guest 1")
        assert (await read_model.get_schedule(schedule.id)).current_bookings == 1
        assert await read_model.list_guest_bookings(first.id) == []

        with pytest.raises(NotFoundError):
            await write_model.cancel_booking(booking.id)
        assert (await read_model.get_schedule(schedule.id)).current_bookings == 1
        await db_session.rollback()


async def test_duplicate_booking_is_a_conflict():
    async with async_session_maker() as db_session:
        write_model = SqlTransportWriteModel(session_overwrite=db_session)
        schedule = await _schedule(write_model, max_capacity=5)
        (guest,) = await _guests(db_session, 1)

        await write_model.book_seat(schedule.id, guest.id, "Guest 0")
        with pytest.raises(ConflictError):
            await write_model.book_seat(schedule.id, guest.id, "Guest 0")

        current = await SqlTransportReadModel(session_overwrite=db_session).get_schedule(
            schedule.id
        )
        assert current.current_bookings == 1
        await db_session.rollback()


async def test_unlimited_schedule():
    async with async_session_maker() as db_session:
        write_model = SqlTransportWriteModel(session_overwrite=db_session)
        schedule = await _schedule(write_model, max_capacity=None)
        guests = await _guests(db_session, 4)

        for guest in guests:
            await write_model.book_seat(schedule.id, guest.id, guest.name)

        current = await SqlTransportReadModel(session_overwrite=db_session).get_schedule(
            schedule.id
        )
        assert current.current_bookings == 4
        assert current.remaining_seats is None
        await db_session.rollback()


async def test_booking_unknown_schedule_or_guest():
    async with async_session_maker() as db_session:
        write_model = SqlTransportWriteModel(session_overwrite=db_session)
        schedule = await _schedule(write_model, max_capacity=2)
        (guest,) = await _guests(db_session, 1)

        with pytest.raises(NotFoundError):
            await write_model.book_seat(uuid4(), guest.id, "Guest 0")
        with pytest.raises(NotFoundError):
            await write_model.book_seat(schedule.id, uuid4(), "Nobody")
        await db_session.rollback()


async def test_add_schedule_validation():
    async with async_session_maker() as db_session:
        write_model = SqlTransportWriteModel(session_overwrite=db_session)
        option = await write_model.create_option(name="Shuttle Bus")

        with pytest.raises(ValidationFailedError):
            await write_model.add_schedule(option.id, DEPARTURE, "Hotel lobby", max_capacity=0)
        with pytest.raises(NotFoundError):
            await write_model.add_schedule(uuid4(), DEPARTURE, "Hotel lobby", max_capacity=3)
        await db_session.rollback()


async def test_concurrent_bookings_never_overbook():
    capacity, extra = 3, 4
    write_model = SqlTransportWriteModel()
    schedule = await _schedule(write_model, max_capacity=capacity)
    guests = await _guests(None, capacity + extra)

    results = await asyncio.gather(
        *(write_model.book_seat(schedule.id, g.id, g.name) for g in guests),
        return_exceptions=True,
    )

    granted = [r for r in results if not isinstance(r, Exception)]
    refused = [r for r in results if isinstance(r, CapacityFullError)]
    assert len(granted) == capacity
    assert len(refused) == extra
    current = await SqlTransportReadModel().get_schedule(schedule.id)
    assert current.current_bookings == capacity
