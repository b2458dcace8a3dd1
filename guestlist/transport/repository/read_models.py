import abc
from collections import defaultdict
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from guestlist.config.database import async_session_manager
from guestlist.transport.dtos import ScheduleDTO, SeatBookingDTO, TransportOptionDTO
from guestlist.transport.repository.orm_models import Schedule, SeatBooking, TransportOption


class TransportReadModel(abc.ABC):
    @abc.abstractmethod
    async def list_options(self) -> list[TransportOptionDTO]:
        """All transport options with their schedules, featured options first."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_schedule(self, schedule_id: UUID) -> ScheduleDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_guest_bookings(self, guest_id: UUID) -> list[SeatBookingDTO]:
        raise NotImplementedError


class SqlTransportReadModel(TransportReadModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def list_options(self) -> list[TransportOptionDTO]:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            options = (
                await session.execute(
                    select(TransportOption).order_by(
                        TransportOption.featured.desc(), TransportOption.name
                    )
                )
            ).scalars().all()
            schedules = (
                await session.execute(
                    select(Schedule)
                    .where(Schedule.option_id.in_([o.uuid for o in options]))
                    .order_by(Schedule.departure_time)
                    .execution_options(populate_existing=True)
                )
            ).scalars().all()

            by_option: dict[UUID, list[ScheduleDTO]] = defaultdict(list)
            for schedule in schedules:
                by_option[schedule.option_id].append(ScheduleDTO.from_schedule(schedule))

            return [TransportOptionDTO.from_option(o, by_option[o.uuid]) for o in options]

    async def get_schedule(self, schedule_id: UUID) -> ScheduleDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(Schedule)
                .where(Schedule.uuid == schedule_id)
                .execution_options(populate_existing=True)
            )
            schedule = result.scalar_one_or_none()
            return ScheduleDTO.from_schedule(schedule) if schedule else None

    async def list_guest_bookings(self, guest_id: UUID) -> list[SeatBookingDTO]:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(SeatBooking)
                .where(SeatBooking.guest_id == guest_id)
                .order_by(SeatBooking.created_at, SeatBooking.uuid)
            )
            return [SeatBookingDTO.from_booking(b) for b in result.scalars().all()]
