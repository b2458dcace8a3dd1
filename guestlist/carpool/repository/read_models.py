import abc
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from guestlist.carpool.dtos import (
    CarpoolOfferDTO,
    CarpoolParticipantDTO,
    OfferStatus,
    ParticipantStatus,
)
from guestlist.carpool.repository.orm_models import CarpoolOffer, CarpoolParticipant
from guestlist.config.database import async_session_manager


class CarpoolReadModel(abc.ABC):
    @abc.abstractmethod
    async def list_active_offers(
        self, exclude_driver_guest_id: UUID | None = None
    ) -> list[CarpoolOfferDTO]:
        """Active offers by departure time, optionally leaving out the caller's own offer."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_offer(self, offer_id: UUID) -> CarpoolOfferDTO | None:
        """An offer together with its confirmed participants."""
        raise NotImplementedError

    @abc.abstractmethod
    async def list_guest_participations(self, guest_id: UUID) -> list[CarpoolParticipantDTO]:
        raise NotImplementedError


class SqlCarpoolReadModel(CarpoolReadModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def list_active_offers(
        self, exclude_driver_guest_id: UUID | None = None
    ) -> list[CarpoolOfferDTO]:
        stmt = select(CarpoolOffer).where(CarpoolOffer.status == OfferStatus.ACTIVE)
        if exclude_driver_guest_id is not None:
            stmt = stmt.where(CarpoolOffer.driver_guest_id != exclude_driver_guest_id)
        stmt = stmt.order_by(CarpoolOffer.departure_time, CarpoolOffer.uuid).execution_options(
            populate_existing=True
        )

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(stmt)
            return [CarpoolOfferDTO.from_offer(o) for o in result.scalars().all()]

    async def get_offer(self, offer_id: UUID) -> CarpoolOfferDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            offer = await session.scalar(
                select(CarpoolOffer)
                .where(CarpoolOffer.uuid == offer_id)
                .execution_options(populate_existing=True)
            )
            if offer is None:
                return None
            result = await session.execute(
                select(CarpoolParticipant)
                .where(
                    CarpoolParticipant.offer_id == offer_id,
                    CarpoolParticipant.status == ParticipantStatus.CONFIRMED,
                )
                .order_by(CarpoolParticipant.created_at, CarpoolParticipant.uuid)
                .execution_options(populate_existing=True)
            )
            participants = [
                CarpoolParticipantDTO.from_participant(p) for p in result.scalars().all()
            ]
            return CarpoolOfferDTO.from_offer(offer, participants)

    async def list_guest_participations(self, guest_id: UUID) -> list[CarpoolParticipantDTO]:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(CarpoolParticipant)
                .where(CarpoolParticipant.participant_guest_id == guest_id)
                .order_by(CarpoolParticipant.created_at, CarpoolParticipant.uuid)
                .execution_options(populate_existing=True)
            )
            return [CarpoolParticipantDTO.from_participant(p) for p in result.scalars().all()]
