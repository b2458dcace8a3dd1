"""Carpool write models. Returns DTOs, never ORM models.

Seats of an offer are handed out through the capacity ledger on
``carpool_offers.booked_seats``. The offer row is always locked before any of
its participant rows so concurrent joins, cancellations and offer
cancellation queue up in the same order.
"""

import logging
from abc import ABC, abstractmethod
from functools import partial
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guestlist.capacity import CapacityLedger, SqlCapacityLedger
from guestlist.carpool.dtos import (
    CarpoolOfferDTO,
    CarpoolParticipantDTO,
    OfferDetails,
    OfferStatus,
    ParticipantStatus,
)
from guestlist.carpool.repository.orm_models import CarpoolOffer, CarpoolParticipant
from guestlist.config.database import async_session_manager
from guestlist.errors import (
    AlreadyJoinedError,
    CapacityFullError,
    ConflictError,
    NotFoundError,
    SelfJoinForbiddenError,
    ValidationFailedError,
)
from guestlist.guests.repository.orm_models import Guest
from guestlist.guests.validation import validate_name, validate_phone
from guestlist.models.base import utcnow

logger = logging.getLogger(__name__)

offer_ledger = SqlCapacityLedger(counter=CarpoolOffer.booked_seats, key=CarpoolOffer.uuid)


class CarpoolWriteModel(ABC):
    @abstractmethod
    async def create_offer(self, driver_guest_id: UUID, details: OfferDetails) -> CarpoolOfferDTO:
        """Publish a ride. A driver can have one active offer at a time."""
        raise NotImplementedError

    @abstractmethod
    async def join_offer(
        self, offer_id: UUID, participant_guest_id: UUID, passenger_name: str
    ) -> CarpoolParticipantDTO:
        raise NotImplementedError

    @abstractmethod
    async def cancel_participant(self, participant_id: UUID) -> CarpoolParticipantDTO:
        raise NotImplementedError

    @abstractmethod
    async def cancel_offer(self, offer_id: UUID) -> CarpoolOfferDTO:
        """Cancel an offer and void all of its participants at once."""
        raise NotImplementedError


class SqlCarpoolWriteModel(CarpoolWriteModel):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        ledger: CapacityLedger | None = None,
    ) -> None:
        self.session_overwrite = session_overwrite
        self.ledger = ledger or offer_ledger

    async def create_offer(self, driver_guest_id: UUID, details: OfferDetails) -> CarpoolOfferDTO:
        if details.available_seats < 1:
            raise ValidationFailedError(
                "An offer needs at least one seat", field="available_seats"
            )
        departure_location = validate_name(
            details.departure_location, field="departure_location"
        )
        contact_phone = validate_phone(details.contact_phone, field="contact_phone")

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            if await session.get(Guest, driver_guest_id) is None:
                raise NotFoundError("Guest", driver_guest_id)

            result = await session.execute(
                select(CarpoolOffer.uuid).where(
                    CarpoolOffer.driver_guest_id == driver_guest_id,
                    CarpoolOffer.status == OfferStatus.ACTIVE,
                )
            )
            if result.scalar_one_or_none() is not None:
                raise ConflictError(f"Guest '{driver_guest_id}' already has an active offer")

            offer = CarpoolOffer(
                driver_guest_id=driver_guest_id,
                departure_location=departure_location,
                departure_time=details.departure_time,
                available_seats=details.available_seats,
                booked_seats=0,
                vehicle_description=details.vehicle_description,
                contact_phone=contact_phone,
                special_notes=details.special_notes,
                status=OfferStatus.ACTIVE,
            )
            session.add(offer)
            try:
                await session.flush()
            except IntegrityError as e:
                raise ConflictError(
                    f"Guest '{driver_guest_id}' already has an active offer"
                ) from e
            dto = CarpoolOfferDTO.from_offer(offer)

        logger.info("Guest %s offered %d carpool seats", driver_guest_id, dto.available_seats)
        return dto

    async def join_offer(
        self, offer_id: UUID, participant_guest_id: UUID, passenger_name: str
    ) -> CarpoolParticipantDTO:
        passenger_name = validate_name(passenger_name, field="passenger_name")

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(
                    CarpoolOffer.driver_guest_id,
                    CarpoolOffer.available_seats,
                    CarpoolOffer.status,
                ).where(CarpoolOffer.uuid == offer_id)
            )
            offer = result.one_or_none()
            if offer is None or offer.status != OfferStatus.ACTIVE:
                raise NotFoundError("CarpoolOffer", offer_id)
            if offer.driver_guest_id == participant_guest_id:
                raise SelfJoinForbiddenError(offer_id)
            if await session.get(Guest, participant_guest_id) is None:
                raise NotFoundError("Guest", participant_guest_id)

            result = await session.execute(
                select(CarpoolParticipant.uuid, CarpoolParticipant.status).where(
                    CarpoolParticipant.offer_id == offer_id,
                    CarpoolParticipant.participant_guest_id == participant_guest_id,
                )
            )
            existing = result.one_or_none()
            if existing is not None and existing.status == ParticipantStatus.CONFIRMED:
                raise AlreadyJoinedError(offer_id, participant_guest_id)

            reservation = await self.ledger.try_reserve(
                session,
                offer_id,
                offer.available_seats,
                CarpoolOffer.status == OfferStatus.ACTIVE,
            )
            if not reservation.granted:
                status = await session.scalar(
                    select(CarpoolOffer.status).where(CarpoolOffer.uuid == offer_id)
                )
                if status != OfferStatus.ACTIVE:
                    # cancelled while we were joining
                    raise NotFoundError("CarpoolOffer", offer_id)
                raise CapacityFullError("CarpoolOffer", offer_id)

            if existing is not None:
                participant = await self._rejoin(
                    session, existing.uuid, offer_id, participant_guest_id, passenger_name
                )
            else:
                participant = CarpoolParticipant(
                    offer_id=offer_id,
                    participant_guest_id=participant_guest_id,
                    passenger_name=passenger_name,
                    status=ParticipantStatus.CONFIRMED,
                )
                session.add(participant)
                try:
                    await session.flush()
                except IntegrityError as e:
                    raise AlreadyJoinedError(offer_id, participant_guest_id) from e
            dto = CarpoolParticipantDTO.from_participant(participant)

        logger.info("Guest %s joined carpool offer %s", participant_guest_id, offer_id)
        return dto

    async def cancel_participant(self, participant_id: UUID) -> CarpoolParticipantDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            offer_id = await session.scalar(
                select(CarpoolParticipant.offer_id).where(CarpoolParticipant.uuid == participant_id)
            )
            if offer_id is None:
                raise NotFoundError("CarpoolParticipant", participant_id)

            await session.execute(
                select(CarpoolOffer.uuid).where(CarpoolOffer.uuid == offer_id).with_for_update()
            )
            result = await session.execute(
                update(CarpoolParticipant)
                .where(
                    CarpoolParticipant.uuid == participant_id,
                    CarpoolParticipant.status == ParticipantStatus.CONFIRMED,
                )
                .values(status=ParticipantStatus.CANCELLED, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # already cancelled, possibly together with the whole offer
                raise NotFoundError("CarpoolParticipant", participant_id)
            await self.ledger.release(session, offer_id)
            dto = CarpoolParticipantDTO.from_participant(
                await self._get_participant(session, participant_id)
            )

        logger.info("Cancelled carpool participant %s on offer %s", participant_id, offer_id)
        return dto

    async def cancel_offer(self, offer_id: UUID) -> CarpoolOfferDTO:
        now = utcnow()
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                update(CarpoolOffer)
                .where(CarpoolOffer.uuid == offer_id, CarpoolOffer.status == OfferStatus.ACTIVE)
                .values(status=OfferStatus.CANCELLED, booked_seats=0, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise NotFoundError("CarpoolOffer", offer_id)

            voided = await session.execute(
                update(CarpoolParticipant)
                .where(
                    CarpoolParticipant.offer_id == offer_id,
                    CarpoolParticipant.status == ParticipantStatus.CONFIRMED,
                )
                .values(status=ParticipantStatus.CANCELLED, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            offer = await session.scalar(
                select(CarpoolOffer)
                .where(CarpoolOffer.uuid == offer_id)
                .execution_options(populate_existing=True)
            )
            dto = CarpoolOfferDTO.from_offer(offer)

        logger.info(
            "Cancelled carpool offer %s, voided %d participants", offer_id, voided.rowcount
        )
        return dto

    async def _rejoin(
        self,
        session: AsyncSession,
        participant_id: UUID,
        offer_id: UUID,
        participant_guest_id: UUID,
        passenger_name: str,
    ) -> CarpoolParticipant:
        result = await session.execute(
            update(CarpoolParticipant)
            .where(
                CarpoolParticipant.uuid == participant_id,
                CarpoolParticipant.status == ParticipantStatus.CANCELLED,
            )
            .values(
                status=ParticipantStatus.CONFIRMED,
                passenger_name=passenger_name,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise AlreadyJoinedError(offer_id, participant_guest_id)
        return await self._get_participant(session, participant_id)

    async def _get_participant(
        self, session: AsyncSession, participant_id: UUID
    ) -> CarpoolParticipant:
        return await session.scalar(
            select(CarpoolParticipant)
            .where(CarpoolParticipant.uuid == participant_id)
            .execution_options(populate_existing=True)
        )
