from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from guestlist.carpool.dtos import (
    CarpoolOfferDTO,
    CarpoolParticipantDTO,
    OfferDetails,
    OfferStatus,
    ParticipantStatus,
)
from guestlist.carpool.repository.read_models import CarpoolReadModel, SqlCarpoolReadModel
from guestlist.carpool.repository.write_models import CarpoolWriteModel, SqlCarpoolWriteModel
from guestlist.carpool.urls import (
    CARPOOL_JOIN_URL,
    CARPOOL_OFFER_URL,
    CARPOOL_OFFERS_URL,
    CARPOOL_PARTICIPANT_URL,
    GUEST_CARPOOLS_URL,
)
from guestlist.errors import NotFoundError

router = APIRouter(tags=["carpool"])


class CreateOfferRequest(BaseModel):
    driver_guest_id: UUID
    departure_location: str
    departure_time: datetime
    available_seats: int = Field(ge=1)
    vehicle_description: str | None = None
    contact_phone: str | None = None
    special_notes: str | None = None


class JoinOfferRequest(BaseModel):
    participant_guest_id: UUID
    passenger_name: str


class ParticipantResponse(BaseModel):
    id: UUID
    offer_id: UUID
    participant_guest_id: UUID
    passenger_name: str
    status: ParticipantStatus
    created_at: datetime

    @classmethod
    def from_dto(cls, participant: CarpoolParticipantDTO) -> "ParticipantResponse":
        return cls(
            id=participant.id,
            offer_id=participant.offer_id,
            participant_guest_id=participant.participant_guest_id,
            passenger_name=participant.passenger_name,
            status=participant.status,
            created_at=participant.created_at,
        )


class OfferResponse(BaseModel):
    id: UUID
    driver_guest_id: UUID
    departure_location: str
    departure_time: datetime
    available_seats: int
    booked_seats: int
    seats_left: int
    status: OfferStatus
    vehicle_description: str | None = None
    contact_phone: str | None = None
    special_notes: str | None = None
    participants: list[ParticipantResponse] = []

    @classmethod
    def from_dto(cls, offer: CarpoolOfferDTO) -> "OfferResponse":
        return cls(
            id=offer.id,
            driver_guest_id=offer.driver_guest_id,
            departure_location=offer.departure_location,
            departure_time=offer.departure_time,
            available_seats=offer.available_seats,
            booked_seats=offer.booked_seats,
            seats_left=offer.seats_left,
            status=offer.status,
            vehicle_description=offer.vehicle_description,
            contact_phone=offer.contact_phone,
            special_notes=offer.special_notes,
            participants=[ParticipantResponse.from_dto(p) for p in offer.participants],
        )


def get_carpool_write_model() -> CarpoolWriteModel:
    return SqlCarpoolWriteModel()


def get_carpool_read_model() -> CarpoolReadModel:
    return SqlCarpoolReadModel()


@router.get(CARPOOL_OFFERS_URL, response_model=list[OfferResponse])
async def list_active_offers(
    exclude_driver_guest_id: UUID | None = None,
    read_model: CarpoolReadModel = Depends(get_carpool_read_model),
) -> list[OfferResponse]:
    offers = await read_model.list_active_offers(exclude_driver_guest_id=exclude_driver_guest_id)
    return [OfferResponse.from_dto(o) for o in offers]


@router.post(CARPOOL_OFFERS_URL, response_model=OfferResponse, status_code=status.HTTP_201_CREATED)
async def create_offer(
    request: CreateOfferRequest,
    write_model: CarpoolWriteModel = Depends(get_carpool_write_model),
) -> OfferResponse:
    offer = await write_model.create_offer(
        driver_guest_id=request.driver_guest_id,
        details=OfferDetails(
            departure_location=request.departure_location,
            departure_time=request.departure_time,
            available_seats=request.available_seats,
            vehicle_description=request.vehicle_description,
            contact_phone=request.contact_phone,
            special_notes=request.special_notes,
        ),
    )
    return OfferResponse.from_dto(offer)


@router.get(CARPOOL_OFFER_URL, response_model=OfferResponse)
async def get_offer(
    offer_id: UUID,
    read_model: CarpoolReadModel = Depends(get_carpool_read_model),
) -> OfferResponse:
    offer = await read_model.get_offer(offer_id)
    if offer is None:
        raise NotFoundError("CarpoolOffer", offer_id)
    return OfferResponse.from_dto(offer)


@router.delete(CARPOOL_OFFER_URL, response_model=OfferResponse)
async def cancel_offer(
    offer_id: UUID,
    write_model: CarpoolWriteModel = Depends(get_carpool_write_model),
) -> OfferResponse:
    return OfferResponse.from_dto(await write_model.cancel_offer(offer_id))


@router.post(
    CARPOOL_JOIN_URL, response_model=ParticipantResponse, status_code=status.HTTP_201_CREATED
)
async def join_offer(
    offer_id: UUID,
    request: JoinOfferRequest,
    write_model: CarpoolWriteModel = Depends(get_carpool_write_model),
) -> ParticipantResponse:
    """
    Take a seat in someone's car.
    Full offers answer 409 "full", joining twice 409 "already_joined",
    and drivers joining their own offer 403 "self_join_forbidden".
    """
    participant = await write_model.join_offer(
        offer_id=offer_id,
        participant_guest_id=request.participant_guest_id,
        passenger_name=request.passenger_name,
    )
    return ParticipantResponse.from_dto(participant)


@router.delete(CARPOOL_PARTICIPANT_URL, response_model=ParticipantResponse)
async def cancel_participant(
    participant_id: UUID,
    write_model: CarpoolWriteModel = Depends(get_carpool_write_model),
) -> ParticipantResponse:
    return ParticipantResponse.from_dto(await write_model.cancel_participant(participant_id))


@router.get(GUEST_CARPOOLS_URL, response_model=list[ParticipantResponse])
async def list_guest_participations(
    guest_id: UUID,
    read_model: CarpoolReadModel = Depends(get_carpool_read_model),
) -> list[ParticipantResponse]:
    participations = await read_model.list_guest_participations(guest_id)
    return [ParticipantResponse.from_dto(p) for p in participations]
