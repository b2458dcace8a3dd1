from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from guestlist.carpool.repository.orm_models import CarpoolOffer, CarpoolParticipant


class OfferStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class ParticipantStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OfferDetails:
    """What a driver publishes about a ride."""

    departure_location: str
    departure_time: datetime
    available_seats: int
    vehicle_description: str | None = None
    contact_phone: str | None = None
    special_notes: str | None = None


@dataclass(frozen=True)
class CarpoolParticipantDTO:
    id: UUID
    offer_id: UUID
    participant_guest_id: UUID
    passenger_name: str
    status: ParticipantStatus
    created_at: datetime

    @classmethod
    def from_participant(cls, participant: "CarpoolParticipant") -> "CarpoolParticipantDTO":
        return cls(
            id=participant.uuid,
            offer_id=participant.offer_id,
            participant_guest_id=participant.participant_guest_id,
            passenger_name=participant.passenger_name,
            status=ParticipantStatus(participant.status),
            created_at=participant.created_at,
        )


@dataclass(frozen=True)
class CarpoolOfferDTO:
    id: UUID
    driver_guest_id: UUID
    departure_location: str
    departure_time: datetime
    available_seats: int
    booked_seats: int
    status: OfferStatus
    created_at: datetime
    vehicle_description: str | None = None
    contact_phone: str | None = None
    special_notes: str | None = None
    participants: tuple[CarpoolParticipantDTO, ...] = ()

    @property
    def seats_left(self) -> int:
        return max(self.available_seats - self.booked_seats, 0)

    @classmethod
    def from_offer(
        cls,
        offer: "CarpoolOffer",
        participants: list[CarpoolParticipantDTO] | None = None,
    ) -> "CarpoolOfferDTO":
        return cls(
            id=offer.uuid,
            driver_guest_id=offer.driver_guest_id,
            departure_location=offer.departure_location,
            departure_time=offer.departure_time,
            available_seats=offer.available_seats,
            booked_seats=offer.booked_seats,
            status=OfferStatus(offer.status),
            created_at=offer.created_at,
            vehicle_description=offer.vehicle_description,
            contact_phone=offer.contact_phone,
            special_notes=offer.special_notes,
            participants=tuple(participants or ()),
        )
