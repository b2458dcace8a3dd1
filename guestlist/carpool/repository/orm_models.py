from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from guestlist.carpool.dtos import OfferStatus, ParticipantStatus
from guestlist.config.table_names import TableNames
from guestlist.models.base import Base, TimeStamp


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


ACTIVE_OFFER_CONDITION = text("status = 'active'")


class CarpoolOffer(Base, TimeStamp):
    __tablename__ = TableNames.CARPOOL_OFFERS.value
    __table_args__ = (
        CheckConstraint("available_seats >= 1", name="ck_carpool_seats_positive"),
        CheckConstraint("booked_seats >= 0", name="ck_carpool_booked_non_negative"),
        CheckConstraint("booked_seats <= available_seats", name="ck_carpool_not_overbooked"),
        # one active offer per driver
        Index(
            "uq_carpool_active_offer_per_driver",
            "driver_guest_id",
            unique=True,
            postgresql_where=ACTIVE_OFFER_CONDITION,
            sqlite_where=ACTIVE_OFFER_CONDITION,
        ),
    )

    driver_guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    departure_location: Mapped[str] = mapped_column(String(255), nullable=False)
    departure_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    booked_seats: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    vehicle_description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    special_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[OfferStatus] = mapped_column(
        Enum(OfferStatus, name="carpool_offer_status_enum", values_callable=_enum_values),
        default=OfferStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<CarpoolOffer {self.departure_location} {self.booked_seats}/{self.available_seats}>"


class CarpoolParticipant(Base, TimeStamp):
    __tablename__ = TableNames.CARPOOL_PARTICIPANTS.value
    __table_args__ = (
        UniqueConstraint(
            "offer_id", "participant_guest_id", name="uq_carpool_participant_offer_guest"
        ),
    )

    offer_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.CARPOOL_OFFERS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    participant_guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    passenger_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[ParticipantStatus] = mapped_column(
        Enum(
            ParticipantStatus,
            name="carpool_participant_status_enum",
            values_callable=_enum_values,
        ),
        default=ParticipantStatus.CONFIRMED,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<CarpoolParticipant {self.passenger_name} offer={self.offer_id} {self.status}>"
