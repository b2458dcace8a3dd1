from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from guestlist.guests.repository.orm_models import (
        CommunicationLogEntry,
        Guest,
        RSVPHistoryEntry,
    )


class GuestStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class ChangeMethod(str, Enum):
    GUEST_FORM = "guest_form"
    ADMIN_OVERRIDE = "admin_override"


class CommunicationDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class CommunicationStatus(str, Enum):
    RECEIVED = "received"
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


@dataclass(frozen=True)
class ContactDetails:
    """Structured contact details stored alongside a guest."""

    address: str | None = None
    emergency_contact: str | None = None
    # Set on guests disclosed by another guest's RSVP
    relationship: str | None = None
    added_by_guest_id: UUID | None = None

    @classmethod
    def from_json(cls, data: dict | None) -> "ContactDetails":
        if not data:
            return cls()
        added_by = data.get("added_by_guest_id")
        return cls(
            address=data.get("address"),
            emergency_contact=data.get("emergency_contact"),
            relationship=data.get("relationship"),
            added_by_guest_id=UUID(added_by) if added_by else None,
        )

    def to_json(self) -> dict:
        return {
            "address": self.address,
            "emergency_contact": self.emergency_contact,
            "relationship": self.relationship,
            "added_by_guest_id": str(self.added_by_guest_id) if self.added_by_guest_id else None,
        }


@dataclass(frozen=True)
class ContactUpdateDTO:
    """Contact changes submitted together with an RSVP."""

    phone: str | None = None
    address: str | None = None
    emergency_contact: str | None = None


@dataclass(frozen=True)
class AdditionalGuestDTO:
    """A guest newly disclosed by the responding guest."""

    name: str
    email: str
    relationship: str | None = None


@dataclass(frozen=True)
class RSVPPayloadDTO:
    """Response data submitted through the guest form."""

    plus_one_name: str | None = None
    plus_one_email: str | None = None
    dietary_needs: list[str] = field(default_factory=list)
    allergies: list[str] = field(default_factory=list)
    special_requests: str | None = None
    contact_updates: ContactUpdateDTO | None = None
    additional_guests: list[AdditionalGuestDTO] = field(default_factory=list)


@dataclass(frozen=True)
class GuestDTO:
    """DTO for guest data."""

    id: UUID
    name: str
    email: str
    rsvp_status: GuestStatus
    created_at: datetime
    updated_at: datetime
    phone: str | None = None
    rsvp_responded_at: datetime | None = None
    rsvp_deadline: datetime | None = None
    plus_one_name: str | None = None
    plus_one_email: str | None = None
    dietary_needs: tuple[str, ...] = ()
    allergies: tuple[str, ...] = ()
    special_requests: str | None = None
    table_assignment: str | None = None
    contact_details: ContactDetails = field(default_factory=ContactDetails)
    linked_account_id: UUID | None = None
    is_archived: bool = False
    archived_at: datetime | None = None
    archive_reason: str | None = None

    @classmethod
    def from_guest(cls, guest: "Guest") -> "GuestDTO":
        """Create GuestDTO from Guest ORM model."""
        return cls(
            id=guest.uuid,
            name=guest.name,
            email=guest.email,
            phone=guest.phone,
            rsvp_status=GuestStatus(guest.rsvp_status),
            rsvp_responded_at=guest.rsvp_responded_at,
            rsvp_deadline=guest.rsvp_deadline,
            plus_one_name=guest.plus_one_name,
            plus_one_email=guest.plus_one_email,
            dietary_needs=tuple(guest.dietary_needs or ()),
            allergies=tuple(guest.allergies or ()),
            special_requests=guest.special_requests,
            table_assignment=guest.table_assignment,
            contact_details=ContactDetails.from_json(guest.contact_details),
            linked_account_id=guest.linked_account_id,
            is_archived=bool(guest.is_archived),
            archived_at=guest.archived_at,
            archive_reason=guest.archive_reason,
            created_at=guest.created_at,
            updated_at=guest.updated_at,
        )


@dataclass(frozen=True)
class RSVPHistoryEntryDTO:
    id: UUID
    guest_id: UUID
    old_status: GuestStatus
    new_status: GuestStatus
    changed_at: datetime
    change_method: ChangeMethod
    change_reason: str | None = None

    @classmethod
    def from_entry(cls, entry: "RSVPHistoryEntry") -> "RSVPHistoryEntryDTO":
        return cls(
            id=entry.uuid,
            guest_id=entry.guest_id,
            old_status=GuestStatus(entry.old_status),
            new_status=GuestStatus(entry.new_status),
            changed_at=entry.changed_at,
            change_method=ChangeMethod(entry.change_method),
            change_reason=entry.change_reason,
        )


@dataclass(frozen=True)
class CommunicationLogEntryDTO:
    id: UUID
    guest_id: UUID
    direction: CommunicationDirection
    type: str
    content: str
    status: CommunicationStatus
    created_at: datetime
    subject: str | None = None
    error_message: str | None = None

    @classmethod
    def from_entry(cls, entry: "CommunicationLogEntry") -> "CommunicationLogEntryDTO":
        return cls(
            id=entry.uuid,
            guest_id=entry.guest_id,
            direction=CommunicationDirection(entry.direction),
            type=entry.communication_type,
            subject=entry.subject,
            content=entry.content,
            status=CommunicationStatus(entry.status),
            created_at=entry.created_at,
            error_message=entry.error_message,
        )


@dataclass(frozen=True)
class RSVPTransitionDTO:
    """Result of an accepted status transition and the effects applied with it."""

    guest: GuestDTO
    history_entry: RSVPHistoryEntryDTO
    added_guest_ids: tuple[UUID, ...] = ()
    archived: bool = False
    communication: CommunicationLogEntryDTO | None = None

    @property
    def added_guests(self) -> int:
        return len(self.added_guest_ids)


@dataclass(frozen=True)
class GuestSearchFilter:
    text: str | None = None
    status: GuestStatus | None = None
    linked_only: bool = False
    include_archived: bool = False
    limit: int = 100
    offset: int = 0


@dataclass(frozen=True)
class GuestSearchResultDTO:
    guests: list[GuestDTO]
    total: int
