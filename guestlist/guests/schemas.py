"""Response models shared by the guest routers."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from guestlist.guests.dtos import (
    ChangeMethod,
    CommunicationDirection,
    CommunicationLogEntryDTO,
    CommunicationStatus,
    ContactDetails,
    GuestDTO,
    GuestStatus,
    RSVPHistoryEntryDTO,
    RSVPTransitionDTO,
)


class ContactDetailsResponse(BaseModel):
    address: str | None = None
    emergency_contact: str | None = None
    relationship: str | None = None
    added_by_guest_id: UUID | None = None

    @classmethod
    def from_value(cls, details: ContactDetails) -> "ContactDetailsResponse":
        return cls(
            address=details.address,
            emergency_contact=details.emergency_contact,
            relationship=details.relationship,
            added_by_guest_id=details.added_by_guest_id,
        )


class GuestResponse(BaseModel):
    id: UUID
    name: str
    email: str
    phone: str | None = None
    rsvp_status: GuestStatus
    rsvp_responded_at: datetime | None = None
    rsvp_deadline: datetime | None = None
    plus_one_name: str | None = None
    plus_one_email: str | None = None
    dietary_needs: list[str] = []
    allergies: list[str] = []
    special_requests: str | None = None
    table_assignment: str | None = None
    contact_details: ContactDetailsResponse
    linked_account_id: UUID | None = None
    is_archived: bool
    archived_at: datetime | None = None
    archive_reason: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_dto(cls, guest: GuestDTO) -> "GuestResponse":
        return cls(
            id=guest.id,
            name=guest.name,
            email=guest.email,
            phone=guest.phone,
            rsvp_status=guest.rsvp_status,
            rsvp_responded_at=guest.rsvp_responded_at,
            rsvp_deadline=guest.rsvp_deadline,
            plus_one_name=guest.plus_one_name,
            plus_one_email=guest.plus_one_email,
            dietary_needs=list(guest.dietary_needs),
            allergies=list(guest.allergies),
            special_requests=guest.special_requests,
            table_assignment=guest.table_assignment,
            contact_details=ContactDetailsResponse.from_value(guest.contact_details),
            linked_account_id=guest.linked_account_id,
            is_archived=guest.is_archived,
            archived_at=guest.archived_at,
            archive_reason=guest.archive_reason,
            created_at=guest.created_at,
            updated_at=guest.updated_at,
        )


class HistoryEntryResponse(BaseModel):
    id: UUID
    guest_id: UUID
    old_status: GuestStatus
    new_status: GuestStatus
    changed_at: datetime
    change_method: ChangeMethod
    change_reason: str | None = None

    @classmethod
    def from_dto(cls, entry: RSVPHistoryEntryDTO) -> "HistoryEntryResponse":
        return cls(
            id=entry.id,
            guest_id=entry.guest_id,
            old_status=entry.old_status,
            new_status=entry.new_status,
            changed_at=entry.changed_at,
            change_method=entry.change_method,
            change_reason=entry.change_reason,
        )


class CommunicationResponse(BaseModel):
    id: UUID
    guest_id: UUID
    direction: CommunicationDirection
    type: str
    subject: str | None = None
    content: str
    status: CommunicationStatus
    created_at: datetime
    error_message: str | None = None

    @classmethod
    def from_dto(cls, entry: CommunicationLogEntryDTO) -> "CommunicationResponse":
        return cls(
            id=entry.id,
            guest_id=entry.guest_id,
            direction=entry.direction,
            type=entry.type,
            subject=entry.subject,
            content=entry.content,
            status=entry.status,
            created_at=entry.created_at,
            error_message=entry.error_message,
        )


class TransitionResponse(BaseModel):
    guest: GuestResponse
    history_entry: HistoryEntryResponse
    added_guest_ids: list[UUID] = []
    added_guests: int = 0
    archived: bool = False

    @classmethod
    def from_dto(cls, transition: RSVPTransitionDTO) -> "TransitionResponse":
        return cls(
            guest=GuestResponse.from_dto(transition.guest),
            history_entry=HistoryEntryResponse.from_dto(transition.history_entry),
            added_guest_ids=list(transition.added_guest_ids),
            added_guests=transition.added_guests,
            archived=transition.archived,
        )
