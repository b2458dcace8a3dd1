"""RSVP write model - the guest status state machine.

Write operations return DTOs, never ORM models. A transition and all of its
effects (response data, history entry, disclosed guests, archival and the
communication receipt) are applied in one session and become visible
together or not at all. Notifications go out only after the commit.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from guestlist.config.database import async_session_manager
from guestlist.errors import NotFoundError, ValidationFailedError
from guestlist.guests.dtos import (
    AdditionalGuestDTO,
    ChangeMethod,
    CommunicationDirection,
    CommunicationLogEntryDTO,
    CommunicationStatus,
    ContactDetails,
    GuestDTO,
    GuestStatus,
    RSVPHistoryEntryDTO,
    RSVPPayloadDTO,
    RSVPTransitionDTO,
)
from guestlist.guests.repository.orm_models import CommunicationLogEntry, Guest, RSVPHistoryEntry
from guestlist.guests.validation import (
    normalize_tags,
    validate_email,
    validate_name,
    validate_optional_email,
    validate_phone,
)
from guestlist.models.base import utcnow
from guestlist.notifications.base import NotificationServiceBase
from guestlist.notifications.dispatch import notify_safely

logger = logging.getLogger(__name__)

DECLINE_ARCHIVE_REASON = "Declined RSVP"


class RSVPWriteModel(ABC):
    @abstractmethod
    async def submit_response(
        self,
        guest_id: UUID,
        new_status: GuestStatus,
        payload: RSVPPayloadDTO,
    ) -> RSVPTransitionDTO:
        """
        Record a guest's own RSVP response.
        Declining also archives the guest.
        """
        raise NotImplementedError

    @abstractmethod
    async def admin_override_status(
        self,
        guest_id: UUID,
        new_status: GuestStatus,
        reason: str | None = None,
    ) -> RSVPTransitionDTO:
        """
        Force a guest's status on behalf of an administrator.
        Never touches archival.
        """
        raise NotImplementedError


async def get_guest_for_update(session: AsyncSession, guest_id: UUID) -> Guest:
    """Load a guest row, locking it for the rest of the transaction."""
    stmt = (
        select(Guest)
        .where(Guest.uuid == guest_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    guest = result.scalar_one_or_none()
    if guest is None:
        raise NotFoundError("Guest", guest_id)
    return guest


def apply_transition(
    session: AsyncSession,
    guest: Guest,
    new_status: GuestStatus,
    change_method: ChangeMethod,
    change_reason: str | None,
    now: datetime,
) -> RSVPHistoryEntry:
    """Move a guest to ``new_status`` and append the matching history entry."""
    entry = RSVPHistoryEntry(
        guest_id=guest.uuid,
        old_status=GuestStatus(guest.rsvp_status),
        new_status=new_status,
        changed_at=now,
        change_method=change_method,
        change_reason=change_reason,
    )
    guest.rsvp_status = new_status
    # rsvp_responded_at is set iff the guest is no longer pending
    guest.rsvp_responded_at = None if new_status == GuestStatus.PENDING else now
    session.add(entry)
    return entry


def validate_payload(payload: RSVPPayloadDTO) -> RSVPPayloadDTO:
    """Validate and normalise the contact fields of a payload."""
    contact_updates = payload.contact_updates
    if contact_updates is not None:
        contact_updates = replace(
            contact_updates,
            phone=validate_phone(contact_updates.phone, field="contact_updates.phone"),
        )
    additional_guests = [
        AdditionalGuestDTO(
            name=validate_name(g.name, field=f"additional_guests[{i}].name"),
            email=validate_email(g.email, field=f"additional_guests[{i}].email"),
            relationship=g.relationship.strip() if g.relationship else None,
        )
        for i, g in enumerate(payload.additional_guests)
    ]
    return RSVPPayloadDTO(
        plus_one_name=payload.plus_one_name.strip() if payload.plus_one_name else None,
        plus_one_email=validate_optional_email(payload.plus_one_email, field="plus_one_email"),
        dietary_needs=normalize_tags(payload.dietary_needs),
        allergies=normalize_tags(payload.allergies),
        special_requests=payload.special_requests,
        contact_updates=contact_updates,
        additional_guests=additional_guests,
    )


class SqlRSVPWriteModel(RSVPWriteModel):
    """SQL implementation of the RSVP state machine."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        notification_service: NotificationServiceBase | None = None,
    ) -> None:
        self.session_overwrite = session_overwrite
        self.notification_service = notification_service

    async def submit_response(
        self,
        guest_id: UUID,
        new_status: GuestStatus,
        payload: RSVPPayloadDTO,
    ) -> RSVPTransitionDTO:
        new_status = GuestStatus(new_status)
        if new_status == GuestStatus.PENDING:
            raise ValidationFailedError(
                "A response must either confirm or decline", field="rsvp_status"
            )
        payload = validate_payload(payload)

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await get_guest_for_update(session, guest_id)
            now = utcnow()

            # Re-submission overwrites the previous response data
            self._apply_payload(guest, payload)
            entry = apply_transition(
                session,
                guest,
                new_status,
                ChangeMethod.GUEST_FORM,
                "RSVP submission",
                now,
            )

            added_guests = [
                self._add_disclosed_guest(session, guest, additional, now)
                for additional in payload.additional_guests
            ]

            archived = False
            if new_status == GuestStatus.DECLINED:
                guest.is_archived = True
                guest.archived_at = now
                guest.archive_reason = DECLINE_ARCHIVE_REASON
                archived = True
            elif guest.is_archived:
                # a guest who comes back after declining is active again
                guest.is_archived = False
                guest.archived_at = None
                guest.archive_reason = None

            communication = CommunicationLogEntry(
                guest_id=guest.uuid,
                direction=CommunicationDirection.INBOUND,
                communication_type="rsvp_response",
                subject=(
                    "RSVP Confirmation Received"
                    if new_status == GuestStatus.CONFIRMED
                    else "RSVP Decline Received"
                ),
                content=json.dumps(
                    {
                        "status": new_status.value,
                        "plus_one": payload.plus_one_name,
                        "dietary_needs": payload.dietary_needs,
                        "allergies": payload.allergies,
                        "added_guests": len(added_guests),
                    }
                ),
                status=CommunicationStatus.RECEIVED,
            )
            session.add(communication)
            await session.flush()

            result = RSVPTransitionDTO(
                guest=GuestDTO.from_guest(guest),
                history_entry=RSVPHistoryEntryDTO.from_entry(entry),
                added_guest_ids=tuple(g.uuid for g in added_guests),
                archived=archived,
                communication=CommunicationLogEntryDTO.from_entry(communication),
            )

        logger.info(
            "Guest %s responded %s (added %d guests)",
            guest_id,
            new_status.value,
            result.added_guests,
        )
        await self._notify(result)
        return result

    async def admin_override_status(
        self,
        guest_id: UUID,
        new_status: GuestStatus,
        reason: str | None = None,
    ) -> RSVPTransitionDTO:
        new_status = GuestStatus(new_status)
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await get_guest_for_update(session, guest_id)
            entry = apply_transition(
                session,
                guest,
                new_status,
                ChangeMethod.ADMIN_OVERRIDE,
                reason,
                utcnow(),
            )
            await session.flush()

            result = RSVPTransitionDTO(
                guest=GuestDTO.from_guest(guest),
                history_entry=RSVPHistoryEntryDTO.from_entry(entry),
            )

        logger.info(
            "Guest %s status overridden %s -> %s",
            guest_id,
            entry.old_status.value,
            new_status.value,
        )
        await self._notify(result)
        return result

    def _apply_payload(self, guest: Guest, payload: RSVPPayloadDTO) -> None:
        guest.plus_one_name = payload.plus_one_name
        guest.plus_one_email = payload.plus_one_email
        guest.dietary_needs = list(payload.dietary_needs)
        guest.allergies = list(payload.allergies)
        guest.special_requests = payload.special_requests

        if payload.contact_updates is not None:
            updates = payload.contact_updates
            if updates.phone is not None:
                guest.phone = updates.phone
            current = ContactDetails.from_json(guest.contact_details)
            guest.contact_details = ContactDetails(
                address=updates.address if updates.address is not None else current.address,
                emergency_contact=(
                    updates.emergency_contact
                    if updates.emergency_contact is not None
                    else current.emergency_contact
                ),
                relationship=current.relationship,
                added_by_guest_id=current.added_by_guest_id,
            ).to_json()

    def _add_disclosed_guest(
        self,
        session: AsyncSession,
        submitting_guest: Guest,
        additional: AdditionalGuestDTO,
        now: datetime,
    ) -> Guest:
        guest = Guest(
            name=additional.name,
            email=additional.email,
            rsvp_status=GuestStatus.CONFIRMED,
            rsvp_responded_at=now,
            dietary_needs=[],
            allergies=[],
            contact_details=ContactDetails(
                relationship=additional.relationship,
                added_by_guest_id=submitting_guest.uuid,
            ).to_json(),
            is_archived=False,
        )
        session.add(guest)
        return guest

    async def _notify(self, result: RSVPTransitionDTO) -> None:
        if self.notification_service is None:
            return
        guest = result.guest
        await notify_safely(
            lambda: self.notification_service.send_rsvp_confirmation(
                to_address=guest.email,
                guest_name=guest.name,
                status=guest.rsvp_status,
                added_guests=result.added_guests,
                guest_id=guest.id,
            ),
            f"RSVP confirmation for guest {guest.id}",
        )
