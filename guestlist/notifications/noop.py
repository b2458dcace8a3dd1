import logging
from datetime import datetime
from uuid import UUID

from guestlist.guests.dtos import GuestStatus
from guestlist.notifications.base import NotificationServiceBase

logger = logging.getLogger(__name__)


class NoOpNotificationService(NotificationServiceBase):
    """Used when notifications are disabled. Only logs what would have been sent."""

    async def send_rsvp_confirmation(
        self,
        to_address: str,
        guest_name: str,
        status: GuestStatus,
        added_guests: int = 0,
        guest_id: UUID | None = None,
    ) -> None:
        logger.debug("Notifications disabled, skipping RSVP %s for guest %s", status, guest_id)

    async def send_reminder(
        self,
        to_address: str,
        guest_name: str,
        rsvp_deadline: datetime | None = None,
        guest_id: UUID | None = None,
    ) -> None:
        logger.debug("Notifications disabled, skipping reminder for guest %s", guest_id)
