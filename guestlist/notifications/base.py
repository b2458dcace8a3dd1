from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from guestlist.guests.dtos import GuestStatus


class NotificationServiceBase(ABC):
    @abstractmethod
    async def send_rsvp_confirmation(
        self,
        to_address: str,
        guest_name: str,
        status: GuestStatus,
        added_guests: int = 0,
        guest_id: UUID | None = None,
    ) -> None:
        pass

    @abstractmethod
    async def send_reminder(
        self,
        to_address: str,
        guest_name: str,
        rsvp_deadline: datetime | None = None,
        guest_id: UUID | None = None,
    ) -> None:
        pass
