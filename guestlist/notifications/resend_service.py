import logging
from datetime import datetime
from typing import Protocol
from uuid import UUID

import httpx

from guestlist.guests.dtos import GuestStatus
from guestlist.notifications.base import NotificationServiceBase
from guestlist.notifications.templates import NotificationTemplates

logger = logging.getLogger(__name__)

RESEND_EMAILS_URL = "https://api.resend.com/emails"


class ResendNotificationConfig(Protocol):
    resend_api_key: str
    emails_from: str
    event_name: str


class ResendNotificationService(NotificationServiceBase):
    def __init__(
        self,
        config: ResendNotificationConfig,
        http_client_class=httpx.AsyncClient,
    ):
        self._config = config
        self._http_client_class = http_client_class

    async def _send(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
        guest_id: UUID | None = None,
    ) -> str | None:
        """Send an email through Resend, returning the Resend email id."""
        async with self._http_client_class() as client:
            response = await client.post(
                RESEND_EMAILS_URL,
                headers={
                    "Authorization": f"Bearer {self._config.resend_api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "from": self._config.emails_from,
                    "to": [to_address],
                    "subject": subject,
                    "html": html_body,
                    "text": text_body,
                },
            )
            response.raise_for_status()

            resend_email_id = response.json().get("id")
            logger.info(
                "Sent '%s' to guest %s (resend id %s)", subject, guest_id, resend_email_id
            )
            return resend_email_id

    async def send_rsvp_confirmation(
        self,
        to_address: str,
        guest_name: str,
        status: GuestStatus,
        added_guests: int = 0,
        guest_id: UUID | None = None,
    ) -> None:
        subject, html_body, text_body = NotificationTemplates.render_rsvp(
            status, guest_name, self._config.event_name, added_guests
        )
        await self._send(
            to_address=to_address,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            guest_id=guest_id,
        )

    async def send_reminder(
        self,
        to_address: str,
        guest_name: str,
        rsvp_deadline: datetime | None = None,
        guest_id: UUID | None = None,
    ) -> None:
        subject, html_body, text_body = NotificationTemplates.render_reminder(
            guest_name, self._config.event_name, rsvp_deadline
        )
        await self._send(
            to_address=to_address,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            guest_id=guest_id,
        )
