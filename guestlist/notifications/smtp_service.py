import asyncio
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from uuid import UUID

from guestlist.config.settings import settings
from guestlist.guests.dtos import GuestStatus
from guestlist.notifications.base import NotificationServiceBase
from guestlist.notifications.templates import NotificationTemplates


class SMTPNotificationService(NotificationServiceBase):
    def __init__(self):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.username = settings.smtp_user
        self.password = settings.smtp_password
        self.from_address = settings.emails_from
        self.event_name = settings.event_name

    def _create_message(
        self,
        to_address: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to_address

        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))

        return msg

    def _send(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.host, self.port) as server:
            if self.username and self.password:
                server.starttls()
                server.login(self.username, self.password)
            server.send_message(msg)

    async def _deliver(self, to_address: str, rendered: tuple[str, str, str]) -> None:
        subject, html_body, text_body = rendered
        msg = self._create_message(
            to_address=to_address,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
        )
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._send, msg)

    async def send_rsvp_confirmation(
        self,
        to_address: str,
        guest_name: str,
        status: GuestStatus,
        added_guests: int = 0,
        guest_id: UUID | None = None,
    ) -> None:
        await self._deliver(
            to_address,
            NotificationTemplates.render_rsvp(status, guest_name, self.event_name, added_guests),
        )

    async def send_reminder(
        self,
        to_address: str,
        guest_name: str,
        rsvp_deadline: datetime | None = None,
        guest_id: UUID | None = None,
    ) -> None:
        await self._deliver(
            to_address,
            NotificationTemplates.render_reminder(guest_name, self.event_name, rsvp_deadline),
        )
