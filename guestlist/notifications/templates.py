from dataclasses import dataclass
from datetime import datetime

from guestlist.guests.dtos import GuestStatus


@dataclass
class NotificationTemplates:
    CONFIRMED_SUBJECT = "Thank you for your RSVP!"
    CONFIRMED_HTML = """
    <!DOCTYPE html>
    <html>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
        <p>Dear {guest_name},</p>
        <p>Thank you for confirming your attendance at {event_name}.</p>
        {added_guests_html}
        <p>We look forward to celebrating with you!</p>
    </body>
    </html>
    """
    CONFIRMED_TEXT = """
    Dear {guest_name},

    Thank you for confirming your attendance at {event_name}.
    {added_guests_text}
    We look forward to celebrating with you!
    """

    DECLINED_SUBJECT = "We're sorry you can't make it"
    DECLINED_HTML = """
    <!DOCTYPE html>
    <html>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
        <p>Dear {guest_name},</p>
        <p>Your response has been recorded. We will miss you at {event_name}.</p>
    </body>
    </html>
    """
    DECLINED_TEXT = """
    Dear {guest_name},

    Your response has been recorded. We will miss you at {event_name}.
    """

    PENDING_SUBJECT = "Your RSVP has been reset"
    PENDING_HTML = """
    <!DOCTYPE html>
    <html>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
        <p>Dear {guest_name},</p>
        <p>Your RSVP for {event_name} is open again. Please let us know if you can attend.</p>
    </body>
    </html>
    """
    PENDING_TEXT = """
    Dear {guest_name},

    Your RSVP for {event_name} is open again. Please let us know if you can attend.
    """

    REMINDER_SUBJECT = "Reminder: please RSVP"
    REMINDER_HTML = """
    <!DOCTYPE html>
    <html>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
        <p>Dear {guest_name},</p>
        <p>We haven't heard from you yet about {event_name}.</p>
        <p>Please respond {deadline}.</p>
    </body>
    </html>
    """
    REMINDER_TEXT = """
    Dear {guest_name},

    We haven't heard from you yet about {event_name}.
    Please respond {deadline}.
    """

    @classmethod
    def get_rsvp_templates(cls, status: GuestStatus) -> tuple[str, str, str]:
        """Returns (subject, html_template, text_template) for a status."""
        if status == GuestStatus.CONFIRMED:
            return cls.CONFIRMED_SUBJECT, cls.CONFIRMED_HTML, cls.CONFIRMED_TEXT
        if status == GuestStatus.DECLINED:
            return cls.DECLINED_SUBJECT, cls.DECLINED_HTML, cls.DECLINED_TEXT
        return cls.PENDING_SUBJECT, cls.PENDING_HTML, cls.PENDING_TEXT

    @classmethod
    def render_rsvp(
        cls, status: GuestStatus, guest_name: str, event_name: str, added_guests: int = 0
    ) -> tuple[str, str, str]:
        subject, html_template, text_template = cls.get_rsvp_templates(status)
        added_text = (
            f"You let us know about {added_guests} more guest(s); they are on the list too."
            if added_guests
            else ""
        )
        html_body = html_template.format(
            guest_name=guest_name,
            event_name=event_name,
            added_guests_html=f"<p>{added_text}</p>" if added_text else "",
        )
        text_body = text_template.format(
            guest_name=guest_name,
            event_name=event_name,
            added_guests_text=added_text,
        )
        return subject, html_body, text_body

    @classmethod
    def render_reminder(
        cls, guest_name: str, event_name: str, rsvp_deadline: datetime | None = None
    ) -> tuple[str, str, str]:
        deadline = f"by {rsvp_deadline:%B %d, %Y}" if rsvp_deadline else "as soon as you can"
        values = {"guest_name": guest_name, "event_name": event_name, "deadline": deadline}
        return (
            cls.REMINDER_SUBJECT,
            cls.REMINDER_HTML.format(**values),
            cls.REMINDER_TEXT.format(**values),
        )
