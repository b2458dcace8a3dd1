from guestlist.config.settings import settings
from guestlist.notifications.base import NotificationServiceBase
from guestlist.notifications.dispatch import notify_safely
from guestlist.notifications.noop import NoOpNotificationService
from guestlist.notifications.resend_service import ResendNotificationService
from guestlist.notifications.smtp_service import SMTPNotificationService
from guestlist.notifications.templates import NotificationTemplates


def get_notification_service() -> NotificationServiceBase:
    if not settings.notifications_enabled:
        return NoOpNotificationService()
    if settings.resend_api_key:
        return ResendNotificationService(config=settings)
    return SMTPNotificationService()


__all__ = [
    "NotificationServiceBase",
    "NotificationTemplates",
    "get_notification_service",
    "notify_safely",
]
