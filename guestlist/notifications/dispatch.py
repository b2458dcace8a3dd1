import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


async def notify_safely(send: Callable[[], Awaitable[None]], description: str) -> bool:
    """Run a notification after the core transaction has committed.

    Notification failures never fail the operation that triggered them.
    Returns whether the notification went out.
    """
    try:
        await send()
    except Exception:
        logger.exception("Failed to send %s", description)
        return False
    return True
