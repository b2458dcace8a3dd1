import logging
import sys

from guestlist.config.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

# Third-party loggers that drown out booking and RSVP events at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "asyncio")


def setup_logging() -> None:
    """Configure root logging for the API and the CLI."""
    level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    # SQL echo is governed by LOG_DB, not by the debug flag
    if not settings.LOG_DB:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
