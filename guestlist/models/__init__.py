from .base import Base, BaseModel, TimeStamp, utcnow


def load_models() -> None:
    """Import every ORM module so all tables are registered on BaseModel.metadata."""
    import guestlist.carpool.repository.orm_models  # noqa: F401
    import guestlist.guests.repository.orm_models  # noqa: F401
    import guestlist.transport.repository.orm_models  # noqa: F401


__all__ = [
    "Base",
    "BaseModel",
    "TimeStamp",
    "load_models",
    "utcnow",
]
