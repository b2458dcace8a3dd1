"""Domain errors raised by the guest, transport and carpool write models.

Every error carries a stable ``code`` so the presentation layer can tell a
capacity or conflict failure apart from a generic one.
"""

from uuid import UUID


class GuestlistError(Exception):
    """Base class for all domain errors."""

    code = "error"


class NotFoundError(GuestlistError):
    """Raised when a referenced entity does not exist (or is no longer active)."""

    code = "not_found"

    def __init__(self, entity: str, identifier: UUID | str) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} '{identifier}' not found")


class ValidationFailedError(GuestlistError):
    """Raised when input data is malformed."""

    code = "validation_failed"

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class ConflictError(GuestlistError):
    """Raised on identity link collisions, duplicate bookings or duplicate active offers."""

    code = "conflict"


class CapacityFullError(GuestlistError):
    """Raised when a schedule or carpool offer has no seat left."""

    code = "full"

    def __init__(self, resource: str, resource_id: UUID) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} '{resource_id}' is full")


class AlreadyJoinedError(GuestlistError):
    """Raised when a guest already holds an active seat in a carpool offer."""

    code = "already_joined"

    def __init__(self, offer_id: UUID, guest_id: UUID) -> None:
        self.offer_id = offer_id
        self.guest_id = guest_id
        super().__init__(f"Guest '{guest_id}' already joined carpool offer '{offer_id}'")


class SelfJoinForbiddenError(GuestlistError):
    """Raised when a driver tries to join their own carpool offer."""

    code = "self_join_forbidden"

    def __init__(self, offer_id: UUID) -> None:
        self.offer_id = offer_id
        super().__init__(f"Drivers cannot join their own carpool offer '{offer_id}'")


class StoreUnavailableError(GuestlistError):
    """Raised when the database cannot be reached."""

    code = "store_unavailable"
