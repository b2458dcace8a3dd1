from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from guestlist.auth import get_current_account_id
from guestlist.errors import NotFoundError
from guestlist.guests.dtos import GuestSearchFilter, GuestStatus
from guestlist.guests.repository.read_models import GuestReadModel, SqlGuestReadModel
from guestlist.guests.schemas import CommunicationResponse, GuestResponse, HistoryEntryResponse
from guestlist.guests.urls import (
    GUEST_COMMUNICATIONS_URL,
    GUEST_HISTORY_URL,
    GUEST_URL,
    GUESTS_URL,
    MY_GUEST_URL,
)

router = APIRouter()


class GuestSearchResponse(BaseModel):
    guests: list[GuestResponse]
    total: int


def get_guest_read_model() -> GuestReadModel:
    """Dependency to get guest read model instance."""
    return SqlGuestReadModel()


@router.get(GUESTS_URL, response_model=GuestSearchResponse)
async def search_guests(
    q: str | None = None,
    status: GuestStatus | None = None,
    linked_only: bool = False,
    include_archived: bool = False,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    read_model: GuestReadModel = Depends(get_guest_read_model),
) -> GuestSearchResponse:
    result = await read_model.search(
        GuestSearchFilter(
            text=q,
            status=status,
            linked_only=linked_only,
            include_archived=include_archived,
            limit=limit,
            offset=offset,
        )
    )
    return GuestSearchResponse(
        guests=[GuestResponse.from_dto(g) for g in result.guests],
        total=result.total,
    )


# Registered before GUEST_URL so "me" is not parsed as a guest id
@router.get(MY_GUEST_URL, response_model=GuestResponse)
async def get_my_guest(
    account_id: UUID = Depends(get_current_account_id),
    read_model: GuestReadModel = Depends(get_guest_read_model),
) -> GuestResponse:
    """The guest record linked to the calling account."""
    guest = await read_model.get_guest_by_account(account_id)
    if guest is None:
        raise NotFoundError("Guest for account", account_id)
    return GuestResponse.from_dto(guest)


@router.get(GUEST_URL, response_model=GuestResponse)
async def get_guest(
    guest_id: UUID,
    read_model: GuestReadModel = Depends(get_guest_read_model),
) -> GuestResponse:
    guest = await read_model.get_guest(guest_id)
    if guest is None:
        raise NotFoundError("Guest", guest_id)
    return GuestResponse.from_dto(guest)


@router.get(GUEST_HISTORY_URL, response_model=list[HistoryEntryResponse])
async def get_guest_history(
    guest_id: UUID,
    read_model: GuestReadModel = Depends(get_guest_read_model),
) -> list[HistoryEntryResponse]:
    return [HistoryEntryResponse.from_dto(e) for e in await read_model.get_history(guest_id)]


@router.get(GUEST_COMMUNICATIONS_URL, response_model=list[CommunicationResponse])
async def get_guest_communications(
    guest_id: UUID,
    read_model: GuestReadModel = Depends(get_guest_read_model),
) -> list[CommunicationResponse]:
    return [
        CommunicationResponse.from_dto(e) for e in await read_model.get_communications(guest_id)
    ]
