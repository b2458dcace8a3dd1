from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from guestlist.guests.features.identity_link.write_model import (
    IdentityLinkWriteModel,
    SqlIdentityLinkWriteModel,
)
from guestlist.guests.schemas import GuestResponse
from guestlist.guests.urls import LINK_ACCOUNT_URL

router = APIRouter()


class LinkAccountRequest(BaseModel):
    account_id: UUID


def get_identity_link_write_model() -> IdentityLinkWriteModel:
    return SqlIdentityLinkWriteModel()


@router.put(LINK_ACCOUNT_URL, response_model=GuestResponse)
async def link_account(
    guest_id: UUID,
    request: LinkAccountRequest,
    write_model: IdentityLinkWriteModel = Depends(get_identity_link_write_model),
) -> GuestResponse:
    guest = await write_model.link_to_account(guest_id=guest_id, account_id=request.account_id)
    return GuestResponse.from_dto(guest)


@router.delete(LINK_ACCOUNT_URL, response_model=GuestResponse)
async def unlink_account(
    guest_id: UUID,
    write_model: IdentityLinkWriteModel = Depends(get_identity_link_write_model),
) -> GuestResponse:
    guest = await write_model.unlink(guest_id=guest_id)
    return GuestResponse.from_dto(guest)
