from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from guestlist.guests.features.archive.write_model import ArchiveWriteModel, SqlArchiveWriteModel
from guestlist.guests.schemas import GuestResponse
from guestlist.guests.urls import ARCHIVE_GUEST_URL, BULK_ARCHIVE_URL, RESTORE_GUEST_URL

router = APIRouter()


class ArchiveRequest(BaseModel):
    reason: str | None = None


class BulkArchiveRequest(BaseModel):
    guest_ids: list[UUID]
    reason: str | None = None


class BulkArchiveResponse(BaseModel):
    archived: int


def get_archive_write_model() -> ArchiveWriteModel:
    return SqlArchiveWriteModel()


@router.post(BULK_ARCHIVE_URL, response_model=BulkArchiveResponse)
async def bulk_archive(
    request: BulkArchiveRequest,
    write_model: ArchiveWriteModel = Depends(get_archive_write_model),
) -> BulkArchiveResponse:
    archived = await write_model.bulk_archive(guest_ids=request.guest_ids, reason=request.reason)
    return BulkArchiveResponse(archived=archived)


@router.post(ARCHIVE_GUEST_URL, response_model=GuestResponse)
async def archive_guest(
    guest_id: UUID,
    request: ArchiveRequest | None = None,
    write_model: ArchiveWriteModel = Depends(get_archive_write_model),
) -> GuestResponse:
    guest = await write_model.archive(guest_id=guest_id, reason=request.reason if request else None)
    return GuestResponse.from_dto(guest)


@router.post(RESTORE_GUEST_URL, response_model=GuestResponse)
async def restore_guest(
    guest_id: UUID,
    write_model: ArchiveWriteModel = Depends(get_archive_write_model),
) -> GuestResponse:
    guest = await write_model.restore(guest_id=guest_id)
    return GuestResponse.from_dto(guest)
