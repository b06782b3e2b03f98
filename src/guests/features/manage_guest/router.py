from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.accounts.dependencies import require_admin
from src.accounts.dtos import Identity
from src.events import get_event_bus
from src.exceptions import InvalidStateError, NotFoundError, StoreFailure
from src.guests.repository.write_models import GuestWriteModel, SqlGuestWriteModel
from src.guests.schemas import GuestResponse
from src.guests.urls import (
    ARCHIVE_GUEST_URL,
    BULK_ARCHIVE_URL,
    LINK_GUEST_URL,
    RESTORE_GUEST_URL,
    UNLINK_GUEST_URL,
)

router = APIRouter()


class LinkAccountSubmit(BaseModel):
    account_id: UUID


class ArchiveSubmit(BaseModel):
    reason: str | None = None


class BulkArchiveSubmit(BaseModel):
    guest_ids: list[UUID]
    reason: str | None = None


class BulkArchiveResponse(BaseModel):
    archived: int


def get_guest_write_model() -> GuestWriteModel:
    """Dependency to get guest write model instance."""
    return SqlGuestWriteModel(event_bus=get_event_bus())


def _to_http_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, InvalidStateError):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=503, detail=str(e))


# Registered before the /{guest_id} routes
@router.post(BULK_ARCHIVE_URL, response_model=BulkArchiveResponse)
async def bulk_archive_guests(
    data: BulkArchiveSubmit,
    write_model: GuestWriteModel = Depends(get_guest_write_model),
    _: Identity = Depends(require_admin),
) -> BulkArchiveResponse:
    """Archive several guests at once. An unknown id leaves every guest untouched."""
    try:
        archived = await write_model.bulk_archive_guests(data.guest_ids, data.reason)
    except (NotFoundError, StoreFailure) as e:
        raise _to_http_error(e)
    return BulkArchiveResponse(archived=archived)


@router.post(LINK_GUEST_URL, response_model=GuestResponse)
async def link_guest(
    guest_id: UUID,
    data: LinkAccountSubmit,
    write_model: GuestWriteModel = Depends(get_guest_write_model),
    _: Identity = Depends(require_admin),
) -> GuestResponse:
    try:
        guest = await write_model.link_guest_to_account(guest_id, data.account_id)
    except (NotFoundError, InvalidStateError, StoreFailure) as e:
        raise _to_http_error(e)
    return GuestResponse.from_dto(guest)


@router.post(UNLINK_GUEST_URL, response_model=GuestResponse)
async def unlink_guest(
    guest_id: UUID,
    write_model: GuestWriteModel = Depends(get_guest_write_model),
    _: Identity = Depends(require_admin),
) -> GuestResponse:
    try:
        guest = await write_model.unlink_guest_from_account(guest_id)
    except (NotFoundError, StoreFailure) as e:
        raise _to_http_error(e)
    return GuestResponse.from_dto(guest)


@router.post(ARCHIVE_GUEST_URL, response_model=GuestResponse)
async def archive_guest(
    guest_id: UUID,
    data: ArchiveSubmit | None = None,
    write_model: GuestWriteModel = Depends(get_guest_write_model),
    _: Identity = Depends(require_admin),
) -> GuestResponse:
    try:
        guest = await write_model.archive_guest(guest_id, data.reason if data else None)
    except (NotFoundError, StoreFailure) as e:
        raise _to_http_error(e)
    return GuestResponse.from_dto(guest)


@router.post(RESTORE_GUEST_URL, response_model=GuestResponse)
async def restore_guest(
    guest_id: UUID,
    write_model: GuestWriteModel = Depends(get_guest_write_model),
    _: Identity = Depends(require_admin),
) -> GuestResponse:
    """Bring an archived guest back into the active list."""
    try:
        guest = await write_model.restore_guest(guest_id)
    except (NotFoundError, StoreFailure) as e:
        raise _to_http_error(e)
    return GuestResponse.from_dto(guest)
