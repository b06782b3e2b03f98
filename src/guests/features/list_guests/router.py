from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from src.accounts.dependencies import get_current_identity, require_admin
from src.accounts.dtos import Identity
from src.exceptions import StoreFailure
from src.guests.dtos import GuestStatus
from src.guests.features.search_guests.search import search_guests
from src.guests.repository.read_models import GuestReadModel, SqlGuestReadModel
from src.guests.schemas import GuestResponse
from src.guests.urls import GUEST_URL, GUESTS_URL, MY_GUEST_URL

router = APIRouter()


def get_guest_read_model() -> GuestReadModel:
    """Dependency to get guest read model instance."""
    return SqlGuestReadModel()


@router.get(GUESTS_URL, response_model=list[GuestResponse])
async def list_guests(
    include_archived: bool = False,
    linked_only: bool = False,
    status: GuestStatus | None = None,
    search: str | None = None,
    read_model: GuestReadModel = Depends(get_guest_read_model),
    _: Identity = Depends(require_admin),
) -> list[GuestResponse]:
    """
    List guests, newest first.
    Archived guests are only returned with include_archived=true.
    """
    try:
        guests = await read_model.list_guests(
            include_archived=include_archived,
            linked_only=linked_only,
            status=status,
        )
    except StoreFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [GuestResponse.from_dto(guest) for guest in search_guests(guests, search)]


@router.get(MY_GUEST_URL, response_model=GuestResponse | None)
async def get_my_guest(
    identity: Identity = Depends(get_current_identity),
    read_model: GuestReadModel = Depends(get_guest_read_model),
) -> GuestResponse | None:
    """Get the guest record linked to the caller's account, if any."""
    if identity.account_id is None:
        return None
    try:
        guest = await read_model.get_guest_by_account(identity.account_id)
    except StoreFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    return GuestResponse.from_dto(guest) if guest else None


@router.get(GUEST_URL, response_model=GuestResponse)
async def get_guest(
    guest_id: UUID,
    read_model: GuestReadModel = Depends(get_guest_read_model),
    _: Identity = Depends(require_admin),
) -> GuestResponse:
    try:
        guest = await read_model.get_guest(guest_id)
    except StoreFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    if not guest:
        raise HTTPException(status_code=404, detail=f"Guest with ID {guest_id} not found")
    return GuestResponse.from_dto(guest)
