from fastapi import APIRouter, Depends, HTTPException

from src.accounts.dependencies import require_admin
from src.accounts.dtos import Identity
from src.exceptions import StoreFailure
from src.guests.features.list_guests.router import get_guest_read_model
from src.guests.repository.read_models import GuestReadModel
from src.guests.schemas import GuestStatsResponse
from src.guests.urls import GUEST_STATS_URL

router = APIRouter()


@router.get(GUEST_STATS_URL, response_model=GuestStatsResponse)
async def get_guest_stats(
    read_model: GuestReadModel = Depends(get_guest_read_model),
    _: Identity = Depends(require_admin),
) -> GuestStatsResponse:
    """Guest list statistics. Only the archived count includes archived guests."""
    try:
        stats = await read_model.get_guest_stats()
    except StoreFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    return GuestStatsResponse.from_dto(stats)
