from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from src.accounts.dependencies import require_admin
from src.accounts.dtos import Identity
from src.exceptions import StoreFailure
from src.guests.features.export_guests.csv_export import export_to_csv
from src.guests.features.list_guests.router import get_guest_read_model
from src.guests.features.search_guests.search import search_guests
from src.guests.repository.read_models import GuestReadModel
from src.guests.urls import EXPORT_GUESTS_URL

router = APIRouter()

EXPORT_FILENAME = "guest-list.csv"


@router.get(EXPORT_GUESTS_URL, response_class=Response)
async def export_guests(
    include_archived: bool = False,
    search: str | None = None,
    read_model: GuestReadModel = Depends(get_guest_read_model),
    _: Identity = Depends(require_admin),
) -> Response:
    """Download the guest list as CSV."""
    try:
        guests = await read_model.list_guests(include_archived=include_archived)
    except StoreFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    content = export_to_csv(search_guests(guests, search))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
