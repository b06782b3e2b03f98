from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from src.accounts.dependencies import get_optional_identity
from src.accounts.dtos import Identity
from src.exceptions import (
    InvalidStateError,
    NotFoundError,
    StoreFailure,
    UnauthenticatedError,
    UnauthorizedError,
)
from src.transport.features.book_seats.router import get_booking_write_model
from src.transport.repository.write_models import BookingWriteModel
from src.transport.schemas import BookingResponse
from src.transport.urls import CANCEL_BOOKING_URL

router = APIRouter()


@router.post(CANCEL_BOOKING_URL, response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    identity: Identity | None = Depends(get_optional_identity),
    write_model: BookingWriteModel = Depends(get_booking_write_model),
) -> BookingResponse:
    try:
        booking = await write_model.cancel_booking(booking_id, identity)
    except UnauthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except UnauthorizedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    return BookingResponse.from_dto(booking)
