from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.accounts.dependencies import get_optional_identity
from src.accounts.dtos import Identity
from src.events import get_event_bus
from src.exceptions import (
    CapacityExceededError,
    InvalidStateError,
    NotFoundError,
    StoreFailure,
    UnauthenticatedError,
)
from src.transport.dtos import BookingMetadataDTO
from src.transport.repository.write_models import BookingWriteModel, SqlBookingWriteModel
from src.transport.schemas import BookingResponse
from src.transport.urls import BOOK_SEATS_URL

router = APIRouter()


class BookingSubmit(BaseModel):
    passenger_names: list[str]
    special_requirements: str | None = None
    pickup_location: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None


def get_booking_write_model() -> BookingWriteModel:
    """Dependency to get booking write model instance."""
    return SqlBookingWriteModel(event_bus=get_event_bus())


@router.post(BOOK_SEATS_URL, response_model=BookingResponse, status_code=201)
async def book_seats(
    schedule_id: UUID,
    booking_data: BookingSubmit,
    identity: Identity | None = Depends(get_optional_identity),
    write_model: BookingWriteModel = Depends(get_booking_write_model),
) -> BookingResponse:
    """Book the first free seat on a bus for the listed passengers."""
    metadata = BookingMetadataDTO(
        special_requirements=booking_data.special_requirements,
        pickup_location=booking_data.pickup_location,
        emergency_contact_name=booking_data.emergency_contact_name,
        emergency_contact_phone=booking_data.emergency_contact_phone,
    )
    try:
        booking = await write_model.book_seats(
            schedule_id=schedule_id,
            identity=identity,
            passenger_names=booking_data.passenger_names,
            metadata=metadata,
        )
    except UnauthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidStateError, CapacityExceededError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    return BookingResponse.from_dto(booking)
