from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr

from src.accounts.dependencies import get_current_identity
from src.accounts.dtos import Identity
from src.events import get_event_bus
from src.exceptions import InvalidStateError, NotFoundError, StoreFailure
from src.guests.dtos import (
    ChangeMethod,
    ContactUpdateDTO,
    GuestStatus,
    NewGuestDTO,
    RSVPSubmissionDTO,
)
from src.guests.features.list_guests.router import get_guest_read_model
from src.guests.features.process_rsvp.write_model import RSVPWriteModel, SqlRSVPWriteModel
from src.guests.repository.read_models import GuestReadModel
from src.guests.urls import PROCESS_RSVP_URL

router = APIRouter()


class ContactUpdateSubmit(BaseModel):
    phone: str | None = None
    address: str | None = None
    emergency_contact: str | None = None


class NewGuestSubmit(BaseModel):
    """An additional attendee. Entries with a blank name or email are ignored."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    relationship: str = ""


class RSVPSubmit(BaseModel):
    rsvp_status: GuestStatus
    plus_one_name: str | None = None
    plus_one_email: EmailStr | None = None
    dietary_needs: list[str] = []
    allergies: list[str] = []
    special_requests: str | None = None
    contact_updates: ContactUpdateSubmit | None = None
    new_guests: list[NewGuestSubmit] = []


class RSVPResponse(BaseModel):
    guest_id: UUID
    status: GuestStatus
    added_guests: int
    archived: bool
    message: str


def get_rsvp_write_model() -> RSVPWriteModel:
    """Dependency to get RSVP write model instance."""
    return SqlRSVPWriteModel(event_bus=get_event_bus())


@router.post(PROCESS_RSVP_URL, response_model=RSVPResponse)
async def submit_rsvp(
    guest_id: UUID,
    rsvp_data: RSVPSubmit,
    identity: Identity = Depends(get_current_identity),
    read_model: GuestReadModel = Depends(get_guest_read_model),
    write_model: RSVPWriteModel = Depends(get_rsvp_write_model),
) -> RSVPResponse:
    """
    Submit an RSVP for a guest.
    Guests answer for their own linked record, administrators for anyone.
    Declining archives the guest.
    """
    if not identity.is_admin:
        try:
            guest = await read_model.get_guest(guest_id)
        except StoreFailure as e:
            raise HTTPException(status_code=503, detail=str(e))
        if guest is None or guest.user_id != identity.account_id:
            raise HTTPException(status_code=403, detail="You can only respond for your own invitation")

    contact_updates = None
    if rsvp_data.contact_updates:
        contact_updates = ContactUpdateDTO(
            phone=rsvp_data.contact_updates.phone,
            address=rsvp_data.contact_updates.address,
            emergency_contact=rsvp_data.contact_updates.emergency_contact,
        )

    submission = RSVPSubmissionDTO(
        guest_id=guest_id,
        rsvp_status=rsvp_data.rsvp_status,
        plus_one_name=rsvp_data.plus_one_name,
        plus_one_email=rsvp_data.plus_one_email,
        dietary_needs=rsvp_data.dietary_needs,
        allergies=rsvp_data.allergies,
        special_requests=rsvp_data.special_requests,
        contact_updates=contact_updates,
        new_guests=[
            NewGuestDTO(
                first_name=new_guest.first_name,
                last_name=new_guest.last_name,
                email=new_guest.email,
                relationship=new_guest.relationship,
            )
            for new_guest in rsvp_data.new_guests
        ],
        change_method=ChangeMethod.ADMIN if identity.is_admin else ChangeMethod.ONLINE_FORM,
    )

    try:
        result = await write_model.process_rsvp(submission)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreFailure as e:
        raise HTTPException(status_code=503, detail=str(e))

    return RSVPResponse(
        guest_id=result.guest_id,
        status=result.status,
        added_guests=result.added_guests,
        archived=result.archived,
        message=result.message,
    )
