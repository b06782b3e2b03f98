from uuid import UUID, uuid4

import pytest

from src.accounts.dependencies import get_optional_identity
from src.accounts.dtos import Identity
from src.exceptions import GuestNotFoundError, InvalidRSVPStatusError
from src.guests.dtos import (
    ChangeMethod,
    GuestDTO,
    GuestStatus,
    RSVPResultDTO,
    RSVPSubmissionDTO,
)
from src.guests.features.list_guests.router import get_guest_read_model
from src.guests.features.process_rsvp.router import get_rsvp_write_model
from src.guests.features.process_rsvp.write_model import (
    CONFIRMED_MESSAGE,
    DECLINED_MESSAGE,
    RSVPWriteModel,
)
from src.guests.repository.read_models import GuestReadModel
from src.guests.urls import PROCESS_RSVP_URL


class InMemoryGuestReadModel(GuestReadModel):
    def __init__(self, guests: dict[UUID, GuestDTO]):
        self._guests = guests

    async def list_guests(self, include_archived=False, linked_only=False, status=None):
        return list(self._guests.values())

    async def get_guest(self, guest_id: UUID) -> GuestDTO | None:
        return self._guests.get(guest_id)

    async def get_guest_by_account(self, account_id: UUID) -> GuestDTO | None:
        return None


class InMemoryRSVPWriteModel(RSVPWriteModel):
    """In-memory write model for testing."""

    def __init__(self, guests: dict[UUID, GuestDTO]):
        self._guests = guests
        self.submissions: list[RSVPSubmissionDTO] = []

    async def process_rsvp(self, submission: RSVPSubmissionDTO) -> RSVPResultDTO:
        status = GuestStatus(submission.rsvp_status)
        if status == GuestStatus.PENDING:
            raise InvalidRSVPStatusError(status.value)
        guest = self._guests.get(submission.guest_id)
        if guest is None or guest.is_archived:
            raise GuestNotFoundError(submission.guest_id)

        self.submissions.append(submission)
        declined = status == GuestStatus.DECLINED
        return RSVPResultDTO(
            guest_id=submission.guest_id,
            status=status,
            added_guests=sum(1 for g in submission.new_guests if g.is_complete),
            archived=declined,
            message=DECLINED_MESSAGE if declined else CONFIRMED_MESSAGE,
        )


@pytest.fixture
def account_id():
    return uuid4()


@pytest.fixture
def guest(account_id):
    return GuestDTO(id=uuid4(), email="ana@guest.example", user_id=account_id)


@pytest.fixture
def guests(guest):
    return {guest.id: guest}


@pytest.fixture
def write_model(guests):
    return InMemoryRSVPWriteModel(guests)


@pytest.fixture
def overrides(guests, write_model, account_id):
    return {
        get_guest_read_model: lambda: InMemoryGuestReadModel(guests),
        get_rsvp_write_model: lambda: write_model,
        get_optional_identity: lambda: Identity(account_id=account_id),
    }


@pytest.mark.asyncio
async def test_submit_rsvp_confirmed(client_factory, overrides, write_model, guest):
    rsvp_data = {
        "rsvp_status": "confirmed",
        "plus_one_name": "Luis",
        "plus_one_email": "luis@guest.example",
        "dietary_needs": ["vegetarian"],
        "contact_updates": {"phone": "+34 600"},
        "new_guests": [
            {"first_name": "Jane", "last_name": "Doe", "email": "jane@x.com", "relationship": "spouse"},
            {"first_name": "", "last_name": "X", "email": "y@x.com", "relationship": "friend"},
        ],
    }

    async with client_factory(overrides) as client:
        response = await client.post(PROCESS_RSVP_URL.format(guest_id=guest.id), json=rsvp_data)

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == GuestStatus.CONFIRMED.value
    assert data["added_guests"] == 1
    assert data["archived"] is False
    assert "Thank you for confirming" in data["message"]

    submission = write_model.submissions[0]
    assert submission.change_method == ChangeMethod.ONLINE_FORM
    assert submission.dietary_needs == ["vegetarian"]
    assert submission.contact_updates.phone == "+34 600"
    assert len(submission.new_guests) == 2


@pytest.mark.asyncio
async def test_submit_rsvp_declined(client_factory, overrides, guest):
    async with client_factory(overrides) as client:
        response = await client.post(
            PROCESS_RSVP_URL.format(guest_id=guest.id), json={"rsvp_status": "declined"}
        )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == GuestStatus.DECLINED.value
    assert data["archived"] is True
    assert "We're sorry you can't make it" in data["message"]


@pytest.mark.asyncio
async def test_submit_rsvp_pending_is_rejected(client_factory, overrides, guest):
    async with client_factory(overrides) as client:
        response = await client.post(
            PROCESS_RSVP_URL.format(guest_id=guest.id), json={"rsvp_status": "pending"}
        )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_submit_rsvp_for_another_guest_is_forbidden(client_factory, overrides, guests):
    other = GuestDTO(id=uuid4(), email="bob@guest.example", user_id=uuid4())
    guests[other.id] = other

    async with client_factory(overrides) as client:
        response = await client.post(
            PROCESS_RSVP_URL.format(guest_id=other.id), json={"rsvp_status": "confirmed"}
        )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_submits_for_any_guest(client_factory, overrides, write_model, guests):
    other = GuestDTO(id=uuid4(), email="bob@guest.example")
    guests[other.id] = other
    overrides[get_optional_identity] = lambda: Identity(account_id=None, is_admin=True)

    async with client_factory(overrides) as client:
        response = await client.post(
            PROCESS_RSVP_URL.format(guest_id=other.id), json={"rsvp_status": "confirmed"}
        )

    assert response.status_code == 200
    assert write_model.submissions[0].change_method == ChangeMethod.ADMIN


@pytest.mark.asyncio
async def test_admin_submits_for_unknown_guest(client_factory, overrides):
    overrides[get_optional_identity] = lambda: Identity(account_id=None, is_admin=True)

    async with client_factory(overrides) as client:
        response = await client.post(
            PROCESS_RSVP_URL.format(guest_id=uuid4()), json={"rsvp_status": "confirmed"}
        )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_submit_rsvp_requires_authentication(client_factory, overrides, guest):
    del overrides[get_optional_identity]

    async with client_factory(overrides) as client:
        response = await client.post(
            PROCESS_RSVP_URL.format(guest_id=guest.id), json={"rsvp_status": "confirmed"}
        )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_submit_rsvp_invalid_plus_one_email(client_factory, overrides, guest):
    async with client_factory(overrides) as client:
        response = await client.post(
            PROCESS_RSVP_URL.format(guest_id=guest.id),
            json={"rsvp_status": "confirmed", "plus_one_email": "not-an-email"},
        )

    assert response.status_code == 422
