from uuid import UUID, uuid4

import pytest

from src.accounts.dependencies import get_optional_identity
from src.accounts.dtos import Identity
from src.exceptions import StoreFailure
from src.guests.dtos import GuestDTO, GuestStatus
from src.guests.features.list_guests.router import get_guest_read_model
from src.guests.repository.read_models import GuestReadModel
from src.guests.urls import GUEST_URL, GUESTS_URL, MY_GUEST_URL

ADMIN = Identity(account_id=None, is_admin=True)


class InMemoryGuestReadModel(GuestReadModel):
    """In-memory read model for testing."""

    def __init__(self, guests: list[GuestDTO]):
        self._guests = guests

    async def list_guests(
        self,
        include_archived: bool = False,
        linked_only: bool = False,
        status: GuestStatus | None = None,
    ) -> list[GuestDTO]:
        return [
            guest
            for guest in self._guests
            if (include_archived or not guest.is_archived)
            and (not linked_only or guest.is_linked)
            and (status is None or guest.rsvp_status == status)
        ]

    async def get_guest(self, guest_id: UUID) -> GuestDTO | None:
        return next((guest for guest in self._guests if guest.id == guest_id), None)

    async def get_guest_by_account(self, account_id: UUID) -> GuestDTO | None:
        return next((guest for guest in self._guests if guest.user_id == account_id), None)


@pytest.fixture
def account_id():
    return uuid4()


@pytest.fixture
def read_model(account_id):
    return InMemoryGuestReadModel(
        [
            GuestDTO(id=uuid4(), email="ana@guest.example", first_name="Ana", user_id=account_id),
            GuestDTO(
                id=uuid4(),
                email="bob@guest.example",
                first_name="Bob",
                rsvp_status=GuestStatus.CONFIRMED,
            ),
            GuestDTO(id=uuid4(), email="old@guest.example", is_archived=True),
        ]
    )


@pytest.mark.asyncio
async def test_list_guests_hides_archived(client_factory, read_model):
    overrides = {
        get_guest_read_model: lambda: read_model,
        get_optional_identity: lambda: ADMIN,
    }

    async with client_factory(overrides) as client:
        response = await client.get(GUESTS_URL)

    assert response.status_code == 200
    assert [g["email"] for g in response.json()] == ["ana@guest.example", "bob@guest.example"]


@pytest.mark.asyncio
async def test_list_guests_with_filters_and_search(client_factory, read_model):
    overrides = {
        get_guest_read_model: lambda: read_model,
        get_optional_identity: lambda: ADMIN,
    }

    async with client_factory(overrides) as client:
        archived = await client.get(GUESTS_URL, params={"include_archived": True, "search": "old"})
        confirmed = await client.get(GUESTS_URL, params={"status": "confirmed"})
        linked = await client.get(GUESTS_URL, params={"linked_only": True})

    assert [g["email"] for g in archived.json()] == ["old@guest.example"]
    assert [g["email"] for g in confirmed.json()] == ["bob@guest.example"]
    assert [g["email"] for g in linked.json()] == ["ana@guest.example"]


@pytest.mark.asyncio
async def test_list_guests_requires_admin(client_factory, read_model, account_id):
    async with client_factory({get_guest_read_model: lambda: read_model}) as client:
        anonymous = await client.get(GUESTS_URL)

    overrides = {
        get_guest_read_model: lambda: read_model,
        get_optional_identity: lambda: Identity(account_id=account_id),
    }
    async with client_factory(overrides) as client:
        guest = await client.get(GUESTS_URL)

    assert anonymous.status_code == 401
    assert guest.status_code == 403


@pytest.mark.asyncio
async def test_get_my_guest(client_factory, read_model, account_id):
    overrides = {
        get_guest_read_model: lambda: read_model,
        get_optional_identity: lambda: Identity(account_id=account_id),
    }

    async with client_factory(overrides) as client:
        response = await client.get(MY_GUEST_URL)

    assert response.status_code == 200
    assert response.json()["email"] == "ana@guest.example"


@pytest.mark.asyncio
async def test_get_my_guest_without_record(client_factory, read_model):
    overrides = {
        get_guest_read_model: lambda: read_model,
        get_optional_identity: lambda: Identity(account_id=uuid4()),
    }

    async with client_factory(overrides) as client:
        response = await client.get(MY_GUEST_URL)

    assert response.status_code == 200
    assert response.json() is None


@pytest.mark.asyncio
async def test_get_guest(client_factory, read_model):
    guest = (await read_model.list_guests())[1]
    overrides = {
        get_guest_read_model: lambda: read_model,
        get_optional_identity: lambda: ADMIN,
    }

    async with client_factory(overrides) as client:
        found = await client.get(GUEST_URL.format(guest_id=guest.id))
        missing = await client.get(GUEST_URL.format(guest_id=uuid4()))

    assert found.status_code == 200
    assert found.json()["rsvp_status"] == "confirmed"
    assert missing.status_code == 404


class UnavailableGuestReadModel(InMemoryGuestReadModel):
    """Read model whose store is down."""

    def __init__(self):
        super().__init__([])

    async def list_guests(self, include_archived=False, linked_only=False, status=None):
        raise StoreFailure("connection refused")

    async def get_guest(self, guest_id: UUID) -> GuestDTO | None:
        raise StoreFailure("connection refused")

    async def get_guest_by_account(self, account_id: UUID) -> GuestDTO | None:
        raise StoreFailure("connection refused")


@pytest.mark.asyncio
async def test_store_failure_is_service_unavailable(client_factory):
    overrides = {
        get_guest_read_model: UnavailableGuestReadModel,
        get_optional_identity: lambda: Identity(account_id=uuid4(), is_admin=True),
    }

    async with client_factory(overrides) as client:
        responses = [
            await client.get(GUESTS_URL),
            await client.get(MY_GUEST_URL),
            await client.get(GUEST_URL.format(guest_id=uuid4())),
        ]

    assert [response.status_code for response in responses] == [503, 503, 503]
    assert all(response.json()["detail"] == "connection refused" for response in responses)
