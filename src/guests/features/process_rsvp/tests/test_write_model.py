"""Tests for SqlRSVPWriteModel."""

import logging
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from src.config.database import async_session_manager
from src.events import LifecycleEventType
from src.exceptions import GuestNotFoundError, InvalidRSVPStatusError
from src.guests.dtos import (
    DECLINED_ARCHIVE_REASON,
    ChangeMethod,
    ContactUpdateDTO,
    GuestStatus,
    NewGuestDTO,
    RSVPSubmissionDTO,
)
from src.guests.features.process_rsvp.write_model import (
    CONFIRMED_MESSAGE,
    DECLINED_MESSAGE,
    SqlRSVPWriteModel,
)
from src.guests.repository.orm_models import Guest, GuestCommunication, RSVPHistory
from src.guests.repository.read_models import SqlGuestReadModel


class FailingAfterCompanionsWriteModel(SqlRSVPWriteModel):
    """Blows up right after companion guests have been inserted."""

    async def _archive_declined_guest(self, session, guest, archived_at):
        raise RuntimeError("forced failure")


class BrokenHistoryWriteModel(SqlRSVPWriteModel):
    """Writes a history row the store rejects."""

    async def _log_history(self, session, submission):
        entry = RSVPHistory(
            guest_id=submission.guest_id,
            new_status=GuestStatus(submission.rsvp_status),
            change_method=None,
        )
        await self._record_audit_entry(session, entry, "broken history")


async def create_guest(**kwargs) -> Guest:
    kwargs.setdefault("email", "g1@guest.example")
    kwargs.setdefault("first_name", "Grace")
    kwargs.setdefault("last_name", "Hopper")
    async with async_session_manager() as session:
        guest = Guest(**kwargs)
        session.add(guest)
    return guest


async def count_rows(model, **filters) -> int:
    async with async_session_manager() as session:
        stmt = select(func.count()).select_from(model).filter_by(**filters)
        return (await session.execute(stmt)).scalar_one()


async def history_for(guest_id) -> list[RSVPHistory]:
    async with async_session_manager() as session:
        result = await session.execute(select(RSVPHistory).where(RSVPHistory.guest_id == guest_id))
        return list(result.scalars().all())


@pytest.fixture
def write_model(event_bus):
    return SqlRSVPWriteModel(event_bus=event_bus)


async def test_confirm_rsvp(write_model, recorded_events):
    guest = await create_guest()

    result = await write_model.process_rsvp(
        RSVPSubmissionDTO(
            guest_id=guest.uuid,
            rsvp_status=GuestStatus.CONFIRMED,
            dietary_needs=["vegetarian"],
        )
    )

    assert result.status == GuestStatus.CONFIRMED
    assert result.added_guests == 0
    assert not result.archived
    assert result.message == CONFIRMED_MESSAGE

    stored = await SqlGuestReadModel().get_guest(guest.uuid)
    assert stored.rsvp_status == GuestStatus.CONFIRMED
    assert stored.dietary_needs == ["vegetarian"]
    assert stored.rsvp_responded_at is not None

    history = await history_for(guest.uuid)
    assert len(history) == 1
    assert history[0].new_status == GuestStatus.CONFIRMED
    assert history[0].change_method == ChangeMethod.ONLINE_FORM.value
    assert await count_rows(GuestCommunication, guest_id=guest.uuid) == 1

    assert recorded_events[-1].event_type == LifecycleEventType.RSVP
    assert recorded_events[-1].data == {
        "guest_id": str(guest.uuid),
        "status": "confirmed",
        "added_guests": 0,
        "archived": False,
    }


async def test_decline_archives_guest(write_model, recorded_events):
    guest = await create_guest()
    read_model = SqlGuestReadModel()

    result = await write_model.process_rsvp(
        RSVPSubmissionDTO(guest_id=guest.uuid, rsvp_status=GuestStatus.DECLINED)
    )

    assert result.archived
    assert result.message == DECLINED_MESSAGE
    stored = await read_model.get_guest(guest.uuid)
    assert stored.is_archived
    assert stored.archive_reason == DECLINED_ARCHIVE_REASON
    assert stored.archived_at is not None
    assert stored.rsvp_responded_at is not None

    assert guest.uuid not in [g.id for g in await read_model.list_guests()]
    assert guest.uuid in [g.id for g in await read_model.list_guests(include_archived=True)]
    assert recorded_events[-1].data["archived"] is True


async def test_decline_clears_plus_one(write_model):
    guest = await create_guest(plus_one_name="Sam", plus_one_email="sam@guest.example")

    await write_model.process_rsvp(
        RSVPSubmissionDTO(
            guest_id=guest.uuid,
            rsvp_status=GuestStatus.DECLINED,
            plus_one_name="Sam",
        )
    )

    stored = await SqlGuestReadModel().get_guest(guest.uuid)
    assert stored.plus_one_name is None
    assert stored.plus_one_email is None


async def test_confirmed_guest_can_decline_later(write_model):
    guest = await create_guest()
    read_model = SqlGuestReadModel()
    await write_model.process_rsvp(
        RSVPSubmissionDTO(
            guest_id=guest.uuid,
            rsvp_status=GuestStatus.CONFIRMED,
            plus_one_name="Sam",
            plus_one_email="sam@guest.example",
        )
    )
    confirmed = await read_model.get_guest(guest.uuid)
    assert confirmed.plus_one_name == "Sam"

    await write_model.process_rsvp(
        RSVPSubmissionDTO(guest_id=guest.uuid, rsvp_status=GuestStatus.DECLINED)
    )

    declined = await read_model.get_guest(guest.uuid)
    assert declined.rsvp_status == GuestStatus.DECLINED
    assert declined.is_archived
    assert declined.archive_reason == DECLINED_ARCHIVE_REASON
    assert declined.plus_one_name is None
    assert declined.plus_one_email is None
    assert declined.rsvp_responded_at > confirmed.rsvp_responded_at

    history = sorted(await history_for(guest.uuid), key=lambda entry: entry.created_at)
    assert [entry.new_status for entry in history] == [
        GuestStatus.CONFIRMED,
        GuestStatus.DECLINED,
    ]


async def test_companion_guests_skip_incomplete_entries(write_model):
    guest = await create_guest()

    result = await write_model.process_rsvp(
        RSVPSubmissionDTO(
            guest_id=guest.uuid,
            rsvp_status=GuestStatus.CONFIRMED,
            new_guests=[
                NewGuestDTO(
                    first_name="Jane", last_name="Doe", email="jane@x.com", relationship="spouse"
                ),
                NewGuestDTO(first_name="", last_name="X", email="y@x.com", relationship="friend"),
            ],
        )
    )

    assert result.added_guests == 1
    assert await count_rows(Guest) == 2
    async with async_session_manager() as session:
        companion = (
            await session.execute(select(Guest).where(Guest.email == "jane@x.com"))
        ).scalar_one()
    assert companion.rsvp_status == GuestStatus.CONFIRMED
    assert companion.rsvp_responded_at is not None
    assert companion.contact_details == {
        "relationship": "spouse",
        "added_by_guest": str(guest.uuid),
    }


async def test_contact_updates_are_merged(write_model):
    guest = await create_guest(
        phone="+1 555 0100",
        contact_details={"address": "1 Old Street", "relationship": "friend"},
    )

    await write_model.process_rsvp(
        RSVPSubmissionDTO(
            guest_id=guest.uuid,
            rsvp_status=GuestStatus.CONFIRMED,
            contact_updates=ContactUpdateDTO(emergency_contact="Mum, +1 555 0199"),
        )
    )

    stored = await SqlGuestReadModel().get_guest(guest.uuid)
    assert stored.phone == "+1 555 0100"
    assert stored.contact_details == {
        "address": "1 Old Street",
        "relationship": "friend",
        "emergency_contact": "Mum, +1 555 0199",
    }


async def test_pending_is_not_a_valid_response(write_model, recorded_events):
    guest = await create_guest()

    with pytest.raises(InvalidRSVPStatusError):
        await write_model.process_rsvp(
            RSVPSubmissionDTO(guest_id=guest.uuid, rsvp_status=GuestStatus.PENDING)
        )

    stored = await SqlGuestReadModel().get_guest(guest.uuid)
    assert stored.rsvp_status == GuestStatus.PENDING
    assert stored.rsvp_responded_at is None
    assert recorded_events == []


@pytest.mark.parametrize("archived", [True, False])
async def test_missing_or_archived_guest_is_not_found(write_model, archived):
    guest_id = uuid4()
    if archived:
        guest_id = (await create_guest(is_archived=True)).uuid

    with pytest.raises(GuestNotFoundError):
        await write_model.process_rsvp(
            RSVPSubmissionDTO(guest_id=guest_id, rsvp_status=GuestStatus.CONFIRMED)
        )


async def test_failure_after_companions_leaves_no_partial_state(event_bus, recorded_events):
    guest = await create_guest()
    write_model = FailingAfterCompanionsWriteModel(event_bus=event_bus)

    with pytest.raises(RuntimeError, match="forced failure"):
        await write_model.process_rsvp(
            RSVPSubmissionDTO(
                guest_id=guest.uuid,
                rsvp_status=GuestStatus.DECLINED,
                dietary_needs=["vegan"],
                contact_updates=ContactUpdateDTO(phone="+1 555 0111"),
                new_guests=[NewGuestDTO(first_name="Jane", last_name="Doe", email="jane@x.com")],
            )
        )

    stored = await SqlGuestReadModel().get_guest(guest.uuid)
    assert stored.rsvp_status == GuestStatus.PENDING
    assert stored.rsvp_responded_at is None
    assert stored.dietary_needs == []
    assert stored.phone is None
    assert not stored.is_archived
    assert await count_rows(Guest) == 1
    assert await count_rows(RSVPHistory) == 0
    assert await count_rows(GuestCommunication) == 0
    assert recorded_events == []


async def test_audit_failure_does_not_undo_rsvp(event_bus, caplog):
    guest = await create_guest()
    write_model = BrokenHistoryWriteModel(event_bus=event_bus)

    with caplog.at_level(logging.WARNING):
        result = await write_model.process_rsvp(
            RSVPSubmissionDTO(guest_id=guest.uuid, rsvp_status=GuestStatus.CONFIRMED)
        )

    assert result.status == GuestStatus.CONFIRMED
    stored = await SqlGuestReadModel().get_guest(guest.uuid)
    assert stored.rsvp_status == GuestStatus.CONFIRMED
    assert await count_rows(RSVPHistory) == 0
    assert await count_rows(GuestCommunication, guest_id=guest.uuid) == 1
    assert "Could not record broken history" in caplog.text


@pytest.mark.parametrize("status", [GuestStatus.CONFIRMED, GuestStatus.DECLINED])
async def test_responded_at_set_for_every_response(write_model, status):
    guest = await create_guest()
    before = await SqlGuestReadModel().get_guest(guest.uuid)
    assert before.rsvp_status == GuestStatus.PENDING
    assert before.rsvp_responded_at is None

    await write_model.process_rsvp(RSVPSubmissionDTO(guest_id=guest.uuid, rsvp_status=status))

    after = await SqlGuestReadModel().get_guest(guest.uuid)
    assert after.rsvp_status == status
    assert after.rsvp_responded_at is not None
