"""Write model for processing RSVP submissions.

Applies the guest's response and every cascading effect in one transaction:
RSVP fields, contact merge, companion guests, archive-on-decline. The history
and communication entries are audit writes: each runs in its own savepoint
and a failure there is logged without undoing the RSVP itself.
Returns DTOs instead of ORM models.
"""

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from functools import partial

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.events import EventBus, LifecycleEventType
from src.exceptions import GuestNotFoundError, InvalidRSVPStatusError
from src.guests.dtos import (
    DECLINED_ARCHIVE_REASON,
    ChangeMethod,
    CommunicationDirection,
    ContactUpdateDTO,
    GuestStatus,
    NewGuestDTO,
    RSVPResultDTO,
    RSVPSubmissionDTO,
)
from src.guests.repository.orm_models import Guest, GuestCommunication, RSVPHistory
from src.guests.repository.write_models import archive_guest_record

logger = logging.getLogger(__name__)

CONFIRMED_MESSAGE = "Thank you for confirming your attendance!"
DECLINED_MESSAGE = "We're sorry you can't make it. Your response has been recorded."


class RSVPWriteModel(ABC):
    @abstractmethod
    async def process_rsvp(self, submission: RSVPSubmissionDTO) -> RSVPResultDTO:
        """
        Apply an RSVP submission for a guest.
        Returns the number of companion guests created.
        """
        raise NotImplementedError


class SqlRSVPWriteModel(RSVPWriteModel):
    """Write operations for RSVP. Returns DTOs, never ORM models."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._session_overwrite = session_overwrite
        self._event_bus = event_bus

    async def _get_active_guest(self, session: AsyncSession, guest_id) -> Guest:
        guest = await session.get(Guest, guest_id)
        if guest is None or guest.is_archived:
            raise GuestNotFoundError(guest_id)
        return guest

    def _apply_response(
        self, guest: Guest, submission: RSVPSubmissionDTO, responded_at: datetime
    ) -> None:
        """Update the RSVP fields of the guest."""
        attending = submission.rsvp_status == GuestStatus.CONFIRMED
        guest.rsvp_status = submission.rsvp_status
        guest.rsvp_responded_at = responded_at
        # a plus-one only makes sense for a confirmed guest
        guest.plus_one_name = (submission.plus_one_name or None) if attending else None
        guest.plus_one_email = (submission.plus_one_email or None) if attending else None
        guest.dietary_needs = list(submission.dietary_needs or [])
        guest.allergies = list(submission.allergies or [])
        guest.special_requests = submission.special_requests or None

    def _merge_contact_updates(self, guest: Guest, updates: ContactUpdateDTO) -> None:
        if updates.phone is not None:
            guest.phone = updates.phone

        # assign a new dict, in-place changes to a JSON column are not tracked
        contact_details = dict(guest.contact_details or {})
        if updates.address is not None:
            contact_details["address"] = updates.address
        if updates.emergency_contact is not None:
            contact_details["emergency_contact"] = updates.emergency_contact
        guest.contact_details = contact_details

    async def _add_companion_guests(
        self,
        session: AsyncSession,
        guest: Guest,
        new_guests: list[NewGuestDTO],
        responded_at: datetime,
    ) -> int:
        """Insert the additional attendees. Incomplete entries are dropped."""
        companions = [
            Guest(
                first_name=new_guest.first_name.strip(),
                last_name=new_guest.last_name.strip(),
                email=new_guest.email.strip(),
                rsvp_status=GuestStatus.CONFIRMED,
                rsvp_responded_at=responded_at,
                contact_details={
                    "relationship": new_guest.relationship,
                    "added_by_guest": str(guest.uuid),
                },
            )
            for new_guest in new_guests
            if new_guest.is_complete
        ]
        if len(companions) < len(new_guests):
            logger.debug(
                "Dropped %d incomplete companion entries for guest %s",
                len(new_guests) - len(companions),
                guest.uuid,
            )
        session.add_all(companions)
        await session.flush()
        return len(companions)

    async def _archive_declined_guest(
        self, session: AsyncSession, guest: Guest, archived_at: datetime
    ) -> None:
        archive_guest_record(guest, DECLINED_ARCHIVE_REASON, archived_at)
        await session.flush()

    async def _record_audit_entry(self, session: AsyncSession, entry, description: str) -> None:
        """Best-effort append of an audit row, isolated in a savepoint."""
        try:
            async with session.begin_nested():
                session.add(entry)
        except SQLAlchemyError:
            logger.warning("Could not record %s", description, exc_info=True)

    async def _log_history(self, session: AsyncSession, submission: RSVPSubmissionDTO) -> None:
        entry = RSVPHistory(
            guest_id=submission.guest_id,
            new_status=GuestStatus(submission.rsvp_status),
            change_method=ChangeMethod(submission.change_method).value,
            change_reason="RSVP submission",
        )
        await self._record_audit_entry(
            session, entry, f"RSVP history for guest {submission.guest_id}"
        )

    async def _log_communication(
        self, session: AsyncSession, submission: RSVPSubmissionDTO, added_guests: int
    ) -> None:
        attending = submission.rsvp_status == GuestStatus.CONFIRMED
        entry = GuestCommunication(
            guest_id=submission.guest_id,
            communication_type="email",
            subject=f"RSVP {'Confirmation' if attending else 'Decline'} Received",
            content={
                "status": GuestStatus(submission.rsvp_status).value,
                "plus_one": submission.plus_one_name,
                "dietary_needs": list(submission.dietary_needs or []),
                "allergies": list(submission.allergies or []),
                "added_guests": added_guests,
            },
            direction=CommunicationDirection.INBOUND,
            status="received",
        )
        await self._record_audit_entry(
            session, entry, f"RSVP communication for guest {submission.guest_id}"
        )

    async def process_rsvp(self, submission: RSVPSubmissionDTO) -> RSVPResultDTO:
        """
        Apply an RSVP submission for a guest.
        Declining archives the guest; pending is never a valid response.
        """
        status = GuestStatus(submission.rsvp_status)
        if status == GuestStatus.PENDING:
            raise InvalidRSVPStatusError(status.value)

        responded_at = datetime.now(UTC)
        async with self.async_session_manager(session_overwrite=self._session_overwrite) as session:
            # 1. RSVP fields
            guest = await self._get_active_guest(session, submission.guest_id)
            self._apply_response(guest, submission, responded_at)

            # 2. Contact details are merged, not replaced
            if submission.contact_updates:
                self._merge_contact_updates(guest, submission.contact_updates)

            # 3. Companion guests
            added_guests = await self._add_companion_guests(
                session, guest, submission.new_guests, responded_at
            )

            # 4. Declining always archives
            archived = False
            if status == GuestStatus.DECLINED:
                await self._archive_declined_guest(session, guest, responded_at)
                archived = True

            # 5. and 6. Audit trail
            await self._log_history(session, submission)
            await self._log_communication(session, submission, added_guests)

        logger.info(
            "Processed RSVP for guest %s: %s (%d companions added)",
            submission.guest_id,
            status.value,
            added_guests,
        )
        if self._event_bus:
            self._event_bus.emit(
                LifecycleEventType.RSVP,
                {
                    "guest_id": str(submission.guest_id),
                    "status": status.value,
                    "added_guests": added_guests,
                    "archived": archived,
                },
            )

        return RSVPResultDTO(
            guest_id=submission.guest_id,
            status=status,
            added_guests=added_guests,
            archived=archived,
            message=CONFIRMED_MESSAGE if status == GuestStatus.CONFIRMED else DECLINED_MESSAGE,
        )
