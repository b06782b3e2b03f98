"""Guest lifecycle write models: linking, archiving and restoring guests.

Write models return DTOs, never ORM models, and publish a lifecycle event
once their transaction has been committed.
"""

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.events import EventBus, LifecycleEventType
from src.exceptions import AccountAlreadyLinkedError, GuestNotFoundError
from src.guests.dtos import BULK_ARCHIVE_REASON, GuestDTO
from src.guests.repository.orm_models import Guest

logger = logging.getLogger(__name__)

ACTIVE_LINK_INDEX = "uq_guests_active_user_id"


def violates_active_link_index(error: IntegrityError) -> bool:
    """True when the error comes from the one-active-guest-per-account index."""
    message = str(error.orig)
    # postgres names the index, sqlite names the indexed column
    return (
        ACTIVE_LINK_INDEX in message
        or f"UNIQUE constraint failed: {Guest.__tablename__}.user_id" in message
    )


def archive_guest_record(guest: Guest, reason: str | None, archived_at: datetime) -> bool:
    """Mark a guest as archived. Returns False when it already was."""
    if guest.is_archived:
        return False
    guest.is_archived = True
    guest.archived_at = archived_at
    guest.archive_reason = reason
    return True


class GuestWriteModel(ABC):
    """Abstract base class for guest lifecycle write operations."""

    @abstractmethod
    async def link_guest_to_account(self, guest_id: UUID, account_id: UUID) -> GuestDTO:
        """Link a guest to an account, unless another active guest already holds the link."""
        raise NotImplementedError

    @abstractmethod
    async def unlink_guest_from_account(self, guest_id: UUID) -> GuestDTO:
        raise NotImplementedError

    @abstractmethod
    async def archive_guest(self, guest_id: UUID, reason: str | None = None) -> GuestDTO:
        """Archive a guest. Archiving an archived guest is a no-op."""
        raise NotImplementedError

    @abstractmethod
    async def restore_guest(self, guest_id: UUID) -> GuestDTO:
        """Clear the archive fields. The RSVP status is left as it is."""
        raise NotImplementedError

    @abstractmethod
    async def bulk_archive_guests(self, guest_ids: list[UUID], reason: str | None = None) -> int:
        """Archive every guest in one transaction. Unknown ids abort the whole batch."""
        raise NotImplementedError


class SqlGuestWriteModel(GuestWriteModel):
    """SQL implementation of guest lifecycle write operations."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.session_overwrite = session_overwrite
        self.event_bus = event_bus

    def _emit(self, event_type: LifecycleEventType, **data) -> None:
        if self.event_bus:
            self.event_bus.emit(event_type, data)

    async def _get_guest(self, session: AsyncSession, guest_id: UUID) -> Guest:
        guest = await session.get(Guest, guest_id)
        if guest is None:
            raise GuestNotFoundError(guest_id)
        return guest

    async def link_guest_to_account(self, guest_id: UUID, account_id: UUID) -> GuestDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await self._get_guest(session, guest_id)
            guest.user_id = account_id
            try:
                await session.flush()
            except IntegrityError as e:
                if violates_active_link_index(e):
                    raise AccountAlreadyLinkedError(account_id) from e
                raise
            result = GuestDTO.from_guest(guest)

        logger.info("Linked guest %s to account %s", guest_id, account_id)
        self._emit(LifecycleEventType.LINK, guest_id=str(guest_id), account_id=str(account_id))
        return result

    async def unlink_guest_from_account(self, guest_id: UUID) -> GuestDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await self._get_guest(session, guest_id)
            previous_account_id = guest.user_id
            guest.user_id = None
            await session.flush()
            result = GuestDTO.from_guest(guest)

        self._emit(
            LifecycleEventType.UNLINK,
            guest_id=str(guest_id),
            account_id=str(previous_account_id) if previous_account_id else None,
        )
        return result

    async def archive_guest(self, guest_id: UUID, reason: str | None = None) -> GuestDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await self._get_guest(session, guest_id)
            archive_guest_record(guest, reason, datetime.now(UTC))
            await session.flush()
            result = GuestDTO.from_guest(guest)

        self._emit(LifecycleEventType.ARCHIVE, guest_ids=[str(guest_id)], reason=reason)
        return result

    async def restore_guest(self, guest_id: UUID) -> GuestDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await self._get_guest(session, guest_id)
            guest.is_archived = False
            guest.archived_at = None
            guest.archive_reason = None
            await session.flush()
            result = GuestDTO.from_guest(guest)

        self._emit(LifecycleEventType.RESTORE, guest_id=str(guest_id))
        return result

    async def bulk_archive_guests(self, guest_ids: list[UUID], reason: str | None = None) -> int:
        unique_ids = list(dict.fromkeys(guest_ids))
        if not unique_ids:
            return 0
        reason = reason or BULK_ARCHIVE_REASON

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(select(Guest).where(Guest.uuid.in_(unique_ids)))
            guests = result.scalars().all()

            found = {guest.uuid for guest in guests}
            missing = [guest_id for guest_id in unique_ids if guest_id not in found]
            if missing:
                raise GuestNotFoundError(missing[0])

            archived_at = datetime.now(UTC)
            for guest in guests:
                archive_guest_record(guest, reason, archived_at)
            await session.flush()

        logger.info("Bulk archived %d guests", len(unique_ids))
        self._emit(
            LifecycleEventType.ARCHIVE,
            guest_ids=[str(guest_id) for guest_id in unique_ids],
            reason=reason,
        )
        return len(unique_ids)
