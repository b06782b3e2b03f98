import abc
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.guests.dtos import GuestDTO, GuestStatsDTO, GuestStatus
from src.guests.features.guest_stats.stats import compute_stats
from src.guests.repository.orm_models import Guest


class GuestReadModel(abc.ABC):
    @abc.abstractmethod
    async def list_guests(
        self,
        include_archived: bool = False,
        linked_only: bool = False,
        status: GuestStatus | None = None,
    ) -> list[GuestDTO]:
        """
        List guests, newest first.
        Archived guests are left out unless include_archived is set.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def get_guest(self, guest_id: UUID) -> GuestDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_guest_by_account(self, account_id: UUID) -> GuestDTO | None:
        """Get the guest linked to an account. Absence is not an error."""
        raise NotImplementedError

    async def get_guest_stats(self) -> GuestStatsDTO:
        """Aggregate statistics over every guest, archived ones included."""
        guests = await self.list_guests(include_archived=True)
        return compute_stats(guests)


class SqlGuestReadModel(GuestReadModel):
    """SQL implementation of guest read model."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def list_guests(
        self,
        include_archived: bool = False,
        linked_only: bool = False,
        status: GuestStatus | None = None,
    ) -> list[GuestDTO]:
        stmt = select(Guest)
        if not include_archived:
            stmt = stmt.where(Guest.is_archived.is_(False))
        if linked_only:
            stmt = stmt.where(Guest.user_id.is_not(None))
        if status is not None:
            stmt = stmt.where(Guest.rsvp_status == GuestStatus(status))
        stmt = stmt.order_by(Guest.created_at.desc())

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(stmt)
            return [GuestDTO.from_guest(guest) for guest in result.scalars().all()]

    async def get_guest(self, guest_id: UUID) -> GuestDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            guest = await session.get(Guest, guest_id)
            return GuestDTO.from_guest(guest) if guest else None

    async def get_guest_by_account(self, account_id: UUID) -> GuestDTO | None:
        # archived duplicates may exist for an account, the active record wins
        stmt = (
            select(Guest)
            .where(Guest.user_id == account_id)
            .order_by(Guest.is_archived.asc(), Guest.created_at.desc())
            .limit(1)
        )
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(stmt)
            guest = result.scalar_one_or_none()
            return GuestDTO.from_guest(guest) if guest else None
