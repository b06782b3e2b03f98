"""Write model reconciling authenticated accounts with guest records.

Creates a pending guest for every account that no guest is linked to yet,
seeded from the account's profile metadata.
"""

import logging
from abc import ABC, abstractmethod
from functools import partial

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.accounts.directory import AccountDirectory
from src.accounts.dtos import AccountDTO, Identity
from src.config.database import async_session_manager
from src.events import EventBus, LifecycleEventType
from src.exceptions import StoreFailure, UnauthenticatedError, UnauthorizedError
from src.guests.dtos import GuestStatus, SyncResultDTO
from src.guests.repository.orm_models import Guest

logger = logging.getLogger(__name__)


class AccountSyncWriteModel(ABC):
    @abstractmethod
    async def sync_accounts_to_guests(self, caller: Identity | None) -> SyncResultDTO:
        """Create guest records for accounts without one. Requires an admin caller."""
        raise NotImplementedError


class SqlAccountSyncWriteModel(AccountSyncWriteModel):
    """SQL implementation of account to guest reconciliation."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        account_directory: AccountDirectory,
        session_overwrite: AsyncSession | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.account_directory = account_directory
        self.session_overwrite = session_overwrite
        self.event_bus = event_bus

    @staticmethod
    def _guest_from_account(account: AccountDTO) -> Guest:
        metadata = account.metadata or {}
        return Guest(
            user_id=account.id,
            email=account.email or "",
            first_name=metadata.get("first_name") or None,
            last_name=metadata.get("last_name") or None,
            display_name=metadata.get("display_name") or None,
            phone=metadata.get("phone") or None,
            rsvp_status=GuestStatus.PENDING,
        )

    async def sync_accounts_to_guests(self, caller: Identity | None) -> SyncResultDTO:
        if caller is None:
            raise UnauthenticatedError()
        if not caller.is_admin:
            raise UnauthorizedError()

        try:
            async with self.async_session_manager(
                session_overwrite=self.session_overwrite
            ) as session:
                result = await session.execute(
                    select(Guest.user_id).where(Guest.user_id.is_not(None))
                )
                linked_account_ids = set(result.scalars().all())

                accounts = await self.account_directory.list_accounts()
                unmatched = [
                    account for account in accounts if account.id not in linked_account_ids
                ]
                if not unmatched:
                    return SyncResultDTO(synced=0, errors=0)

                session.add_all(self._guest_from_account(account) for account in unmatched)
                await session.flush()
        except StoreFailure:
            logger.exception("Error syncing accounts to guests")
            return SyncResultDTO(synced=0, errors=1)

        logger.info("Synced %d accounts to guest records", len(unmatched))
        if self.event_bus:
            self.event_bus.emit(LifecycleEventType.SYNC, {"synced": len(unmatched)})
        return SyncResultDTO(synced=len(unmatched), errors=0)
