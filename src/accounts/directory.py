import abc
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.accounts.dtos import AccountDTO
from src.config.database import async_session_manager
from src.models.user import User


class AccountDirectory(abc.ABC):
    """Read access to the identity provider's accounts."""

    @abc.abstractmethod
    async def get_account(self, account_id: UUID) -> AccountDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_accounts(self) -> list[AccountDTO]:
        """List every active account. Privileged: callers must check admin rights."""
        raise NotImplementedError


def _to_dto(user: User) -> AccountDTO:
    return AccountDTO(
        id=user.uuid,
        email=user.email,
        is_superuser=bool(user.is_superuser),
        metadata=dict(user.user_metadata or {}),
    )


class SqlAccountDirectory(AccountDirectory):
    """SQL implementation of the account directory."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def get_account(self, account_id: UUID) -> AccountDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            user = await session.get(User, account_id)
            if user is None or not user.is_active:
                return None
            return _to_dto(user)

    async def list_accounts(self) -> list[AccountDTO]:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(User).where(User.is_active.is_(True)).order_by(User.created_at)
            )
            return [_to_dto(user) for user in result.scalars().all()]
