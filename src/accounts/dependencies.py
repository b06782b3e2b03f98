"""FastAPI dependencies resolving the caller's identity.

Authentication itself happens upstream: the auth proxy forwards the
account id in ``X-Account-Id``. Administrative tooling authenticates with
``X-Admin-Key``.
"""

import secrets
from uuid import UUID

from fastapi import Depends, Header, HTTPException

from src.accounts.directory import AccountDirectory, SqlAccountDirectory
from src.accounts.dtos import Identity
from src.config.settings import settings
from src.exceptions import StoreFailure


def get_account_directory() -> AccountDirectory:
    """Dependency to get the account directory instance."""
    return SqlAccountDirectory()


def _is_admin_key(admin_key: str | None) -> bool:
    return bool(
        settings.admin_api_key
        and admin_key
        and secrets.compare_digest(admin_key, settings.admin_api_key)
    )


async def get_optional_identity(
    x_account_id: UUID | None = Header(default=None),
    x_admin_key: str | None = Header(default=None),
    directory: AccountDirectory = Depends(get_account_directory),
) -> Identity | None:
    """Resolve the caller, or None for anonymous requests."""
    is_admin_key = _is_admin_key(x_admin_key)
    if x_account_id is None:
        return Identity(account_id=None, is_admin=True) if is_admin_key else None

    try:
        account = await directory.get_account(x_account_id)
    except StoreFailure as e:
        raise HTTPException(status_code=503, detail=str(e))
    if account is None:
        return Identity(account_id=None, is_admin=True) if is_admin_key else None
    return Identity(
        account_id=account.id,
        email=account.email,
        is_admin=account.is_superuser or is_admin_key,
    )


async def get_current_identity(
    identity: Identity | None = Depends(get_optional_identity),
) -> Identity:
    if identity is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return identity


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(status_code=403, detail="Administrator privileges required")
    return identity
