from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.accounts.dependencies import get_account_directory, require_admin
from src.accounts.directory import AccountDirectory
from src.accounts.dtos import Identity
from src.events import get_event_bus
from src.guests.features.sync_accounts.write_model import (
    AccountSyncWriteModel,
    SqlAccountSyncWriteModel,
)
from src.guests.urls import SYNC_ACCOUNTS_URL

router = APIRouter()


class SyncResponse(BaseModel):
    synced: int
    errors: int


def get_account_sync_write_model(
    directory: AccountDirectory = Depends(get_account_directory),
) -> AccountSyncWriteModel:
    """Dependency to get account sync write model instance."""
    return SqlAccountSyncWriteModel(account_directory=directory, event_bus=get_event_bus())


@router.post(SYNC_ACCOUNTS_URL, response_model=SyncResponse)
async def sync_accounts(
    identity: Identity = Depends(require_admin),
    write_model: AccountSyncWriteModel = Depends(get_account_sync_write_model),
) -> SyncResponse:
    """Create a pending guest for every account without one."""
    result = await write_model.sync_accounts_to_guests(identity)
    return SyncResponse(synced=result.synced, errors=result.errors)
