from fastapi import APIRouter

from .features.export_guests.router import router as export_guests_router
from .features.guest_stats.router import router as guest_stats_router
from .features.list_guests.router import router as list_guests_router
from .features.manage_guest.router import router as manage_guest_router
from .features.process_rsvp.router import router as process_rsvp_router
from .features.sync_accounts.router import router as sync_accounts_router

router = APIRouter(tags=["guests"])

# static paths first, /guests/{guest_id} would shadow them
router.include_router(guest_stats_router)
router.include_router(export_guests_router)
router.include_router(sync_accounts_router)
router.include_router(manage_guest_router)
router.include_router(list_guests_router)
router.include_router(process_rsvp_router)
