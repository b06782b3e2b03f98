from fastapi import APIRouter

from .features.book_seats.router import router as book_seats_router
from .features.cancel_booking.router import router as cancel_booking_router
from .features.list_schedules.router import router as list_schedules_router

router = APIRouter(tags=["transport"])

router.include_router(list_schedules_router)
router.include_router(book_seats_router)
router.include_router(cancel_booking_router)
