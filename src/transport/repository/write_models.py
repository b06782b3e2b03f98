"""Seat allocation for bus bookings.

The occupied-seat scan only picks a candidate. The partial unique index
``uq_bus_bookings_confirmed_seat`` decides: a collision on insert triggers
one fresh scan, a second collision fails with CapacityExceededError.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.accounts.dtos import Identity
from src.config.database import async_session_manager
from src.events import EventBus, LifecycleEventType
from src.exceptions import (
    BookingNotFoundError,
    CapacityExceededError,
    InvalidBookingError,
    ScheduleNotFoundError,
    UnauthenticatedError,
    UnauthorizedError,
)
from src.transport.dtos import BookingDTO, BookingMetadataDTO, BookingStatus
from src.transport.repository.orm_models import BusBooking, BusSchedule
from src.transport.repository.read_models import RESERVED_SEATS

logger = logging.getLogger(__name__)

FIRST_BOOKABLE_SEAT = max(RESERVED_SEATS) + 1
BOOKING_ATTEMPTS = 2
CONFIRMED_SEAT_INDEX = "uq_bus_bookings_confirmed_seat"


def violates_confirmed_seat_index(error: IntegrityError) -> bool:
    message = str(error.orig)
    # postgres names the index, sqlite lists the indexed columns
    return CONFIRMED_SEAT_INDEX in message or (
        "UNIQUE constraint failed" in message
        and f"{BusBooking.__tablename__}.seat_number" in message
    )


def find_free_seat(occupied: Iterable[int], max_capacity: int) -> int | None:
    """Lowest bookable seat number not in ``occupied``, None when the bus is full."""
    taken = set(occupied)
    for seat_number in range(FIRST_BOOKABLE_SEAT, max_capacity + 1):
        if seat_number not in taken:
            return seat_number
    return None


class SeatCollisionError(Exception):
    """Another booking took the scanned seat before the insert landed."""


class BookingWriteModel(ABC):
    @abstractmethod
    async def book_seats(
        self,
        schedule_id: UUID,
        identity: Identity | None,
        passenger_names: list[str],
        metadata: BookingMetadataDTO | None = None,
    ) -> BookingDTO:
        """Book the first free seat on a schedule for a party."""
        raise NotImplementedError

    @abstractmethod
    async def cancel_booking(self, booking_id: UUID, identity: Identity | None) -> BookingDTO:
        raise NotImplementedError


class SqlBookingWriteModel(BookingWriteModel):
    """SQL implementation of seat booking. Every attempt runs in its own transaction."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.session_overwrite = session_overwrite
        self.event_bus = event_bus

    async def _occupied_seats(self, session: AsyncSession, schedule_id: UUID) -> set[int]:
        result = await session.execute(
            select(BusBooking.seat_number).where(
                BusBooking.schedule_id == schedule_id,
                BusBooking.status == BookingStatus.CONFIRMED,
            )
        )
        return set(result.scalars().all())

    async def _attempt_booking(
        self,
        schedule_id: UUID,
        account_id: UUID | None,
        passenger_names: list[str],
        metadata: BookingMetadataDTO,
    ) -> BookingDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            schedule = await session.get(BusSchedule, schedule_id)
            if schedule is None or not schedule.is_active:
                raise ScheduleNotFoundError(schedule_id)

            occupied = await self._occupied_seats(session, schedule_id)
            seat_number = find_free_seat(occupied, schedule.max_capacity)
            if seat_number is None:
                raise CapacityExceededError(schedule_id)

            booking = BusBooking(
                schedule_id=schedule_id,
                user_id=account_id,
                seat_number=seat_number,
                guest_count=len(passenger_names),
                passenger_names=passenger_names,
                status=BookingStatus.CONFIRMED,
                special_requirements=metadata.special_requirements,
                pickup_location=metadata.pickup_location,
                emergency_contact_name=metadata.emergency_contact_name,
                emergency_contact_phone=metadata.emergency_contact_phone,
            )
            session.add(booking)
            try:
                await session.flush()
            except IntegrityError as e:
                if violates_confirmed_seat_index(e):
                    raise SeatCollisionError(seat_number) from e
                raise
            return BookingDTO.from_booking(booking)

    async def book_seats(
        self,
        schedule_id: UUID,
        identity: Identity | None,
        passenger_names: list[str],
        metadata: BookingMetadataDTO | None = None,
    ) -> BookingDTO:
        if identity is None:
            raise UnauthenticatedError()
        # blank entries are dropped, guest_count is taken from what remains
        names = [name.strip() for name in passenger_names if name and name.strip()]
        if not names:
            raise InvalidBookingError("At least one passenger name is required")

        for attempt in range(1, BOOKING_ATTEMPTS + 1):
            try:
                booking = await self._attempt_booking(
                    schedule_id, identity.account_id, names, metadata or BookingMetadataDTO()
                )
                break
            except SeatCollisionError as e:
                logger.warning(
                    "Seat %s on schedule %s was taken concurrently (attempt %d)",
                    e.args[0],
                    schedule_id,
                    attempt,
                )
        else:
            raise CapacityExceededError(schedule_id)

        logger.info(
            "Booked seat %d on schedule %s for %d passengers",
            booking.seat_number,
            schedule_id,
            booking.guest_count,
        )
        if self.event_bus:
            self.event_bus.emit(
                LifecycleEventType.BOOKING,
                {
                    "action": "booked",
                    "booking_id": str(booking.id),
                    "schedule_id": str(schedule_id),
                    "seat_number": booking.seat_number,
                },
            )
        return booking

    async def cancel_booking(self, booking_id: UUID, identity: Identity | None) -> BookingDTO:
        """Cancel a confirmed booking, freeing its seat. Owners and admins only."""
        if identity is None:
            raise UnauthenticatedError()

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            booking = await session.get(BusBooking, booking_id)
            if booking is None:
                raise BookingNotFoundError(booking_id)
            if not identity.is_admin and booking.user_id != identity.account_id:
                raise UnauthorizedError("You can only cancel your own bookings")
            if booking.status == BookingStatus.CANCELLED:
                raise InvalidBookingError("Booking is already cancelled")

            booking.status = BookingStatus.CANCELLED
            await session.flush()
            result = BookingDTO.from_booking(booking)

        logger.info("Cancelled booking %s (seat %d)", booking_id, result.seat_number)
        if self.event_bus:
            self.event_bus.emit(
                LifecycleEventType.BOOKING,
                {
                    "action": "cancelled",
                    "booking_id": str(booking_id),
                    "schedule_id": str(result.schedule_id),
                    "seat_number": result.seat_number,
                },
            )
        return result
