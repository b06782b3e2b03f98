import abc
from datetime import UTC, datetime
from functools import partial
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.exceptions import ScheduleNotFoundError
from src.transport.dtos import BookingStatus, ScheduleDTO, SeatDTO, SeatRole
from src.transport.repository.orm_models import BusBooking, BusSchedule

RESERVED_SEATS = {1: SeatRole.DRIVER, 2: SeatRole.GUIDE}


class ScheduleReadModel(abc.ABC):
    @abc.abstractmethod
    async def list_schedules(self, upcoming_only: bool = True) -> list[ScheduleDTO]:
        """Active schedules ordered by departure, with their booking counts."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_schedule(self, schedule_id: UUID) -> ScheduleDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_seat_map(self, schedule_id: UUID) -> list[SeatDTO]:
        """Every seat of the bus, reserved and booked seats flagged."""
        raise NotImplementedError


class SqlScheduleReadModel(ScheduleReadModel):
    """SQL implementation of schedule read model."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    @staticmethod
    async def _count_confirmed(session: AsyncSession, schedule_ids: list[UUID]) -> dict[UUID, int]:
        if not schedule_ids:
            return {}
        result = await session.execute(
            select(BusBooking.schedule_id, func.count(BusBooking.uuid))
            .where(
                BusBooking.schedule_id.in_(schedule_ids),
                BusBooking.status == BookingStatus.CONFIRMED,
            )
            .group_by(BusBooking.schedule_id)
        )
        return {schedule_id: count for schedule_id, count in result.all()}

    async def list_schedules(self, upcoming_only: bool = True) -> list[ScheduleDTO]:
        stmt = select(BusSchedule).where(BusSchedule.is_active.is_(True))
        if upcoming_only:
            stmt = stmt.where(BusSchedule.departure_datetime >= datetime.now(UTC))
        stmt = stmt.order_by(BusSchedule.departure_datetime.asc())

        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(stmt)
            schedules = result.scalars().all()
            counts = await self._count_confirmed(session, [s.uuid for s in schedules])
            return [
                ScheduleDTO.from_schedule(schedule, counts.get(schedule.uuid, 0))
                for schedule in schedules
            ]

    async def get_schedule(self, schedule_id: UUID) -> ScheduleDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            schedule = await session.get(BusSchedule, schedule_id)
            if schedule is None:
                return None
            counts = await self._count_confirmed(session, [schedule.uuid])
            return ScheduleDTO.from_schedule(schedule, counts.get(schedule.uuid, 0))

    async def get_seat_map(self, schedule_id: UUID) -> list[SeatDTO]:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            schedule = await session.get(BusSchedule, schedule_id)
            if schedule is None:
                raise ScheduleNotFoundError(schedule_id)
            result = await session.execute(
                select(BusBooking).where(
                    BusBooking.schedule_id == schedule_id,
                    BusBooking.status == BookingStatus.CONFIRMED,
                )
            )
            bookings = {booking.seat_number: booking for booking in result.scalars().all()}

            seats = []
            for seat_number in range(1, schedule.max_capacity + 1):
                booking = bookings.get(seat_number)
                seats.append(
                    SeatDTO(
                        seat_number=seat_number,
                        role=RESERVED_SEATS.get(seat_number, SeatRole.PASSENGER),
                        booking_id=booking.uuid if booking else None,
                        passenger_names=list(booking.passenger_names or []) if booking else [],
                    )
                )
            return seats
