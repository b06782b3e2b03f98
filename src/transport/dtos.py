from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from src.transport.repository.orm_models import BusBooking, BusSchedule


class RouteType(str, Enum):
    ARRIVAL = "arrival"
    DEPARTURE = "departure"


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class SeatRole(str, Enum):
    DRIVER = "driver"
    GUIDE = "guide"
    PASSENGER = "passenger"


@dataclass(frozen=True)
class ScheduleDTO:
    """DTO for a bus schedule with its derived occupancy."""

    id: UUID
    route_type: RouteType
    route_name: str
    departure_datetime: datetime
    departure_location: str
    arrival_location: str
    max_capacity: int
    is_active: bool = True
    current_bookings: int = 0

    @property
    def seats_available(self) -> int:
        return max(self.max_capacity - self.current_bookings, 0)

    @classmethod
    def from_schedule(cls, schedule: "BusSchedule", current_bookings: int = 0) -> "ScheduleDTO":
        return cls(
            id=schedule.uuid,
            route_type=RouteType(schedule.route_type),
            route_name=schedule.route_name,
            departure_datetime=schedule.departure_datetime,
            departure_location=schedule.departure_location,
            arrival_location=schedule.arrival_location,
            max_capacity=schedule.max_capacity,
            is_active=bool(schedule.is_active),
            current_bookings=current_bookings,
        )


@dataclass(frozen=True)
class BookingMetadataDTO:
    """Optional details a guest gives when booking a seat."""

    special_requirements: str | None = None
    pickup_location: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None


@dataclass(frozen=True)
class BookingDTO:
    id: UUID
    schedule_id: UUID
    user_id: UUID | None
    seat_number: int
    guest_count: int
    passenger_names: list[str] = field(default_factory=list)
    status: BookingStatus = BookingStatus.CONFIRMED
    special_requirements: str | None = None
    pickup_location: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_booking(cls, booking: "BusBooking") -> "BookingDTO":
        """Create BookingDTO from BusBooking ORM model."""
        return cls(
            id=booking.uuid,
            schedule_id=booking.schedule_id,
            user_id=booking.user_id,
            seat_number=booking.seat_number,
            guest_count=booking.guest_count,
            passenger_names=list(booking.passenger_names or []),
            status=BookingStatus(booking.status),
            special_requirements=booking.special_requirements,
            pickup_location=booking.pickup_location,
            emergency_contact_name=booking.emergency_contact_name,
            emergency_contact_phone=booking.emergency_contact_phone,
            created_at=booking.created_at,
        )


@dataclass(frozen=True)
class SeatDTO:
    """One seat of the seat map."""

    seat_number: int
    role: SeatRole = SeatRole.PASSENGER
    booking_id: UUID | None = None
    passenger_names: list[str] = field(default_factory=list)

    @property
    def is_booked(self) -> bool:
        return self.booking_id is not None
