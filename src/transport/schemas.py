from dataclasses import asdict
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from src.transport.dtos import BookingDTO, BookingStatus, RouteType, ScheduleDTO, SeatDTO, SeatRole


class ScheduleResponse(BaseModel):
    id: UUID
    route_type: RouteType
    route_name: str
    departure_datetime: datetime
    departure_location: str
    arrival_location: str
    max_capacity: int
    is_active: bool
    current_bookings: int
    seats_available: int

    @classmethod
    def from_dto(cls, schedule: ScheduleDTO) -> "ScheduleResponse":
        return cls(**asdict(schedule), seats_available=schedule.seats_available)


class BookingResponse(BaseModel):
    id: UUID
    schedule_id: UUID
    user_id: UUID | None = None
    seat_number: int
    guest_count: int
    passenger_names: list[str]
    status: BookingStatus
    special_requirements: str | None = None
    pickup_location: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_dto(cls, booking: BookingDTO) -> "BookingResponse":
        return cls(**asdict(booking))


class SeatResponse(BaseModel):
    seat_number: int
    role: SeatRole
    is_booked: bool
    booking_id: UUID | None = None
    passenger_names: list[str] = []

    @classmethod
    def from_dto(cls, seat: SeatDTO) -> "SeatResponse":
        return cls(**asdict(seat), is_booked=seat.is_booked)
