from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.models.base import Base, TimeStamp
from src.transport.dtos import BookingStatus, RouteType

DEFAULT_BUS_CAPACITY = 27


class BusSchedule(Base, TimeStamp):
    __tablename__ = TableNames.BUS_SCHEDULES.value

    route_type: Mapped[str] = mapped_column(
        Enum(
            RouteType,
            name="route_type_enum",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    route_name: Mapped[str] = mapped_column(String(255), nullable=False)
    departure_datetime: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    departure_location: Mapped[str] = mapped_column(String(255), nullable=False)
    arrival_location: Mapped[str] = mapped_column(String(255), nullable=False)
    max_capacity: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_BUS_CAPACITY, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<BusSchedule {self.route_name} at {self.departure_datetime}>"


class BusBooking(Base, TimeStamp):
    __tablename__ = TableNames.BUS_BOOKINGS.value
    __table_args__ = (
        # the safety net for concurrent seat scans
        Index(
            "uq_bus_bookings_confirmed_seat",
            "schedule_id",
            "seat_number",
            unique=True,
            postgresql_where=text("status = 'confirmed'"),
            sqlite_where=text("status = 'confirmed'"),
        ),
    )

    schedule_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.BUS_SCHEDULES.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(f"{TableNames.USERS.value}.uuid", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    seat_number: Mapped[int] = mapped_column(Integer, nullable=False)
    guest_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    passenger_names: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    status: Mapped[str] = mapped_column(
        Enum(
            BookingStatus,
            name="booking_status_enum",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=BookingStatus.CONFIRMED,
        nullable=False,
    )

    special_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    pickup_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emergency_contact_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emergency_contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<BusBooking seat {self.seat_number} on {self.schedule_id} - {self.status}>"
