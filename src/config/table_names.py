from enum import Enum


class TableNames(str, Enum):
    USERS = "users"
    GUESTS = "guests"
    RSVP_HISTORY = "rsvp_history"
    GUEST_COMMUNICATIONS = "guest_communications"
    BUS_SCHEDULES = "bus_schedules"
    BUS_BOOKINGS = "bus_bookings"
