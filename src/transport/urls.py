SCHEDULES_URL = "/api/v1/transport/schedules"
SEAT_MAP_URL = "/api/v1/transport/schedules/{schedule_id}/seats"
BOOK_SEATS_URL = "/api/v1/transport/schedules/{schedule_id}/bookings"
CANCEL_BOOKING_URL = "/api/v1/transport/bookings/{booking_id}/cancel"
