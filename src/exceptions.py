"""Domain errors raised by the guest lifecycle and transport services.

Routers translate these into HTTP responses; the services themselves never
swallow store failures.
"""


class WeddingError(Exception):
    """Base class for all domain errors."""


class NotFoundError(WeddingError):
    """Referenced record does not exist or is hidden by the current filters."""


class GuestNotFoundError(NotFoundError):
    def __init__(self, guest_id) -> None:
        self.guest_id = guest_id
        super().__init__(f"Guest with ID {guest_id} not found")


class ScheduleNotFoundError(NotFoundError):
    def __init__(self, schedule_id) -> None:
        self.schedule_id = schedule_id
        super().__init__(f"Bus schedule with ID {schedule_id} not found")


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id) -> None:
        self.booking_id = booking_id
        super().__init__(f"Bus booking with ID {booking_id} not found")


class InvalidStateError(WeddingError):
    """Operation requested against a state that forbids it."""


class InvalidRSVPStatusError(InvalidStateError):
    def __init__(self, status) -> None:
        self.status = status
        super().__init__(f"'{status}' is not a valid RSVP response")


class AccountAlreadyLinkedError(InvalidStateError):
    """Raised when an account is already linked to another active guest."""

    def __init__(self, account_id) -> None:
        self.account_id = account_id
        super().__init__(f"Account {account_id} is already linked to an active guest")


class InvalidBookingError(InvalidStateError):
    pass


class CapacityExceededError(WeddingError):
    def __init__(self, schedule_id) -> None:
        self.schedule_id = schedule_id
        super().__init__("No seats available on this bus")


class UnauthenticatedError(WeddingError):
    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class UnauthorizedError(WeddingError):
    def __init__(self, message: str = "Administrator privileges required") -> None:
        super().__init__(message)


class StoreFailure(WeddingError):
    """The backing store call itself failed. Carries the driver's message."""
