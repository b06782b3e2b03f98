from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from src.guests.repository.orm_models import Guest


class GuestStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class ChangeMethod(str, Enum):
    ONLINE_FORM = "online_form"
    ADMIN = "admin"


class CommunicationDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


DECLINED_ARCHIVE_REASON = "Declined RSVP"
BULK_ARCHIVE_REASON = "Bulk archive operation"


@dataclass(frozen=True)
class GuestDTO:
    """DTO for a guest record."""

    id: UUID
    email: str
    rsvp_status: GuestStatus = GuestStatus.PENDING
    user_id: UUID | None = None
    first_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    phone: str | None = None
    rsvp_responded_at: datetime | None = None
    plus_one_name: str | None = None
    plus_one_email: str | None = None
    dietary_needs: list[str] = field(default_factory=list)
    allergies: list[str] = field(default_factory=list)
    table_assignment: str | None = None
    special_requests: str | None = None
    contact_details: dict = field(default_factory=dict)
    is_archived: bool = False
    archived_at: datetime | None = None
    archive_reason: str | None = None
    invitation_sent_at: datetime | None = None
    rsvp_deadline: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def name(self) -> str:
        """Display name, falling back to first and last name."""
        return self.display_name or self.full_name

    @property
    def relationship(self) -> str | None:
        return (self.contact_details or {}).get("relationship")

    @property
    def is_linked(self) -> bool:
        return self.user_id is not None

    @classmethod
    def from_guest(cls, guest: "Guest") -> "GuestDTO":
        """Create GuestDTO from Guest ORM model."""
        return cls(
            id=guest.uuid,
            email=guest.email,
            rsvp_status=GuestStatus(guest.rsvp_status or GuestStatus.PENDING),
            user_id=guest.user_id,
            first_name=guest.first_name,
            last_name=guest.last_name,
            display_name=guest.display_name,
            phone=guest.phone,
            rsvp_responded_at=guest.rsvp_responded_at,
            plus_one_name=guest.plus_one_name,
            plus_one_email=guest.plus_one_email,
            dietary_needs=list(guest.dietary_needs or []),
            allergies=list(guest.allergies or []),
            table_assignment=guest.table_assignment,
            special_requests=guest.special_requests,
            contact_details=dict(guest.contact_details or {}),
            is_archived=bool(guest.is_archived),
            archived_at=guest.archived_at,
            archive_reason=guest.archive_reason,
            invitation_sent_at=guest.invitation_sent_at,
            rsvp_deadline=guest.rsvp_deadline,
            created_at=guest.created_at,
            updated_at=guest.updated_at,
        )


@dataclass(frozen=True)
class ContactUpdateDTO:
    """Contact sub-fields a guest may update while responding."""

    phone: str | None = None
    address: str | None = None
    emergency_contact: str | None = None


@dataclass(frozen=True)
class NewGuestDTO:
    """An additional named attendee brought along by a confirming guest."""

    first_name: str
    last_name: str
    email: str
    relationship: str = ""

    @property
    def is_complete(self) -> bool:
        return all(
            value and value.strip() for value in (self.first_name, self.last_name, self.email)
        )


@dataclass(frozen=True)
class RSVPSubmissionDTO:
    """DTO for an RSVP submission."""

    guest_id: UUID
    rsvp_status: GuestStatus
    plus_one_name: str | None = None
    plus_one_email: str | None = None
    dietary_needs: list[str] | None = None
    allergies: list[str] | None = None
    special_requests: str | None = None
    contact_updates: ContactUpdateDTO | None = None
    new_guests: list[NewGuestDTO] = field(default_factory=list)
    change_method: ChangeMethod = ChangeMethod.ONLINE_FORM


@dataclass(frozen=True)
class RSVPResultDTO:
    """DTO for the outcome of an RSVP submission."""

    guest_id: UUID
    status: GuestStatus
    added_guests: int
    archived: bool
    message: str


@dataclass(frozen=True)
class GuestStatsDTO:
    total: int = 0
    linked: int = 0
    confirmed: int = 0
    pending: int = 0
    declined: int = 0
    archived: int = 0
    with_dietary_needs: int = 0
    with_plus_ones: int = 0


@dataclass(frozen=True)
class SyncResultDTO:
    synced: int = 0
    errors: int = 0
