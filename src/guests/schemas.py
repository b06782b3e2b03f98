from dataclasses import asdict
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from src.guests.dtos import GuestDTO, GuestStatsDTO, GuestStatus


class GuestResponse(BaseModel):
    """Response for a guest record."""

    id: UUID
    email: str
    rsvp_status: GuestStatus
    user_id: UUID | None = None
    first_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    phone: str | None = None
    rsvp_responded_at: datetime | None = None
    plus_one_name: str | None = None
    plus_one_email: str | None = None
    dietary_needs: list[str] = []
    allergies: list[str] = []
    table_assignment: str | None = None
    special_requests: str | None = None
    contact_details: dict = {}
    is_archived: bool = False
    archived_at: datetime | None = None
    archive_reason: str | None = None
    invitation_sent_at: datetime | None = None
    rsvp_deadline: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_dto(cls, guest: GuestDTO) -> "GuestResponse":
        return cls(**asdict(guest))


class GuestStatsResponse(BaseModel):
    total: int
    linked: int
    confirmed: int
    pending: int
    declined: int
    archived: int
    with_dietary_needs: int
    with_plus_ones: int

    @classmethod
    def from_dto(cls, stats: GuestStatsDTO) -> "GuestStatsResponse":
        return cls(**asdict(stats))
