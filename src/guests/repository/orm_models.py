from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.guests.dtos import CommunicationDirection, GuestStatus
from src.models.base import Base, TimeStamp


class Guest(Base, TimeStamp):
    __tablename__ = TableNames.GUESTS.value
    __table_args__ = (
        # An account may be linked to at most one active guest
        Index(
            "uq_guests_active_user_id",
            "user_id",
            unique=True,
            postgresql_where=text("is_archived = false"),
            sqlite_where=text("is_archived = 0"),
        ),
    )

    user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(f"{TableNames.USERS.value}.uuid", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # RSVP status
    rsvp_status: Mapped[str] = mapped_column(
        Enum(
            GuestStatus,
            name="rsvp_status_enum",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=GuestStatus.PENDING,
        nullable=False,
    )
    rsvp_responded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Plus one
    plus_one_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    plus_one_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    dietary_needs: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    allergies: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    table_assignment: Mapped[str | None] = mapped_column(String(100), nullable=True)
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)
    # address, emergency_contact, relationship, added_by_guest
    contact_details: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    # Archiving is the deletion surrogate, guests are never removed
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    archive_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    invitation_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rsvp_deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Guest {self.email} - {self.rsvp_status}>"


class RSVPHistory(Base, TimeStamp):
    """Append-only trail of RSVP transitions."""

    __tablename__ = TableNames.RSVP_HISTORY.value

    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    new_status: Mapped[str] = mapped_column(
        Enum(
            GuestStatus,
            name="rsvp_history_status_enum",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    change_method: Mapped[str] = mapped_column(String(50), nullable=False)
    change_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<RSVPHistory {self.guest_id} -> {self.new_status}>"


class GuestCommunication(Base, TimeStamp):
    """Append-only log of messages tied to a guest."""

    __tablename__ = TableNames.GUEST_COMMUNICATIONS.value

    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    communication_type: Mapped[str] = mapped_column(String(50), nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    direction: Mapped[str] = mapped_column(
        Enum(
            CommunicationDirection,
            name="communication_direction_enum",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(String(50), nullable=False)

    def __repr__(self) -> str:
        return f"<GuestCommunication {self.subject} for guest {self.guest_id}>"
