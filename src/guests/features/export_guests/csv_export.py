"""CSV export of the guest list."""

import csv
import io

from src.guests.dtos import GuestDTO

CSV_HEADERS = [
    "Name",
    "Email",
    "Phone",
    "RSVP Status",
    "Plus One",
    "Dietary Needs",
    "Allergies",
    "Table Assignment",
    "Relationship",
    "Responded At",
    "Is Linked",
    "Is Archived",
]

LIST_SEPARATOR = "; "


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _single_line(value: str) -> str:
    return " ".join(value.splitlines())


def guest_to_row(guest: GuestDTO) -> list[str]:
    # one physical line per guest, embedded line breaks become spaces
    row = [
        guest.name,
        guest.email,
        guest.phone or "",
        guest.rsvp_status.value,
        guest.plus_one_name or "",
        LIST_SEPARATOR.join(guest.dietary_needs),
        LIST_SEPARATOR.join(guest.allergies),
        guest.table_assignment or "",
        guest.relationship or "",
        guest.rsvp_responded_at.date().isoformat() if guest.rsvp_responded_at else "",
        _yes_no(guest.is_linked),
        _yes_no(guest.is_archived),
    ]
    return [_single_line(cell) for cell in row]


def export_to_csv(guests: list[GuestDTO]) -> str:
    """Render guests as CSV: a header line plus one fully quoted line per guest."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(guest_to_row(guest) for guest in guests)
    return buffer.getvalue().removesuffix("\n")
