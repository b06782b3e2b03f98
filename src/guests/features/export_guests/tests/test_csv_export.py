import csv
import io
from datetime import UTC, datetime
from uuid import uuid4

from src.guests.dtos import GuestDTO, GuestStatus
from src.guests.features.export_guests.csv_export import CSV_HEADERS, export_to_csv


def make_guests(count: int) -> list[GuestDTO]:
    return [
        GuestDTO(
            id=uuid4(),
            email=f"guest{index}@guest.example",
            first_name=f"Guest{index}",
            last_name="Example",
            dietary_needs=["vegetarian", "gluten free"] if index % 2 else [],
        )
        for index in range(count)
    ]


def test_export_has_header_plus_one_line_per_guest():
    for count in (0, 1, 5):
        lines = export_to_csv(make_guests(count)).split("\n")

        assert len(lines) == count + 1
        rows = list(csv.reader(io.StringIO("\n".join(lines))))
        assert rows[0] == CSV_HEADERS
        assert all(len(row) == len(CSV_HEADERS) for row in rows)


def test_export_quotes_every_cell():
    content = export_to_csv([])

    assert content == ",".join(f'"{header}"' for header in CSV_HEADERS)


def test_export_row_content():
    guest = GuestDTO(
        id=uuid4(),
        email="ana@guest.example",
        first_name="Ana",
        last_name="Garcia",
        display_name="Ana G, the cousin",
        phone="+34 600",
        rsvp_status=GuestStatus.CONFIRMED,
        rsvp_responded_at=datetime(2026, 6, 1, 18, 30, tzinfo=UTC),
        plus_one_name="Luis",
        dietary_needs=["vegan", "halal"],
        allergies=["nuts"],
        table_assignment="Table 4",
        contact_details={"relationship": "cousin"},
        user_id=uuid4(),
    )

    rows = list(csv.reader(io.StringIO(export_to_csv([guest]))))

    assert rows[1] == [
        "Ana G, the cousin",
        "ana@guest.example",
        "+34 600",
        "confirmed",
        "Luis",
        "vegan; halal",
        "nuts",
        "Table 4",
        "cousin",
        "2026-06-01",
        "Yes",
        "No",
    ]


def test_line_breaks_inside_cells_stay_on_one_line():
    guest = GuestDTO(
        id=uuid4(),
        email="multi@guest.example",
        first_name="Multi",
        table_assignment="Table 1\nnear stage",
        contact_details={"relationship": "Old friend\r\nfrom school"},
    )

    lines = export_to_csv([guest]).split("\n")

    assert len(lines) == 2
    row = next(csv.reader(io.StringIO(lines[1])))
    assert row[CSV_HEADERS.index("Table Assignment")] == "Table 1 near stage"
    assert row[CSV_HEADERS.index("Relationship")] == "Old friend from school"
