from src.guests.dtos import GuestDTO


def _matches(guest: GuestDTO, term: str) -> bool:
    candidates = (
        guest.email,
        guest.display_name,
        guest.full_name,
        guest.plus_one_name,
        guest.relationship,
    )
    if any(value and term in value.lower() for value in candidates):
        return True
    # phone numbers are compared raw
    return bool(guest.phone and term in guest.phone)


def search_guests(guests: list[GuestDTO], term: str | None) -> list[GuestDTO]:
    """Case-insensitive substring search over names, email, plus-one, relationship and phone.

    A blank term returns ``guests`` unchanged.
    """
    if not term or not term.strip():
        return guests

    term = term.lower()
    return [guest for guest in guests if _matches(guest, term)]
