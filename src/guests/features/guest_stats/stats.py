from collections.abc import Iterable

from src.guests.dtos import GuestDTO, GuestStatsDTO, GuestStatus


def compute_stats(guests: Iterable[GuestDTO]) -> GuestStatsDTO:
    """Derive guest list statistics.

    Every count except ``archived`` only considers active guests.
    """
    guests = list(guests)
    active = [guest for guest in guests if not guest.is_archived]

    return GuestStatsDTO(
        total=len(active),
        linked=sum(1 for guest in active if guest.user_id),
        confirmed=sum(1 for guest in active if guest.rsvp_status == GuestStatus.CONFIRMED),
        pending=sum(1 for guest in active if guest.rsvp_status == GuestStatus.PENDING),
        declined=sum(1 for guest in active if guest.rsvp_status == GuestStatus.DECLINED),
        archived=len(guests) - len(active),
        with_dietary_needs=sum(1 for guest in active if guest.dietary_needs or guest.allergies),
        with_plus_ones=sum(1 for guest in active if guest.plus_one_name),
    )
