"""CLI commands for wedding guest list management."""

import asyncio
from pathlib import Path
from uuid import UUID

import typer

from src.accounts.directory import SqlAccountDirectory
from src.accounts.dtos import Identity
from src.config.logging import setup_logging
from src.events import get_event_bus
from src.exceptions import NotFoundError, StoreFailure
from src.guests.dtos import GuestStatus
from src.guests.features.export_guests.csv_export import export_to_csv
from src.guests.features.search_guests.search import search_guests
from src.guests.features.sync_accounts.write_model import SqlAccountSyncWriteModel
from src.guests.repository.read_models import SqlGuestReadModel
from src.guests.repository.write_models import SqlGuestWriteModel

app = typer.Typer(help="CLI commands for wedding guest list management")

# the CLI runs with operator rights
CLI_IDENTITY = Identity(account_id=None, is_admin=True)


@app.callback()
def main():
    setup_logging()


@app.command()
def sync_accounts():
    """Create a pending guest for every account that has none yet."""
    write_model = SqlAccountSyncWriteModel(
        account_directory=SqlAccountDirectory(),
        event_bus=get_event_bus(),
    )
    result = asyncio.run(write_model.sync_accounts_to_guests(CLI_IDENTITY))

    if result.errors:
        typer.secho("Account sync failed, see the log for details.", fg=typer.colors.RED)
        raise typer.Exit(1)
    typer.secho(f"Synced {result.synced} accounts to guest records.", fg=typer.colors.GREEN)


@app.command()
def list_guests(
    include_archived: bool = typer.Option(
        False,
        "--include-archived",
        "-a",
        help="Also list archived guests",
    ),
    status: GuestStatus = typer.Option(
        None,
        "--status",
        "-s",
        help="Only list guests with this RSVP status",
    ),
    search: str = typer.Option(
        None,
        "--search",
        "-q",
        help="Case-insensitive search on name, email, phone or relationship",
    ),
):
    """List guests, newest first."""
    read_model = SqlGuestReadModel()
    guests = asyncio.run(read_model.list_guests(include_archived=include_archived, status=status))
    guests = search_guests(guests, search)

    if not guests:
        typer.secho("No guests found.", fg=typer.colors.YELLOW)
        return

    for guest in guests:
        color = typer.colors.BLUE
        if guest.rsvp_status == GuestStatus.CONFIRMED:
            color = typer.colors.GREEN
        elif guest.rsvp_status == GuestStatus.DECLINED:
            color = typer.colors.RED
        archived = " (archived)" if guest.is_archived else ""
        typer.secho(
            f"{guest.id}  {guest.name or '-'} <{guest.email}>  {guest.rsvp_status.value}{archived}",
            fg=color,
        )
    typer.echo()
    typer.secho(f"{len(guests)} guests", fg=typer.colors.CYAN)


@app.command()
def archive_guest(
    guest_id: str = typer.Argument(
        ...,
        help="Guest UUID to archive",
    ),
    reason: str = typer.Option(
        None,
        "--reason",
        "-r",
        help="Why the guest is archived",
    ),
):
    """Archive a guest. Archived guests drop out of listings and statistics."""
    write_model = SqlGuestWriteModel(event_bus=get_event_bus())
    try:
        guest = asyncio.run(write_model.archive_guest(UUID(guest_id), reason))
    except (NotFoundError, StoreFailure) as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho("Guest archived!", fg=typer.colors.GREEN)
    typer.secho(f"  Name: {guest.name or guest.email}", fg=typer.colors.BLUE)
    if guest.archive_reason:
        typer.secho(f"  Reason: {guest.archive_reason}", fg=typer.colors.CYAN)


@app.command()
def restore_guest(
    guest_id: str = typer.Argument(
        ...,
        help="Guest UUID to restore",
    ),
):
    """Restore an archived guest."""
    write_model = SqlGuestWriteModel(event_bus=get_event_bus())
    try:
        guest = asyncio.run(write_model.restore_guest(UUID(guest_id)))
    except (NotFoundError, StoreFailure) as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho("Guest restored!", fg=typer.colors.GREEN)
    typer.secho(f"  Name: {guest.name or guest.email}", fg=typer.colors.BLUE)
    typer.secho(f"  RSVP status: {guest.rsvp_status.value}", fg=typer.colors.CYAN)


@app.command()
def stats():
    """Show guest list statistics."""
    guest_stats = asyncio.run(SqlGuestReadModel().get_guest_stats())

    typer.secho("Guest Statistics", fg=typer.colors.GREEN)
    typer.secho(f"  Total: {guest_stats.total}", fg=typer.colors.BLUE)
    typer.secho(f"  Linked: {guest_stats.linked}", fg=typer.colors.BLUE)
    typer.secho(f"  Confirmed: {guest_stats.confirmed}", fg=typer.colors.GREEN)
    typer.secho(f"  Pending: {guest_stats.pending}", fg=typer.colors.YELLOW)
    typer.secho(f"  Declined: {guest_stats.declined}", fg=typer.colors.RED)
    typer.secho(f"  Archived: {guest_stats.archived}", fg=typer.colors.MAGENTA)
    typer.secho(f"  With dietary needs: {guest_stats.with_dietary_needs}", fg=typer.colors.CYAN)
    typer.secho(f"  With plus-ones: {guest_stats.with_plus_ones}", fg=typer.colors.CYAN)


@app.command()
def export_csv(
    output: Path = typer.Option(
        Path("guest-list.csv"),
        "--output",
        "-o",
        help="File to write the CSV to",
    ),
    include_archived: bool = typer.Option(
        False,
        "--include-archived",
        "-a",
        help="Also export archived guests",
    ),
):
    """Export the guest list as CSV."""
    guests = asyncio.run(SqlGuestReadModel().list_guests(include_archived=include_archived))
    output.write_text(export_to_csv(guests), encoding="utf-8")

    typer.secho(f"Exported {len(guests)} guests to {output}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
