"""Operator commands for the guest list, transport and reminders."""

import asyncio
from datetime import datetime
from uuid import UUID

import typer

from guestlist.config.logging import setup_logging
from guestlist.guests.dtos import GuestSearchFilter, GuestStatus
from guestlist.guests.features.create_guest.write_model import SqlGuestCreateWriteModel
from guestlist.guests.features.send_reminder.write_model import SqlReminderWriteModel
from guestlist.guests.repository.read_models import SqlGuestReadModel
from guestlist.guests.repository.write_models import SqlRSVPWriteModel
from guestlist.notifications import get_notification_service
from guestlist.transport.repository.write_models import SqlTransportWriteModel

app = typer.Typer(help="Guest list management commands")


@app.callback()
def main():
    setup_logging()


@app.command()
def create_guest(
    name: str,
    email: str,
    phone: str | None = typer.Option(None, help="Phone number"),
    rsvp_deadline: datetime | None = typer.Option(None, help="Respond-by date"),
):
    """Add an invited guest."""
    guest = asyncio.run(
        SqlGuestCreateWriteModel().create_guest(
            name=name, email=email, phone=phone, rsvp_deadline=rsvp_deadline
        )
    )
    typer.secho("Guest created successfully!", fg=typer.colors.GREEN)
    typer.secho(f"ID: {guest.id}", fg=typer.colors.CYAN)


@app.command()
def override_status(
    guest_id: UUID,
    status: GuestStatus,
    reason: str | None = typer.Option(None, help="Why the status is being changed"),
):
    """Set a guest's RSVP status on their behalf."""
    transition = asyncio.run(
        SqlRSVPWriteModel().admin_override_status(guest_id, status, reason=reason)
    )
    typer.secho(
        f"{transition.guest.name}: {transition.history_entry.old_status.value} -> "
        f"{transition.history_entry.new_status.value}",
        fg=typer.colors.GREEN,
    )


@app.command()
def search_guests(
    text: str | None = typer.Argument(None, help="Matches name or email"),
    status: GuestStatus | None = typer.Option(None, help="Only guests with this status"),
    linked_only: bool = typer.Option(False, help="Only guests linked to an account"),
    include_archived: bool = typer.Option(False, help="Include archived guests"),
    limit: int = typer.Option(100, help="Page size"),
):
    """List guests matching a filter."""
    result = asyncio.run(
        SqlGuestReadModel().search(
            GuestSearchFilter(
                text=text,
                status=status,
                linked_only=linked_only,
                include_archived=include_archived,
                limit=limit,
            )
        )
    )
    for guest in result.guests:
        archived = " (archived)" if guest.is_archived else ""
        typer.echo(
            f"{guest.id}  {guest.rsvp_status.value:<9}  {guest.name} <{guest.email}>{archived}"
        )
    typer.secho(f"{len(result.guests)} of {result.total} guests", fg=typer.colors.BLUE)


@app.command()
def add_transport_option(
    name: str,
    description: str | None = typer.Option(None),
    pickup_location: list[str] = typer.Option([], help="Repeat for several pickup points"),
    featured: bool = typer.Option(False),
    booking_required: bool = typer.Option(True),
):
    """Publish a shared transport option."""
    option = asyncio.run(
        SqlTransportWriteModel().create_option(
            name=name,
            description=description,
            pickup_locations=pickup_location,
            booking_required=booking_required,
            featured=featured,
        )
    )
    typer.secho(f"Transport option created: {option.id}", fg=typer.colors.GREEN)


@app.command()
def add_schedule(
    option_id: UUID,
    departure_time: datetime,
    departure_location: str,
    max_capacity: int | None = typer.Option(None, help="Seats available; unlimited if omitted"),
):
    """Add a departure to a transport option."""
    schedule = asyncio.run(
        SqlTransportWriteModel().add_schedule(
            option_id=option_id,
            departure_time=departure_time,
            departure_location=departure_location,
            max_capacity=max_capacity,
        )
    )
    typer.secho(f"Schedule created: {schedule.id}", fg=typer.colors.GREEN)


@app.command()
def send_reminders():
    """Remind every guest who has not responded yet."""
    write_model = SqlReminderWriteModel(notification_service=get_notification_service())
    reminded = asyncio.run(write_model.send_pending_reminders())
    typer.secho(f"Reminded {reminded} guests", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
