"""CLI output formatting functions.

This module contains functions for displaying sync results, members,
teams and DoorFlow records on the command line.
"""

from typing import TYPE_CHECKING, Any, Optional

import click

if TYPE_CHECKING:
    from doorflow_sync.sync.engine import SyncResult
    from doorflow_sync.sync.member import Member, Team

# Maximum entries listed per bucket before truncating
MAX_LISTED = 10


def _echo_truncated(items: list[str], limit: int = MAX_LISTED) -> None:
    for item in items[:limit]:
        click.echo(item)
    if len(items) > limit:
        click.echo(f"  ... and {len(items) - limit} more")


def show_sync_details(result: "SyncResult", verbose: bool = False) -> None:
    """
    Display the members in each sync bucket.

    Args:
        result: The SyncResult to display
        verbose: List every member instead of the first few per bucket
    """
    limit = result.total if verbose else MAX_LISTED

    if result.created:
        heading = "Would create in DoorFlow:" if result.dry_run else "Created in DoorFlow:"
        click.echo(f"\n{click.style(heading, fg='green')}")
        _echo_truncated(
            [
                f"  + {c.member.display_name} <{c.member.email}>"
                + (f" (person {c.person_id})" if c.person_id is not None else "")
                for c in result.created
            ],
            limit,
        )

    if result.unmatched:
        click.echo(f"\n{click.style('Unmatched:', fg='yellow')}")
        _echo_truncated(
            [f"  ? {m.display_name} <{m.email}>" for m in result.unmatched], limit
        )
        click.echo("Run with --create-missing to create these people in DoorFlow.")

    if result.errors:
        click.echo(f"\n{click.style('Errors:', fg='red')}")
        _echo_truncated(
            [
                f"  ! {e.member.display_name} <{e.member.email}>: {e.error}"
                for e in result.errors
            ],
            limit,
        )

    if verbose and result.matched:
        click.echo(f"\n{click.style('Matched:', fg='cyan')}")
        _echo_truncated(
            [
                f"  = {m.member.display_name} <{m.member.email}> -> person {m.person_id}"
                for m in result.matched
            ],
            limit,
        )


def link_status(member: "Member") -> str:
    """Colored DoorFlow link status for a member."""
    if member.is_linked():
        return click.style(f"linked ({member.doorflow_person_id})", fg="green")
    return click.style("not linked", fg="yellow")


def show_member_table(members: list["Member"]) -> None:
    """Display members as a table."""
    click.echo(f"{'ID':<38} {'Name':<25} {'Email':<35} {'DoorFlow':<15}")
    click.echo("-" * 113)
    for member in members:
        click.echo(
            f"{member.id:<38} {member.display_name:<25} {member.email:<35} "
            f"{link_status(member)}"
        )


def show_member_detail(member: "Member", teams: list["Team"]) -> None:
    """Display every field of a member, with team names resolved."""
    click.echo(f"Name:            {member.display_name}")
    click.echo(f"ID:              {member.id}")
    click.echo(f"Email:           {member.email}")
    click.echo(f"Membership:      {member.membership_type.value}")

    optional_fields = (
        ("Phone", member.phone),
        ("Department", member.department),
        ("Job title", member.job_title),
        ("Organisation", member.organisation_id),
        ("Notes", member.notes),
    )
    for label, value in optional_fields:
        if value:
            click.echo(f"{label + ':':<17}{value}")

    team_names = {t.id: t for t in teams}
    if member.team_ids:
        click.echo("Teams:")
        for team_id in member.team_ids:
            team = team_names.get(team_id)
            if team is None:
                click.echo(f"  - {team_id} (unknown team)")
            elif team.is_mapped():
                click.echo(f"  - {team.name} -> group {team.doorflow_group_id}")
            else:
                click.echo(f"  - {team.name} (no group)")
    else:
        click.echo("Teams:           none")

    click.echo(f"DoorFlow:        {link_status(member)}")
    if member.created_at:
        click.echo(f"Created:         {member.created_at}")
    if member.updated_at:
        click.echo(f"Updated:         {member.updated_at}")


def show_team_table(teams: list["Team"], member_counts: dict[str, int]) -> None:
    """Display teams with their group mapping and member count."""
    click.echo(f"{'ID':<38} {'Name':<25} {'Group':<10} {'Members':<8}")
    click.echo("-" * 83)
    for team in teams:
        group = str(team.doorflow_group_id) if team.is_mapped() else "-"
        click.echo(
            f"{team.id:<38} {team.name:<25} {group:<10} "
            f"{member_counts.get(team.id, 0):<8}"
        )


def event_label(event_code: Optional[int]) -> str:
    """
    Describe a DoorFlow access event code.

    Example:
        >>> event_label(12)
        'Access Granted'
    """
    if event_code is None:
        return "Event"
    if 10 <= event_code <= 18 or event_code == 70:
        return "Access Granted"
    if 20 <= event_code <= 29 or 71 <= event_code <= 73:
        return "Access Denied"
    if 40 <= event_code <= 42:
        return "Auto-Unlock"
    if 90 <= event_code <= 91:
        return "Tamper Alert"
    return "Event"


EVENT_COLORS = {
    "Access Granted": "green",
    "Access Denied": "red",
    "Auto-Unlock": "blue",
    "Tamper Alert": "magenta",
}


def show_event(event: dict[str, Any]) -> None:
    """Display one access event on a single line."""
    label = event_label(event.get("event_code"))
    name = f"{event.get('first_name') or ''} {event.get('last_name') or ''}".strip()
    where = event.get("channel_name") or event.get("door_controller_name") or ""
    click.echo(
        f"{event.get('timestamp') or event.get('created_at') or '':<26} "
        f"{click.style(f'{label:<15}', fg=EVENT_COLORS.get(label))} "
        f"{name or '-':<25} {where}"
    )
