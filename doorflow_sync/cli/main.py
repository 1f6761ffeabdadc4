"""
Command-line interface for doorflow_sync.

Provides CLI commands for connecting to DoorFlow, managing CRM members and
teams, and synchronizing members to DoorFlow people.

Usage:
    # Show help
    doorflow-sync --help

    # Connect to DoorFlow
    doorflow-sync auth

    # Check status
    doorflow-sync status

    # Run synchronization
    doorflow-sync sync --dry-run
    doorflow-sync sync --create-missing
"""

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import NoReturn, Optional

import click

from doorflow_sync import __version__
from doorflow_sync.api.doorflow_api import (
    DoorFlowAPI,
    DoorFlowAPIError,
    NotAuthenticatedError,
)
from doorflow_sync.auth.doorflow_auth import (
    TOKENS_FILE,
    AuthenticationError,
    DoorFlowAuth,
    FileTokenStorage,
)
from doorflow_sync.cli.formatters import (
    show_event,
    show_member_detail,
    show_member_table,
    show_sync_details,
    show_team_table,
)
from doorflow_sync.config.generator import save_config_file
from doorflow_sync.config.loader import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    ConfigError,
    ConfigLoader,
)
from doorflow_sync.storage import (
    DuplicateMemberError,
    MemberStore,
    StorageError,
    TeamStore,
)
from doorflow_sync.sync.credentials import (
    CredentialError,
    CredentialKind,
    build_credential,
    credential_kind,
)
from doorflow_sync.sync.engine import SyncEngine
from doorflow_sync.sync.groups import GroupAssigner
from doorflow_sync.sync.member import Member, MembershipType
from doorflow_sync.utils import resolve_config_dir
from doorflow_sync.utils.logging import cleanup_old_logs, get_logger, setup_logging

NOT_AUTHENTICATED_MESSAGE = "Not authenticated. Run 'doorflow-sync auth' first."

MEMBERSHIP_CHOICES = [m.value for m in MembershipType]


def get_config_dir(config_dir: str | None) -> Path:
    """Get the configuration directory path."""
    return resolve_config_dir(config_dir)


def get_config_file(config_dir: Path, config_file: str | None) -> Path:
    """Get the configuration file path."""
    if config_file:
        return Path(config_file)
    return config_dir / DEFAULT_CONFIG_FILE


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


def fail_api(action: str, error: DoorFlowAPIError) -> NoReturn:
    """Report a DoorFlow API failure and exit."""
    logger = get_logger(__name__)
    logger.error(f"{action} failed: {error}")
    if isinstance(error, NotAuthenticatedError):
        fail(NOT_AUTHENTICATED_MESSAGE)
    fail(str(error))


def get_auth(ctx: click.Context) -> DoorFlowAuth:
    """Build the DoorFlow OAuth manager from the loaded configuration."""
    config: AppConfig = ctx.obj["config"]
    return DoorFlowAuth(
        client_id=config.client_id or "",
        client_secret=config.client_secret,
        storage=FileTokenStorage(config.data_dir / TOKENS_FILE),
        redirect_uri=config.redirect_uri,
        base_url=config.api_url,
    )


def get_api(ctx: click.Context, auth: Optional[DoorFlowAuth] = None) -> DoorFlowAPI:
    """Build the DoorFlow API client."""
    config: AppConfig = ctx.obj["config"]
    return DoorFlowAPI(
        auth or get_auth(ctx),
        base_url=config.api_url,
        timeout=config.request_timeout,
    )


def get_member_store(ctx: click.Context) -> MemberStore:
    return MemberStore.in_dir(ctx.obj["config"].data_dir)


def get_team_store(ctx: click.Context) -> TeamStore:
    return TeamStore.in_dir(ctx.obj["config"].data_dir)


def require_config(ctx: click.Context) -> None:
    """Exit with setup instructions if the OAuth client is not configured."""
    config: AppConfig = ctx.obj["config"]
    missing = config.missing_config
    if not missing:
        return
    click.echo(
        click.style(
            f"Error: Missing DoorFlow configuration: {', '.join(missing)}", fg="red"
        ),
        err=True,
    )
    click.echo("\nTo get started:", err=True)
    click.echo("1. Create an OAuth application in the DoorFlow developer portal", err=True)
    click.echo(f"2. Set its redirect URI to: {config.redirect_uri}", err=True)
    click.echo(
        "3. Set DOORFLOW_CLIENT_ID and DOORFLOW_CLIENT_SECRET, or add client_id "
        f"and client_secret to {ctx.obj['config_file']}",
        err=True,
    )
    sys.exit(1)


def push_member_groups(ctx: click.Context, member: Member) -> None:
    """
    Push a linked member's team groups to DoorFlow, if connected.

    Failures are reported as warnings; the local change stands.
    """
    logger = get_logger(__name__)
    if not member.is_linked():
        return

    auth = get_auth(ctx)
    if not auth.is_authenticated():
        click.echo(
            click.style(
                "Not connected to DoorFlow; DoorFlow groups were not updated.",
                fg="yellow",
            )
        )
        return

    assigner = GroupAssigner(get_api(ctx, auth), get_member_store(ctx), get_team_store(ctx))
    try:
        group_ids = assigner.sync_member_groups(member)
    except DoorFlowAPIError as e:
        logger.warning(f"Failed to update groups for member {member.id}: {e}")
        click.echo(
            click.style(f"Warning: DoorFlow groups were not updated: {e}", fg="yellow")
        )
        return

    click.echo(
        f"Updated DoorFlow groups for person {member.doorflow_person_id}: "
        f"{', '.join(str(g) for g in group_ids or []) or 'none'}"
    )


def push_team_members(ctx: click.Context, team_id: str) -> None:
    """Push groups for all linked members of a team, if connected."""
    auth = get_auth(ctx)
    if not auth.is_authenticated():
        click.echo(
            click.style(
                "Not connected to DoorFlow; member groups were not updated.",
                fg="yellow",
            )
        )
        return

    assigner = GroupAssigner(get_api(ctx, auth), get_member_store(ctx), get_team_store(ctx))
    count = assigner.sync_team_members(team_id)
    click.echo(f"Updated DoorFlow groups for {count} member(s).")


def format_timestamp(timestamp: Optional[int]) -> str:
    if not timestamp:
        return "unknown"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


@click.group()
@click.version_option(version=__version__, prog_name="doorflow-sync")
@click.option(
    "--verbose", "-v", is_flag=True, help="Enable verbose output with detailed logging."
)
@click.option(
    "--config-dir",
    "-c",
    type=click.Path(exists=False, file_okay=False, dir_okay=True),
    envvar="DOORFLOW_SYNC_CONFIG_DIR",
    help="Configuration directory path (default: ~/.doorflow-sync).",
)
@click.option(
    "--config-file",
    "-f",
    type=click.Path(exists=False, file_okay=True, dir_okay=False),
    envvar="DOORFLOW_SYNC_CONFIG_FILE",
    help="Configuration file path (default: <config-dir>/config.yaml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_dir: str | None,
    config_file: str | None,
) -> None:
    """
    CRM Member to DoorFlow Sync.

    Keeps DoorFlow people in step with CRM members: members are matched
    by email, missing people can be created, and team membership drives
    DoorFlow group assignments.
    """
    ctx.ensure_object(dict)

    resolved_config_dir = get_config_dir(config_dir)
    resolved_config_file = get_config_file(resolved_config_dir, config_file)

    ctx.obj["config_dir"] = resolved_config_dir
    ctx.obj["config_file"] = resolved_config_file

    config = {}
    try:
        loader = ConfigLoader(config_dir=resolved_config_dir)
        config = loader.load_from_file(resolved_config_file)
        if config:
            loader.validate(config)
    except ConfigError as e:
        # Show error but don't fail - allow CLI to work without config file
        click.echo(
            click.style(f"Warning: Configuration error: {e}", fg="yellow"), err=True
        )
        config = {}

    app_config = AppConfig.from_dict(config, resolved_config_dir)
    ctx.obj["config"] = app_config

    # CLI flag takes precedence over config file
    effective_verbose = verbose or app_config.verbose
    ctx.obj["verbose"] = effective_verbose

    setup_logging(
        app_config.log_dir, level=app_config.log_level, verbose=effective_verbose
    )
    cleanup_old_logs(app_config.log_dir, app_config.log_retention_count)


# =============================================================================
# Auth Commands
# =============================================================================


@cli.command("auth")
@click.option(
    "--code",
    help="Authorization code from the redirect (skips the browser flow).",
)
@click.option(
    "--no-browser", is_flag=True, help="Print the authorization URL only."
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Reconnect even if already connected.",
)
@click.pass_context
def auth_command(
    ctx: click.Context, code: str | None, no_browser: bool, force: bool
) -> None:
    """
    Connect to DoorFlow.

    Opens the DoorFlow authorization page, then asks for the URL you were
    redirected to after approving access.

    Examples:

        doorflow-sync auth

        # Exchange a code obtained elsewhere
        doorflow-sync auth --code abc123
    """
    logger = get_logger(__name__)
    require_config(ctx)
    auth = get_auth(ctx)

    if not force and auth.is_authenticated():
        click.echo(click.style("Already connected to DoorFlow.", fg="green"))
        click.echo("Use --force to reconnect.")
        return

    try:
        if code:
            auth.handle_callback(code, state=None, expected_state=None)
        else:
            url, state = auth.get_authorization_url()
            click.echo("Open this URL to authorize doorflow-sync:\n")
            click.echo(f"  {url}\n")
            if not no_browser:
                click.launch(url)
            redirect_url = click.prompt("Paste the URL you were redirected to")
            auth.handle_redirect(redirect_url, expected_state=state)
    except AuthenticationError as e:
        logger.error(f"Authentication failed: {e}")
        click.echo(click.style(f"Authentication failed: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style("Connected to DoorFlow!", fg="green"))
    logger.info("DoorFlow authentication completed")


@cli.command("status")
@click.pass_context
def status_command(ctx: click.Context) -> None:
    """
    Show connection and local data status.

    Example:

        doorflow-sync status
    """
    config: AppConfig = ctx.obj["config"]
    auth = get_auth(ctx)
    auth_status = auth.get_auth_status(config.missing_config)

    click.echo("=== DoorFlow Member Sync Status ===\n")
    click.echo(f"Configuration directory: {config.config_dir}")
    click.echo(f"Data directory: {config.data_dir}")
    click.echo(f"Photo directory: {config.photo_dir}")
    click.echo(f"DoorFlow host: {config.api_url}")
    click.echo()

    if not auth_status["configured"]:
        missing = ", ".join(auth_status.get("missing_config", []))
        click.echo(f"OAuth client: {click.style(f'Not configured (missing: {missing})', fg='red')}")
    elif auth_status["connected"]:
        click.echo(f"DoorFlow: {click.style('Connected', fg='green')}")
        click.echo(f"  Token expires: {format_timestamp(auth_status.get('expires_at'))}")
        if auth_status.get("scope"):
            click.echo(f"  Scopes: {auth_status['scope']}")
    else:
        click.echo(f"DoorFlow: {click.style('Not connected', fg='yellow')}")

    try:
        members = get_member_store(ctx).load_all()
        teams = get_team_store(ctx).load_all()
    except StorageError as e:
        fail(str(e))

    linked = sum(1 for m in members if m.is_linked())
    mapped = sum(1 for t in teams if t.is_mapped())
    click.echo()
    click.echo(f"Members: {len(members)} ({linked} linked to DoorFlow)")
    click.echo(f"Teams: {len(teams)} ({mapped} mapped to DoorFlow groups)")
    click.echo()

    if not auth_status["configured"]:
        click.echo(click.style("Setup required: configure the OAuth client.", fg="yellow"))
        click.echo("Run 'doorflow-sync init-config' to create a config file.")
    elif not auth_status["connected"]:
        click.echo(click.style("Connection required.", fg="yellow"))
        click.echo("  Run: doorflow-sync auth")
    else:
        click.echo(click.style("Ready to sync!", fg="green"))
        click.echo("Run 'doorflow-sync sync' to synchronize members.")


@cli.command("disconnect")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def disconnect_command(ctx: click.Context, yes: bool) -> None:
    """
    Disconnect from DoorFlow.

    Revokes the stored tokens (best-effort) and removes them.
    """
    if not yes:
        click.confirm("Disconnect from DoorFlow?", abort=True)

    if get_auth(ctx).disconnect():
        click.echo(click.style("Disconnected from DoorFlow.", fg="green"))
    else:
        click.echo("Not connected to DoorFlow.")


@cli.command("refresh")
@click.pass_context
def refresh_command(ctx: click.Context) -> None:
    """Force a refresh of the DoorFlow access token."""
    require_config(ctx)
    try:
        tokens = get_auth(ctx).refresh_access_token()
    except AuthenticationError as e:
        click.echo(click.style(f"Token refresh failed: {e}", fg="red"), err=True)
        click.echo("Run 'doorflow-sync auth' to reconnect.", err=True)
        sys.exit(1)

    click.echo(click.style("Access token refreshed.", fg="green"))
    click.echo(f"Expires: {format_timestamp(tokens.expires_at)}")


# =============================================================================
# Init-Config Command
# =============================================================================


@cli.command("init-config")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite existing configuration file if it exists.",
)
@click.pass_context
def init_config_command(ctx: click.Context, force: bool) -> None:
    """
    Generate a default configuration file.

    Creates a configuration file with all available options documented
    and commented out.

    Examples:

        doorflow-sync init-config

        doorflow-sync init-config --force
    """
    logger = get_logger(__name__)
    config_file = ctx.obj["config_file"]

    click.echo(f"Creating configuration file: {config_file}")

    success, error = save_config_file(config_file, overwrite=force)

    if success:
        click.echo(click.style("Configuration file created successfully!", fg="green"))
        click.echo(f"\nLocation: {config_file}")
        click.echo("\nNext steps:")
        click.echo("1. Set client_id and client_secret for your DoorFlow application")
        click.echo("2. Run 'doorflow-sync auth' to connect")
    else:
        logger.error(f"Failed to create configuration file: {error}")
        fail(error or "Failed to create configuration file")


# =============================================================================
# Sync Command
# =============================================================================


@cli.command("sync")
@click.option(
    "--create-missing",
    "-m",
    is_flag=True,
    help="Create DoorFlow people for members with no email match.",
)
@click.option(
    "--dry-run", "-n", is_flag=True, help="Preview changes without applying them."
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_context
def sync_command(
    ctx: click.Context, create_missing: bool, dry_run: bool, as_json: bool
) -> None:
    """
    Synchronize CRM members to DoorFlow people.

    Members are matched to DoorFlow people by email (case-insensitive).
    Links to people deleted in DoorFlow are cleared and rematched.

    Examples:

        # Preview without changing anything
        doorflow-sync sync --dry-run

        # Create people for unmatched members
        doorflow-sync sync --create-missing
    """
    logger = get_logger(__name__)
    config: AppConfig = ctx.obj["config"]
    verbose = ctx.obj["verbose"]

    effective_dry_run = dry_run or config.dry_run
    effective_create_missing = create_missing or config.create_missing

    engine = SyncEngine(
        get_api(ctx),
        get_member_store(ctx),
        get_team_store(ctx),
        photo_dir=config.photo_dir,
    )

    if not as_json:
        mode = "Analyzing" if effective_dry_run else "Synchronizing"
        click.echo(f"{mode} members with DoorFlow...")

    try:
        result = engine.synchronize(
            create_missing=effective_create_missing, dry_run=effective_dry_run
        )
    except DoorFlowAPIError as e:
        fail_api("Sync", e)
    except StorageError as e:
        logger.error(f"Sync failed: {e}")
        fail(str(e))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo("\n" + "=" * 50)
    click.echo(result.summary())
    click.echo("=" * 50)

    show_sync_details(result, verbose=verbose)

    if effective_dry_run:
        click.echo(click.style("\nDry run complete. No changes were made.", fg="yellow"))
        click.echo("Run without --dry-run to apply these changes.")
    elif result.has_errors():
        click.echo(
            click.style(
                f"\nWarning: {len(result.errors)} member(s) could not be created.",
                fg="yellow",
            )
        )
    else:
        click.echo(click.style("\nSync completed successfully!", fg="green"))


# =============================================================================
# Member Commands
# =============================================================================


@cli.group("members")
def members_group() -> None:
    """Manage CRM members."""
    pass


@members_group.command("list")
@click.option("--linked", "filter_linked", flag_value="linked", help="Only linked members.")
@click.option(
    "--unlinked", "filter_linked", flag_value="unlinked", help="Only unlinked members."
)
@click.option("--team", "team_id", help="Only members of this team.")
@click.pass_context
def members_list_command(
    ctx: click.Context, filter_linked: str | None, team_id: str | None
) -> None:
    """List CRM members."""
    store = get_member_store(ctx)
    try:
        members = store.in_team(team_id) if team_id else store.load_all()
    except StorageError as e:
        fail(str(e))

    if filter_linked == "linked":
        members = [m for m in members if m.is_linked()]
    elif filter_linked == "unlinked":
        members = [m for m in members if not m.is_linked()]

    if not members:
        click.echo("No members found.")
        return

    show_member_table(members)
    click.echo(f"\nTotal: {len(members)} member(s)")


@members_group.command("show")
@click.argument("member_id")
@click.pass_context
def members_show_command(ctx: click.Context, member_id: str) -> None:
    """Show a member's details."""
    member = get_member_store(ctx).get(member_id)
    if member is None:
        fail(f"Member not found: {member_id}")
    show_member_detail(member, get_team_store(ctx).load_all())


def _member_options(required: bool):
    """Shared options for members add/update."""

    def decorator(f):
        options = [
            click.option("--first-name", required=required, help="First name."),
            click.option("--last-name", required=required, help="Last name."),
            click.option("--email", required=required, help="Email address."),
            click.option("--phone", help="Phone number."),
            click.option("--department", help="Department."),
            click.option("--job-title", help="Job title."),
            click.option("--notes", help="Notes."),
            click.option("--organisation-id", type=int, help="DoorFlow organisation id."),
            click.option(
                "--membership-type",
                type=click.Choice(MEMBERSHIP_CHOICES, case_sensitive=False),
                help="Membership type.",
            ),
            click.option(
                "--team",
                "team_ids",
                multiple=True,
                help="Team id (repeat for several teams).",
            ),
        ]
        for option in reversed(options):
            f = option(f)
        return f

    return decorator


@members_group.command("add")
@_member_options(required=True)
@click.pass_context
def members_add_command(
    ctx: click.Context,
    first_name: str,
    last_name: str,
    email: str,
    phone: str | None,
    department: str | None,
    job_title: str | None,
    notes: str | None,
    organisation_id: int | None,
    membership_type: str | None,
    team_ids: tuple[str, ...],
) -> None:
    """
    Add a CRM member.

    Example:

        doorflow-sync members add --first-name Dan --last-name Brown \\
            --email dan.brown@example.com --team team-001
    """
    optional = {
        "phone": phone,
        "department": department,
        "job_title": job_title,
        "notes": notes,
        "organisation_id": organisation_id,
    }
    try:
        member = get_member_store(ctx).create(
            first_name=first_name,
            last_name=last_name,
            email=email,
            membership_type=membership_type or MembershipType.STANDARD,
            team_ids=list(team_ids),
            **{k: v for k, v in optional.items() if v is not None},
        )
    except (ValueError, DuplicateMemberError, StorageError) as e:
        fail(str(e))

    click.echo(click.style(f"Added member {member.display_name} ({member.id})", fg="green"))


@members_group.command("update")
@click.argument("member_id")
@_member_options(required=False)
@click.option("--clear-teams", is_flag=True, help="Remove the member from all teams.")
@click.pass_context
def members_update_command(
    ctx: click.Context,
    member_id: str,
    first_name: str | None,
    last_name: str | None,
    email: str | None,
    phone: str | None,
    department: str | None,
    job_title: str | None,
    notes: str | None,
    organisation_id: int | None,
    membership_type: str | None,
    team_ids: tuple[str, ...],
    clear_teams: bool,
) -> None:
    """
    Update a CRM member.

    Changing teams of a linked member updates their DoorFlow groups.
    """
    fields = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "phone": phone,
        "department": department,
        "job_title": job_title,
        "notes": notes,
        "organisation_id": organisation_id,
        "membership_type": membership_type,
    }
    fields = {k: v for k, v in fields.items() if v is not None}
    if clear_teams:
        fields["team_ids"] = []
    elif team_ids:
        fields["team_ids"] = list(team_ids)

    if not fields:
        fail("Nothing to update.")

    store = get_member_store(ctx)
    existing = store.get(member_id)
    if existing is None:
        fail(f"Member not found: {member_id}")

    try:
        member = store.update(member_id, **fields)
    except (ValueError, DuplicateMemberError, StorageError) as e:
        fail(str(e))

    click.echo(click.style(f"Updated member {member.display_name}", fg="green"))

    if "team_ids" in fields and set(existing.team_ids) != set(member.team_ids):
        push_member_groups(ctx, member)


@members_group.command("delete")
@click.argument("member_id")
@click.option(
    "--keep-remote", is_flag=True, help="Keep the linked DoorFlow person."
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def members_delete_command(
    ctx: click.Context, member_id: str, keep_remote: bool, yes: bool
) -> None:
    """
    Delete a CRM member.

    The linked DoorFlow person is deleted too unless --keep-remote is given.
    """
    logger = get_logger(__name__)
    store = get_member_store(ctx)
    member = store.get(member_id)
    if member is None:
        fail(f"Member not found: {member_id}")

    if not yes:
        click.confirm(f"Delete member {member.display_name}?", abort=True)

    if member.is_linked() and not keep_remote:
        try:
            get_api(ctx).delete_person(member.doorflow_person_id)
            click.echo(f"Deleted DoorFlow person {member.doorflow_person_id}")
        except DoorFlowAPIError as e:
            logger.warning(
                f"Failed to delete DoorFlow person {member.doorflow_person_id}: {e}"
            )
            click.echo(
                click.style(f"Warning: DoorFlow person was not deleted: {e}", fg="yellow")
            )

    store.delete(member_id)
    click.echo(click.style(f"Deleted member {member.display_name}", fg="green"))


# =============================================================================
# Team Commands
# =============================================================================


@cli.group("teams")
def teams_group() -> None:
    """Manage CRM teams and their DoorFlow group mappings."""
    pass


@teams_group.command("list")
@click.pass_context
def teams_list_command(ctx: click.Context) -> None:
    """List teams with their DoorFlow group mapping."""
    try:
        teams = get_team_store(ctx).load_all()
        members = get_member_store(ctx).load_all()
    except StorageError as e:
        fail(str(e))

    if not teams:
        click.echo("No teams found.")
        return

    counts: dict[str, int] = {}
    for member in members:
        for team_id in member.team_ids:
            counts[team_id] = counts.get(team_id, 0) + 1

    show_team_table(teams, counts)
    click.echo(f"\nTotal: {len(teams)} team(s)")


@teams_group.command("add")
@click.option("--name", required=True, help="Team name.")
@click.option("--description", help="Team description.")
@click.option("--group-id", type=int, help="DoorFlow group to map the team to.")
@click.pass_context
def teams_add_command(
    ctx: click.Context, name: str, description: str | None, group_id: int | None
) -> None:
    """Add a team."""
    try:
        team = get_team_store(ctx).create(name, description, doorflow_group_id=group_id)
    except (ValueError, StorageError) as e:
        fail(str(e))
    click.echo(click.style(f"Added team {team.name} ({team.id})", fg="green"))


@teams_group.command("update")
@click.argument("team_id")
@click.option("--name", help="Team name.")
@click.option("--description", help="Team description.")
@click.option("--group-id", type=int, help="DoorFlow group to map the team to.")
@click.option("--unmap", is_flag=True, help="Remove the DoorFlow group mapping.")
@click.pass_context
def teams_update_command(
    ctx: click.Context,
    team_id: str,
    name: str | None,
    description: str | None,
    group_id: int | None,
    unmap: bool,
) -> None:
    """
    Update a team.

    Changing the group mapping updates the DoorFlow groups of every
    linked member of the team.
    """
    if unmap and group_id is not None:
        fail("--group-id and --unmap cannot be used together.")

    fields: dict[str, object] = {}
    if name is not None:
        fields["name"] = name
    if description is not None:
        fields["description"] = description
    if unmap:
        fields["doorflow_group_id"] = None
    elif group_id is not None:
        fields["doorflow_group_id"] = group_id

    if not fields:
        fail("Nothing to update.")

    store = get_team_store(ctx)
    existing = store.get(team_id)
    if existing is None:
        fail(f"Team not found: {team_id}")

    try:
        team = store.update(team_id, **fields)
    except (ValueError, StorageError) as e:
        fail(str(e))

    click.echo(click.style(f"Updated team {team.name}", fg="green"))

    if team.doorflow_group_id != existing.doorflow_group_id:
        push_team_members(ctx, team_id)


@teams_group.command("delete")
@click.argument("team_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def teams_delete_command(ctx: click.Context, team_id: str, yes: bool) -> None:
    """
    Delete a team.

    Members keep the team id but it no longer grants a group; linked
    members of a mapped team have their DoorFlow groups updated.
    """
    store = get_team_store(ctx)
    team = store.get(team_id)
    if team is None:
        fail(f"Team not found: {team_id}")

    if not yes:
        click.confirm(f"Delete team {team.name}?", abort=True)

    store.delete(team_id)
    click.echo(click.style(f"Deleted team {team.name}", fg="green"))

    if team.is_mapped():
        push_team_members(ctx, team_id)


# =============================================================================
# DoorFlow Directory Commands
# =============================================================================


@cli.command("groups")
@click.pass_context
def groups_command(ctx: click.Context) -> None:
    """List DoorFlow groups and the teams mapped to them."""
    try:
        groups = get_api(ctx).list_groups()
    except DoorFlowAPIError as e:
        fail_api("List groups", e)

    if not groups:
        click.echo("No DoorFlow groups found.")
        return

    teams_by_group: dict[int, list[str]] = {}
    for team in get_team_store(ctx).mapped():
        teams_by_group.setdefault(team.doorflow_group_id, []).append(team.name)

    click.echo(f"{'ID':<10} {'Name':<35} {'Mapped teams'}")
    click.echo("-" * 70)
    for group in sorted(groups, key=lambda g: (g.get("name") or "").lower()):
        teams = ", ".join(teams_by_group.get(group.get("id"), [])) or "-"
        click.echo(f"{group.get('id')!s:<10} {group.get('name') or '':<35} {teams}")

    click.echo(f"\nTotal: {len(groups)} group(s)")


@cli.command("people")
@click.option("--email", help="Only the person with this exact email.")
@click.pass_context
def people_command(ctx: click.Context, email: str | None) -> None:
    """List DoorFlow people and the members linked to them."""
    api = get_api(ctx)
    try:
        people = api.list_people(email=email) if email else api.list_all_people()
    except DoorFlowAPIError as e:
        fail_api("List people", e)

    if not people:
        click.echo("No DoorFlow people found.")
        return

    linked = {m.doorflow_person_id: m for m in get_member_store(ctx).linked()}

    click.echo(f"{'ID':<10} {'Name':<25} {'Email':<35} {'Member'}")
    click.echo("-" * 90)
    for person in people:
        name = f"{person.get('first_name') or ''} {person.get('last_name') or ''}".strip()
        member = linked.get(person.get("id"))
        click.echo(
            f"{person.get('id')!s:<10} {name:<25} {person.get('email') or '-':<35} "
            f"{member.id if member else '-'}"
        )

    click.echo(f"\nTotal: {len(people)} person(s)")


@cli.command("credential-types")
@click.pass_context
def credential_types_command(ctx: click.Context) -> None:
    """List DoorFlow credential types."""
    try:
        types = get_api(ctx).list_credential_types()
    except DoorFlowAPIError as e:
        fail_api("List credential types", e)

    if not types:
        click.echo("No credential types found.")
        return

    click.echo(f"{'ID':<8} {'Label':<30} {'Slug':<25} {'Kind'}")
    click.echo("-" * 75)
    for ctype in types:
        kind = credential_kind(ctype.get("label", ""), ctype.get("slug", ""))
        click.echo(
            f"{ctype.get('id')!s:<8} {ctype.get('label') or '':<30} "
            f"{ctype.get('slug') or '':<25} {kind.value}"
        )


@cli.group("credentials")
def credentials_group() -> None:
    """Manage a DoorFlow person's credentials."""
    pass


@credentials_group.command("list")
@click.argument("person_id", type=int)
@click.pass_context
def credentials_list_command(ctx: click.Context, person_id: int) -> None:
    """List the credentials of a DoorFlow person."""
    try:
        credentials = get_api(ctx).list_person_credentials(person_id)
    except DoorFlowAPIError as e:
        fail_api("List credentials", e)

    if not credentials:
        click.echo(f"Person {person_id} has no credentials.")
        return

    for credential in credentials:
        label = credential.get("label") or f"Type {credential.get('credential_type_id')}"
        line = f"{credential.get('id')!s:<12} {label:<30}"
        if credential.get("value"):
            line += f" {credential['value']}"
        if credential.get("status"):
            line += f" ({credential['status']})"
        click.echo(line)


@credentials_group.command("add")
@click.argument("person_id", type=int)
@click.option(
    "--type", "credential_type_id", type=int, required=True, help="Credential type id."
)
@click.option("--value", help="Card number or PIN.")
@click.option(
    "--auto-generate", is_flag=True, help="Let DoorFlow generate the PIN."
)
@click.pass_context
def credentials_add_command(
    ctx: click.Context,
    person_id: int,
    credential_type_id: int,
    value: str | None,
    auto_generate: bool,
) -> None:
    """
    Add a credential to a DoorFlow person.

    Examples:

        doorflow-sync credentials add 42 --type 3 --value 12345678

        doorflow-sync credentials add 42 --type 5 --auto-generate
    """
    api = get_api(ctx)
    try:
        types = api.list_credential_types()
    except DoorFlowAPIError as e:
        fail_api("List credential types", e)

    ctype = next((t for t in types if t.get("id") == credential_type_id), None)
    if ctype is None:
        fail(f"Unknown credential type: {credential_type_id}")

    kind = credential_kind(ctype.get("label", ""), ctype.get("slug", ""))
    try:
        credential = build_credential(kind, value, auto_generate=auto_generate)
    except CredentialError as e:
        fail(str(e))

    try:
        created = api.create_credential(person_id, credential_type_id, credential.api_value())
    except DoorFlowAPIError as e:
        fail_api("Create credential", e)

    click.echo(
        click.style(
            f"Added {ctype.get('label') or 'credential'} to person {person_id}", fg="green"
        )
    )
    if kind is CredentialKind.MOBILE:
        click.echo("DoorFlow will send the person an invitation.")
    elif kind is CredentialKind.PIN and created and created.get("value"):
        click.echo(f"PIN: {created['value']}")


@credentials_group.command("delete")
@click.argument("person_id", type=int)
@click.argument("credential_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def credentials_delete_command(
    ctx: click.Context, person_id: int, credential_id: str, yes: bool
) -> None:
    """Delete one of a DoorFlow person's credentials."""
    if not yes:
        click.confirm(f"Delete credential {credential_id}?", abort=True)

    try:
        get_api(ctx).delete_credential(person_id, credential_id)
    except DoorFlowAPIError as e:
        fail_api("Delete credential", e)

    click.echo(click.style(f"Deleted credential {credential_id}", fg="green"))


@cli.command("events")
@click.option("--first-name", help="Filter by first name.")
@click.option("--last-name", help="Filter by last name.")
@click.option("--since", help="Only events after this ISO timestamp.")
@click.option("--limit", "-n", type=int, default=20, show_default=True)
@click.pass_context
def events_command(
    ctx: click.Context,
    first_name: str | None,
    last_name: str | None,
    since: str | None,
    limit: int,
) -> None:
    """Show recent DoorFlow access events."""
    try:
        events = get_api(ctx).list_events(
            first_name=first_name, last_name=last_name, since=since, limit=limit
        )
    except DoorFlowAPIError as e:
        fail_api("List events", e)

    if not events:
        click.echo("No events found.")
        return

    for event in events:
        show_event(event)


# =============================================================================
# Reset Command
# =============================================================================


@cli.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def reset_command(ctx: click.Context, yes: bool) -> None:
    """
    Reset to the sample data.

    Disconnects from DoorFlow and restores the sample members and teams,
    discarding all local changes. DoorFlow people are not touched.
    """
    logger = get_logger(__name__)

    if not yes:
        click.confirm(
            "This will disconnect from DoorFlow and replace all members and "
            "teams with sample data.\nContinue?",
            abort=True,
        )

    get_auth(ctx).disconnect()
    try:
        members = get_member_store(ctx).reset()
        teams = get_team_store(ctx).reset()
    except StorageError as e:
        fail(str(e))

    click.echo(click.style("Reset complete.", fg="green"))
    click.echo(f"Restored {len(members)} sample members and {len(teams)} sample teams.")
    logger.info("Local data reset to sample data")
