"""
Tests for the CLI module.

Tests the command-line interface using Click's testing utilities. DoorFlow
is replaced by mocks; members and teams live in a temporary directory.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from doorflow_sync.api.doorflow_api import DoorFlowAPIError, NotAuthenticatedError
from doorflow_sync.auth.doorflow_auth import AuthenticationError
from doorflow_sync.cli import (
    DEFAULT_CONFIG_DIR,
    NOT_AUTHENTICATED_MESSAGE,
    cli,
    event_label,
    get_config_dir,
    get_config_file,
)
from doorflow_sync.storage import MemberStore, TeamStore
from doorflow_sync.sync.member import Member, Team

CLEAN_ENV = {
    "DOORFLOW_CLIENT_ID": None,
    "DOORFLOW_CLIENT_SECRET": None,
    "DOORFLOW_API_URL": None,
    "DOORFLOW_SYNC_CONFIG_DIR": None,
    "DOORFLOW_SYNC_CONFIG_FILE": None,
    "DOORFLOW_SYNC_LOG_LEVEL": None,
    "DOORFLOW_SYNC_DEBUG": None,
}


@pytest.fixture
def runner():
    return CliRunner(env=CLEAN_ENV)


@pytest.fixture
def config_dir(tmp_path):
    """Config directory with OAuth client settings."""
    (tmp_path / "config.yaml").write_text("client_id: cid\nclient_secret: secret\n")
    return tmp_path


@pytest.fixture
def data_dir(config_dir):
    return config_dir / "data"


@pytest.fixture
def member_store(data_dir):
    return MemberStore.in_dir(data_dir)


@pytest.fixture
def team_store(data_dir):
    return TeamStore.in_dir(data_dir)


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("doorflow_sync.cli.main.setup_logging"), patch(
        "doorflow_sync.cli.main.cleanup_old_logs"
    ):
        yield


@pytest.fixture
def mock_auth():
    """Patched DoorFlowAuth; connected by default."""
    with patch("doorflow_sync.cli.main.DoorFlowAuth") as mock_auth_class:
        auth = mock_auth_class.return_value
        auth.is_authenticated.return_value = True
        yield auth


@pytest.fixture
def mock_api(mock_auth):
    """Patched DoorFlowAPI instance."""
    with patch("doorflow_sync.cli.main.DoorFlowAPI") as mock_api_class:
        api = mock_api_class.return_value
        api.list_all_people.return_value = []
        yield api


def write_records(path, records):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([r.to_dict() for r in records]))


def invoke(runner, config_dir, *args, **kwargs):
    return runner.invoke(cli, ["--config-dir", str(config_dir), *args], **kwargs)


# ==============================================================================
# Helper and Group Tests
# ==============================================================================


class TestHelperFunctions:
    """Tests for CLI helper functions."""

    def test_default_config_dir_is_in_home(self):
        """Test that DEFAULT_CONFIG_DIR is in user's home directory."""
        assert Path.home() / ".doorflow-sync" == DEFAULT_CONFIG_DIR

    def test_get_config_dir_with_custom_path(self, tmp_path):
        """Test get_config_dir returns the resolved custom path."""
        assert get_config_dir(str(tmp_path)) == tmp_path.resolve()

    def test_get_config_file_default(self, tmp_path):
        """Test the config file defaults to config.yaml in the config dir."""
        assert get_config_file(tmp_path, None) == tmp_path / "config.yaml"

    def test_get_config_file_explicit(self, tmp_path):
        """Test an explicit config file is used as-is."""
        assert get_config_file(tmp_path, "/etc/df.yaml") == Path("/etc/df.yaml")

    def test_event_label(self):
        """Test event codes map to labels."""
        assert event_label(12) == "Access Granted"
        assert event_label(70) == "Access Granted"
        assert event_label(25) == "Access Denied"
        assert event_label(72) == "Access Denied"
        assert event_label(41) == "Auto-Unlock"
        assert event_label(90) == "Tamper Alert"
        assert event_label(55) == "Event"
        assert event_label(None) == "Event"


class TestCliGroup:
    """Tests for the main CLI group."""

    def test_cli_help(self, runner):
        """Test that CLI shows help."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "CRM Member to DoorFlow Sync" in result.output

    def test_cli_version(self, runner):
        """Test that CLI shows version."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "doorflow-sync" in result.output

    def test_verbose_passed_to_logging(self, runner, config_dir, mock_api):
        """Test --verbose configures debug logging."""
        with patch("doorflow_sync.cli.main.setup_logging") as mock_setup:
            invoke(runner, config_dir, "--verbose", "members", "list")
        assert mock_setup.call_args[1]["verbose"] is True

    def test_logging_follows_config(self, runner, tmp_path, mock_api):
        """Test the log directory, level and retention come from config.yaml."""
        (tmp_path / "config.yaml").write_text(
            "log_level: warning\nlog_retention_count: 3\n"
        )

        with patch("doorflow_sync.cli.main.setup_logging") as mock_setup, patch(
            "doorflow_sync.cli.main.cleanup_old_logs"
        ) as mock_cleanup:
            result = invoke(runner, tmp_path, "members", "list")

        assert result.exit_code == 0
        log_dir = tmp_path.resolve() / "logs"
        assert mock_setup.call_args[0][0] == log_dir
        assert mock_setup.call_args[1]["level"] == "WARNING"
        mock_cleanup.assert_called_once_with(log_dir, 3)

    def test_invalid_config_warns(self, runner, tmp_path):
        """Test a broken config file is reported but not fatal."""
        (tmp_path / "config.yaml").write_text("request_timeout: nope\n")

        result = invoke(runner, tmp_path, "members", "list")

        assert result.exit_code == 0
        assert "Configuration error" in result.output


# ==============================================================================
# Auth Command Tests
# ==============================================================================


class TestAuthCommands:
    """Tests for auth, status, disconnect and refresh."""

    def test_auth_requires_client_config(self, runner, tmp_path):
        """Test auth explains missing OAuth settings."""
        result = invoke(runner, tmp_path, "auth")

        assert result.exit_code == 1
        assert "client_id, client_secret" in result.output
        assert "DOORFLOW_CLIENT_ID" in result.output

    def test_auth_already_connected(self, runner, config_dir, mock_auth):
        """Test auth is skipped when already connected."""
        result = invoke(runner, config_dir, "auth")

        assert result.exit_code == 0
        assert "Already connected" in result.output
        mock_auth.get_authorization_url.assert_not_called()

    def test_auth_with_code(self, runner, config_dir, mock_auth):
        """Test --code exchanges the code directly."""
        mock_auth.is_authenticated.return_value = False

        result = invoke(runner, config_dir, "auth", "--code", "abc")

        assert result.exit_code == 0
        assert "Connected to DoorFlow" in result.output
        mock_auth.handle_callback.assert_called_once_with(
            "abc", state=None, expected_state=None
        )

    def test_auth_browser_flow(self, runner, config_dir, mock_auth):
        """Test the redirect URL is prompted for and handled."""
        mock_auth.is_authenticated.return_value = False
        mock_auth.get_authorization_url.return_value = ("https://df/auth", "s1")

        result = invoke(
            runner,
            config_dir,
            "auth",
            "--no-browser",
            input="http://localhost:3000/api/auth/callback?code=x&state=s1\n",
        )

        assert result.exit_code == 0
        assert "https://df/auth" in result.output
        mock_auth.handle_redirect.assert_called_once_with(
            "http://localhost:3000/api/auth/callback?code=x&state=s1",
            expected_state="s1",
        )

    def test_auth_failure(self, runner, config_dir, mock_auth):
        """Test authentication errors exit with status 1."""
        mock_auth.is_authenticated.return_value = False
        mock_auth.handle_callback.side_effect = AuthenticationError("bad code")

        result = invoke(runner, config_dir, "auth", "--code", "abc")

        assert result.exit_code == 1
        assert "bad code" in result.output

    def test_env_credentials_satisfy_config(self, tmp_path, mock_auth):
        """Test OAuth settings can come from the environment."""
        runner = CliRunner(
            env={**CLEAN_ENV, "DOORFLOW_CLIENT_ID": "a", "DOORFLOW_CLIENT_SECRET": "b"}
        )
        result = invoke(runner, tmp_path, "auth")
        assert "Already connected" in result.output

    def test_status_connected(self, runner, config_dir, mock_auth, member_store):
        """Test status shows connection and local counts."""
        write_records(
            member_store.path,
            [Member(id="m1", first_name="A", last_name="B", doorflow_person_id=1)],
        )
        mock_auth.get_auth_status.return_value = {
            "configured": True,
            "connected": True,
            "expires_at": None,
            "scope": "account.person",
        }

        result = invoke(runner, config_dir, "status")

        assert result.exit_code == 0
        assert "Connected" in result.output
        assert "Members: 1 (1 linked to DoorFlow)" in result.output
        assert "Ready to sync" in result.output

    def test_status_not_configured(self, runner, tmp_path, mock_auth):
        """Test status reports missing configuration."""
        mock_auth.get_auth_status.return_value = {
            "configured": False,
            "connected": False,
            "missing_config": ["client_id"],
        }

        result = invoke(runner, tmp_path, "status")

        assert result.exit_code == 0
        assert "missing: client_id" in result.output
        assert "init-config" in result.output

    def test_disconnect(self, runner, config_dir, mock_auth):
        """Test disconnect clears tokens."""
        mock_auth.disconnect.return_value = True

        result = invoke(runner, config_dir, "disconnect", "--yes")

        assert result.exit_code == 0
        assert "Disconnected" in result.output

    def test_disconnect_aborted(self, runner, config_dir, mock_auth):
        """Test declining the prompt does nothing."""
        result = invoke(runner, config_dir, "disconnect", input="n\n")

        assert result.exit_code == 1
        mock_auth.disconnect.assert_not_called()

    def test_refresh_failure(self, runner, config_dir, mock_auth):
        """Test a failed refresh suggests reconnecting."""
        mock_auth.refresh_access_token.side_effect = AuthenticationError("expired")

        result = invoke(runner, config_dir, "refresh")

        assert result.exit_code == 1
        assert "doorflow-sync auth" in result.output


class TestInitConfigCommand:
    """Tests for init-config."""

    def test_creates_file(self, runner, tmp_path):
        """Test the default config is written."""
        result = invoke(runner, tmp_path, "init-config")

        assert result.exit_code == 0
        assert (tmp_path / "config.yaml").exists()

    def test_existing_file(self, runner, config_dir):
        """Test an existing file is not overwritten without --force."""
        result = invoke(runner, config_dir, "init-config")

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert "client_id: cid" in (config_dir / "config.yaml").read_text()

    def test_force(self, runner, config_dir):
        """Test --force overwrites."""
        result = invoke(runner, config_dir, "init-config", "--force")

        assert result.exit_code == 0
        assert "client_id: cid" not in (config_dir / "config.yaml").read_text()


# ==============================================================================
# Sync Command Tests
# ==============================================================================


class TestSyncCommand:
    """Tests for the sync command."""

    @pytest.fixture
    def members(self, member_store):
        write_records(
            member_store.path,
            [
                Member(id="m1", first_name="Alice", last_name="Smith", email="a@x.com"),
                Member(id="m2", first_name="Bob", last_name="Jones", email="b@x.com"),
            ],
        )
        return member_store

    def test_sync_matches_and_reports_unmatched(self, runner, config_dir, mock_api, members):
        """Test matched members are linked and the rest reported."""
        mock_api.list_all_people.return_value = [{"id": 10, "email": "A@X.com"}]

        result = invoke(runner, config_dir, "sync")

        assert result.exit_code == 0
        assert "Matched: 1" in result.output
        assert "Unmatched: 1" in result.output
        assert "Bob Jones <b@x.com>" in result.output
        assert "--create-missing" in result.output
        assert members.get("m1").doorflow_person_id == 10

    def test_sync_create_missing(self, runner, config_dir, mock_api, members):
        """Test --create-missing creates and links people."""
        mock_api.create_person.side_effect = [{"id": 20}, {"id": 21}]

        result = invoke(runner, config_dir, "sync", "--create-missing")

        assert result.exit_code == 0
        assert "Created: 2" in result.output
        assert "Sync completed successfully" in result.output
        assert members.get("m2").doorflow_person_id == 21

    def test_sync_dry_run(self, runner, config_dir, mock_api, members):
        """Test --dry-run changes nothing."""
        before = members.path.read_text()

        result = invoke(runner, config_dir, "sync", "--dry-run", "--create-missing")

        assert result.exit_code == 0
        assert "Would create: 2" in result.output
        assert "No changes were made" in result.output
        mock_api.create_person.assert_not_called()
        assert members.path.read_text() == before

    def test_sync_errors_still_exit_zero(self, runner, config_dir, mock_api, members):
        """Test per-member failures are reported with a warning."""
        mock_api.create_person.side_effect = [
            DoorFlowAPIError("DoorFlow API error: 422"),
            {"id": 21},
        ]

        result = invoke(runner, config_dir, "sync", "-m")

        assert result.exit_code == 0
        assert "Errors: 1" in result.output
        assert "DoorFlow API error: 422" in result.output
        assert "1 member(s) could not be created" in result.output

    def test_sync_json(self, runner, config_dir, mock_api, members):
        """Test --json prints the four buckets."""
        mock_api.list_all_people.return_value = [{"id": 10, "email": "a@x.com"}]

        result = invoke(runner, config_dir, "sync", "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert set(data) == {"matched", "created", "unmatched", "errors"}
        assert data["matched"][0]["personId"] == 10
        assert data["unmatched"][0]["email"] == "b@x.com"

    def test_sync_not_authenticated(self, runner, config_dir, mock_api, members):
        """Test an unauthenticated listing aborts the sync."""
        mock_api.list_all_people.side_effect = NotAuthenticatedError()

        result = invoke(runner, config_dir, "sync")

        assert result.exit_code == 1
        assert NOT_AUTHENTICATED_MESSAGE in result.output

    def test_sync_listing_failure(self, runner, config_dir, mock_api, members):
        """Test other listing failures abort with the error."""
        mock_api.list_all_people.side_effect = DoorFlowAPIError("DoorFlow API error: 500")

        result = invoke(runner, config_dir, "sync")

        assert result.exit_code == 1
        assert "DoorFlow API error: 500" in result.output

    def test_sync_invalid_member_record(self, runner, config_dir, mock_api, member_store):
        """Test a bad member record stops the sync with a readable error."""
        member_store.path.parent.mkdir(parents=True, exist_ok=True)
        member_store.path.write_text(
            json.dumps([{"id": "m9", "firstName": "Zed", "membershipType": "gold"}])
        )

        result = invoke(runner, config_dir, "sync")

        assert result.exit_code == 1
        assert "Invalid member record 'm9'" in result.output
        assert not isinstance(result.exception, ValueError)
        mock_api.update_person.assert_not_called()

    def test_sync_create_missing_from_config(self, runner, config_dir, mock_api, members):
        """Test create_missing can be enabled in the config file."""
        (config_dir / "config.yaml").write_text(
            "client_id: cid\nclient_secret: secret\ncreate_missing: true\n"
        )
        mock_api.create_person.side_effect = [{"id": 20}, {"id": 21}]

        result = invoke(runner, config_dir, "sync")

        assert "Created: 2" in result.output


# ==============================================================================
# Member Command Tests
# ==============================================================================


class TestMemberCommands:
    """Tests for the members command group."""

    def test_list_empty(self, runner, config_dir):
        """Test listing with no members."""
        result = invoke(runner, config_dir, "members", "list")
        assert result.exit_code == 0
        assert "No members found" in result.output

    def test_list_filters(self, runner, config_dir, member_store):
        """Test --linked and --team filters."""
        write_records(
            member_store.path,
            [
                Member(id="m1", first_name="A", last_name="One", email="a@x.com",
                       team_ids=["t1"], doorflow_person_id=10),
                Member(id="m2", first_name="B", last_name="Two", email="b@x.com",
                       team_ids=["t1"]),
            ],
        )

        linked = invoke(runner, config_dir, "members", "list", "--linked")
        unlinked = invoke(runner, config_dir, "members", "list", "--unlinked")
        team = invoke(runner, config_dir, "members", "list", "--team", "t1")

        assert "a@x.com" in linked.output and "b@x.com" not in linked.output
        assert "b@x.com" in unlinked.output and "a@x.com" not in unlinked.output
        assert "Total: 2 member(s)" in team.output

    def test_add(self, runner, config_dir, member_store):
        """Test adding a member."""
        result = invoke(
            runner, config_dir, "members", "add",
            "--first-name", "Dan", "--last-name", "Brown",
            "--email", "dan@example.com", "--team", "t1", "--team", "t2",
            "--membership-type", "premium",
        )

        assert result.exit_code == 0
        member = member_store.get_by_email("dan@example.com")
        assert member.team_ids == ["t1", "t2"]
        assert member.membership_type.value == "premium"

    def test_add_duplicate_email(self, runner, config_dir, member_store):
        """Test duplicate emails are rejected."""
        member_store.create("Dan", "Brown", "dan@example.com")

        result = invoke(
            runner, config_dir, "members", "add",
            "--first-name", "D", "--last-name", "B", "--email", "DAN@example.com",
        )

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_show(self, runner, config_dir, member_store, team_store):
        """Test showing a member resolves team names."""
        write_records(team_store.path, [Team(id="t1", name="Engineering", doorflow_group_id=5)])
        write_records(
            member_store.path,
            [Member(id="m1", first_name="A", last_name="B", email="a@x.com", team_ids=["t1", "gone"])],
        )

        result = invoke(runner, config_dir, "members", "show", "m1")

        assert result.exit_code == 0
        assert "Engineering -> group 5" in result.output
        assert "gone (unknown team)" in result.output

    def test_show_missing(self, runner, config_dir):
        """Test showing an unknown member fails."""
        result = invoke(runner, config_dir, "members", "show", "nope")
        assert result.exit_code == 1
        assert "Member not found" in result.output

    def test_update_teams_pushes_groups(
        self, runner, config_dir, mock_api, member_store, team_store
    ):
        """Test changing a linked member's teams updates DoorFlow groups."""
        write_records(
            team_store.path,
            [
                Team(id="t1", name="Eng", doorflow_group_id=5),
                Team(id="t2", name="Sales", doorflow_group_id=7),
            ],
        )
        write_records(
            member_store.path,
            [Member(id="m1", first_name="A", last_name="B", email="a@x.com",
                    team_ids=["t1"], doorflow_person_id=10)],
        )

        result = invoke(runner, config_dir, "members", "update", "m1", "--team", "t2")

        assert result.exit_code == 0
        mock_api.update_person.assert_called_once_with(10, {"group_ids": [7]})
        assert member_store.get("m1").team_ids == ["t2"]

    def test_update_clear_teams(self, runner, config_dir, mock_api, member_store, team_store):
        """Test clearing teams pushes an empty group list."""
        write_records(team_store.path, [Team(id="t1", name="Eng", doorflow_group_id=5)])
        write_records(
            member_store.path,
            [Member(id="m1", first_name="A", last_name="B", email="a@x.com",
                    team_ids=["t1"], doorflow_person_id=10)],
        )

        result = invoke(runner, config_dir, "members", "update", "m1", "--clear-teams")

        assert result.exit_code == 0
        mock_api.update_person.assert_called_once_with(10, {"group_ids": []})

    def test_update_without_team_change_skips_push(
        self, runner, config_dir, mock_api, member_store
    ):
        """Test other field changes do not touch DoorFlow."""
        write_records(
            member_store.path,
            [Member(id="m1", first_name="A", last_name="B", email="a@x.com",
                    doorflow_person_id=10)],
        )

        result = invoke(runner, config_dir, "members", "update", "m1", "--job-title", "CTO")

        assert result.exit_code == 0
        mock_api.update_person.assert_not_called()

    def test_update_push_failure_is_warning(
        self, runner, config_dir, mock_api, member_store
    ):
        """Test a failed group push keeps the local change."""
        mock_api.update_person.side_effect = DoorFlowAPIError("down")
        write_records(
            member_store.path,
            [Member(id="m1", first_name="A", last_name="B", email="a@x.com",
                    doorflow_person_id=10)],
        )

        result = invoke(runner, config_dir, "members", "update", "m1", "--team", "t9")

        assert result.exit_code == 0
        assert "Warning" in result.output
        assert member_store.get("m1").team_ids == ["t9"]

    def test_update_nothing(self, runner, config_dir):
        """Test update without options fails."""
        result = invoke(runner, config_dir, "members", "update", "m1")
        assert result.exit_code == 1
        assert "Nothing to update" in result.output

    def test_delete_removes_remote_person(self, runner, config_dir, mock_api, member_store):
        """Test deleting a linked member deletes the DoorFlow person."""
        write_records(
            member_store.path,
            [Member(id="m1", first_name="A", last_name="B", email="a@x.com",
                    doorflow_person_id=10)],
        )

        result = invoke(runner, config_dir, "members", "delete", "m1", "--yes")

        assert result.exit_code == 0
        mock_api.delete_person.assert_called_once_with(10)
        assert member_store.get("m1") is None

    def test_delete_keep_remote(self, runner, config_dir, mock_api, member_store):
        """Test --keep-remote leaves the DoorFlow person."""
        write_records(
            member_store.path,
            [Member(id="m1", first_name="A", last_name="B", email="a@x.com",
                    doorflow_person_id=10)],
        )

        result = invoke(
            runner, config_dir, "members", "delete", "m1", "--yes", "--keep-remote"
        )

        assert result.exit_code == 0
        mock_api.delete_person.assert_not_called()
        assert member_store.get("m1") is None


# ==============================================================================
# Team Command Tests
# ==============================================================================


class TestTeamCommands:
    """Tests for the teams command group."""

    def test_add_and_list(self, runner, config_dir, team_store):
        """Test adding a mapped team and listing it."""
        result = invoke(
            runner, config_dir, "teams", "add", "--name", "Eng", "--group-id", "5"
        )
        assert result.exit_code == 0

        listed = invoke(runner, config_dir, "teams", "list")
        assert "Eng" in listed.output
        assert "Total: 1 team(s)" in listed.output
        assert team_store.mapped()[0].doorflow_group_id == 5

    def test_map_pushes_team_members(
        self, runner, config_dir, mock_api, member_store, team_store
    ):
        """Test mapping a team updates its linked members."""
        write_records(team_store.path, [Team(id="t1", name="Eng")])
        write_records(
            member_store.path,
            [Member(id="m1", first_name="A", last_name="B", email="a@x.com",
                    team_ids=["t1"], doorflow_person_id=10)],
        )

        result = invoke(runner, config_dir, "teams", "update", "t1", "--group-id", "5")

        assert result.exit_code == 0
        mock_api.update_person.assert_called_once_with(10, {"group_ids": [5]})
        assert "1 member(s)" in result.output

    def test_rename_does_not_push(self, runner, config_dir, mock_api, team_store):
        """Test renaming a team leaves DoorFlow alone."""
        write_records(team_store.path, [Team(id="t1", name="Eng", doorflow_group_id=5)])

        result = invoke(runner, config_dir, "teams", "update", "t1", "--name", "R&D")

        assert result.exit_code == 0
        assert team_store.get("t1").name == "R&D"
        mock_api.update_person.assert_not_called()

    def test_unmap_and_group_conflict(self, runner, config_dir):
        """Test --unmap and --group-id are exclusive."""
        result = invoke(
            runner, config_dir, "teams", "update", "t1", "--unmap", "--group-id", "5"
        )
        assert result.exit_code == 1
        assert "cannot be used together" in result.output

    def test_delete_mapped_team_pushes(
        self, runner, config_dir, mock_api, member_store, team_store
    ):
        """Test deleting a mapped team removes its group from members."""
        write_records(team_store.path, [Team(id="t1", name="Eng", doorflow_group_id=5)])
        write_records(
            member_store.path,
            [Member(id="m1", first_name="A", last_name="B", email="a@x.com",
                    team_ids=["t1"], doorflow_person_id=10)],
        )

        result = invoke(runner, config_dir, "teams", "delete", "t1", "--yes")

        assert result.exit_code == 0
        assert team_store.get("t1") is None
        assert member_store.get("m1").team_ids == ["t1"]
        mock_api.update_person.assert_called_once_with(10, {"group_ids": []})

    def test_map_when_not_connected(self, runner, config_dir, mock_auth, mock_api, team_store):
        """Test mapping offline only changes the local team."""
        mock_auth.is_authenticated.return_value = False
        write_records(team_store.path, [Team(id="t1", name="Eng")])

        result = invoke(runner, config_dir, "teams", "update", "t1", "--group-id", "5")

        assert result.exit_code == 0
        assert "Not connected" in result.output
        assert team_store.get("t1").doorflow_group_id == 5
        mock_api.update_person.assert_not_called()


# ==============================================================================
# DoorFlow Directory Command Tests
# ==============================================================================


class TestDirectoryCommands:
    """Tests for groups, people, credentials and events."""

    def test_groups_shows_mapped_teams(self, runner, config_dir, mock_api, team_store):
        """Test groups lists the teams mapped to each group."""
        write_records(team_store.path, [Team(id="t1", name="Eng", doorflow_group_id=5)])
        mock_api.list_groups.return_value = [
            {"id": 5, "name": "Office"},
            {"id": 6, "name": "Lab"},
        ]

        result = invoke(runner, config_dir, "groups")

        assert result.exit_code == 0
        assert "Eng" in result.output
        assert "Total: 2 group(s)" in result.output

    def test_groups_not_authenticated(self, runner, config_dir, mock_api):
        """Test API auth failures point at the auth command."""
        mock_api.list_groups.side_effect = NotAuthenticatedError()

        result = invoke(runner, config_dir, "groups")

        assert result.exit_code == 1
        assert NOT_AUTHENTICATED_MESSAGE in result.output

    def test_people_by_email(self, runner, config_dir, mock_api):
        """Test --email filters remotely."""
        mock_api.list_people.return_value = [
            {"id": 10, "first_name": "A", "last_name": "B", "email": "a@x.com"}
        ]

        result = invoke(runner, config_dir, "people", "--email", "a@x.com")

        assert result.exit_code == 0
        mock_api.list_people.assert_called_once_with(email="a@x.com")
        assert "a@x.com" in result.output

    def test_credential_types(self, runner, config_dir, mock_api):
        """Test credential types show their kind."""
        mock_api.list_credential_types.return_value = [
            {"id": 1, "label": "PIN", "slug": "pin"},
            {"id": 2, "label": "PassFlow", "slug": "passflow"},
        ]

        result = invoke(runner, config_dir, "credential-types")

        assert result.exit_code == 0
        assert "pin" in result.output
        assert "mobile" in result.output

    def test_credentials_add_auto_pin(self, runner, config_dir, mock_api):
        """Test adding an auto-generated PIN."""
        mock_api.list_credential_types.return_value = [
            {"id": 1, "label": "PIN", "slug": "pin"}
        ]
        mock_api.create_credential.return_value = {"id": "c1", "value": "4821"}

        result = invoke(
            runner, config_dir, "credentials", "add", "42", "--type", "1", "--auto-generate"
        )

        assert result.exit_code == 0
        mock_api.create_credential.assert_called_once_with(42, 1, "******")
        assert "PIN: 4821" in result.output

    def test_credentials_add_card_requires_value(self, runner, config_dir, mock_api):
        """Test a card credential needs a number."""
        mock_api.list_credential_types.return_value = [
            {"id": 3, "label": "Card", "slug": "card"}
        ]

        result = invoke(runner, config_dir, "credentials", "add", "42", "--type", "3")

        assert result.exit_code == 1
        assert "card number" in result.output
        mock_api.create_credential.assert_not_called()

    def test_credentials_add_unknown_type(self, runner, config_dir, mock_api):
        """Test unknown credential types are rejected."""
        mock_api.list_credential_types.return_value = []

        result = invoke(runner, config_dir, "credentials", "add", "42", "--type", "9")

        assert result.exit_code == 1
        assert "Unknown credential type" in result.output

    def test_credentials_list_and_delete(self, runner, config_dir, mock_api):
        """Test listing and deleting credentials."""
        mock_api.list_person_credentials.return_value = [
            {"id": "c1", "label": "Card", "value": "123", "status": "active"}
        ]

        listed = invoke(runner, config_dir, "credentials", "list", "42")
        deleted = invoke(runner, config_dir, "credentials", "delete", "42", "c1", "-y")

        assert "123 (active)" in listed.output
        assert deleted.exit_code == 0
        mock_api.delete_credential.assert_called_once_with(42, "c1")

    def test_events(self, runner, config_dir, mock_api):
        """Test events are listed with labels."""
        mock_api.list_events.return_value = [
            {
                "event_code": 12,
                "first_name": "Alice",
                "last_name": "Smith",
                "channel_name": "Front Door",
                "timestamp": "2026-01-01T09:00:00Z",
            }
        ]

        result = invoke(runner, config_dir, "events", "--limit", "5")

        assert result.exit_code == 0
        assert "Access Granted" in result.output
        assert "Front Door" in result.output
        assert mock_api.list_events.call_args[1]["limit"] == 5


# ==============================================================================
# Reset Command Tests
# ==============================================================================


class TestResetCommand:
    """Tests for reset."""

    def test_reset_restores_samples(self, runner, config_dir, mock_auth, member_store):
        """Test reset disconnects and restores sample data."""
        member_store.create("Dan", "Brown", "dan@example.com")

        result = invoke(runner, config_dir, "reset", "--yes")

        assert result.exit_code == 0
        mock_auth.disconnect.assert_called_once()
        assert member_store.get_by_email("dan@example.com") is None
        assert len(member_store.load_all()) == 4
        assert "Restored 4 sample members and 3 sample teams" in result.output

    def test_reset_aborted(self, runner, config_dir, mock_auth):
        """Test declining the prompt keeps data."""
        result = invoke(runner, config_dir, "reset", input="n\n")

        assert result.exit_code == 1
        mock_auth.disconnect.assert_not_called()
