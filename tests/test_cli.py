"""Tests for CLI module."""

import pytest
from datetime import date, datetime, timezone
from unittest.mock import patch, MagicMock
from typer.testing import CliRunner

from jira_cli.cli import app
from jira_cli.errors import RemoteRejection
from jira_cli.jira_api import Issue, WorklogEntry


runner = CliRunner()


def make_entry(started):
    return WorklogEntry(author="Test User", time_spent="6h", time_spent_seconds=21600, started=started)


@pytest.fixture
def mock_client():
    """Patch the client factory used by the commands."""
    with patch("jira_cli.cli.get_client") as mock_get_client:
        client = MagicMock()
        mock_get_client.return_value = client
        yield client


class TestCliCommands:
    """Tests for CLI commands."""

    def test_help(self):
        """Test help command."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "logwork" in result.output
        assert "list" in result.output

    def test_logwork_help(self):
        """Test logwork command help."""
        result = runner.invoke(app, ["logwork", "--help"])
        assert result.exit_code == 0
        assert "--period" in result.output

    def test_list_help(self):
        """Test list command help."""
        result = runner.invoke(app, ["list", "--help"])
        assert result.exit_code == 0
        assert "--object" in result.output


class TestLogworkCommand:
    """Tests for logwork command."""

    def test_bad_flag_combination(self, mock_client):
        """Test missing issue key exits before any remote call."""
        result = runner.invoke(app, ["logwork", "-t", "6"])

        assert result.exit_code == 1
        assert "bad flag combination" in result.output
        mock_client.add_worklog.assert_not_called()

    def test_log_explicit_date(self, mock_client):
        """Test logging one explicit date."""
        mock_client.add_worklog.side_effect = (
            lambda key, started, seconds, comment: make_entry(started)
        )

        result = runner.invoke(app, ["logwork", "-i", "X-1", "-t", "2.5", "-d", "12/07/2024", "-m", "review"])

        assert result.exit_code == 0
        key, started, seconds, comment = mock_client.add_worklog.call_args.args
        assert key == "X-1"
        assert started.date().isoformat() == "2024-07-12"
        assert seconds == 9000
        assert comment == "review"
        assert "6h of work logged for Test User" in result.output

    def test_last_week_not_implemented(self, mock_client):
        """Test lastweek reports not implemented."""
        result = runner.invoke(app, ["logwork", "-i", "X-1", "--period", "lastweek"])

        assert result.exit_code == 1
        assert "Not Implemented" in result.output
        mock_client.add_worklog.assert_not_called()

    def test_partial_failure_exit_code(self, mock_client):
        """Test one failing day reports the error after the successes."""
        mock_client.add_worklog.side_effect = [
            make_entry(datetime(2024, 7, 1, 10, tzinfo=timezone.utc)),
            RemoteRejection("Issue does not exist"),
        ]

        with patch("jira_cli.worklog.expand_period") as mock_expand:
            mock_expand.return_value = [date(2024, 7, 1), date(2024, 7, 2)]
            result = runner.invoke(app, ["logwork", "-i", "X-1", "--period", "month"])

        assert result.exit_code == 1
        assert result.output.index("work logged") < result.output.index("Issue does not exist")

    def test_invalid_period(self):
        """Test unknown period is rejected by the parser."""
        result = runner.invoke(app, ["logwork", "-i", "X-1", "--period", "year"])
        assert result.exit_code != 0

    def test_missing_configuration(self, clean_env):
        """Test missing environment variables are reported."""
        result = runner.invoke(app, ["logwork", "-i", "X-1"])

        assert result.exit_code == 1
        assert "JIRA_API_KEY" in result.output


class TestListCommand:
    """Tests for list command."""

    def test_missing_object(self, mock_client):
        """Test list without --object fails."""
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 1
        assert "Bad flag for object" in result.output

    def test_invalid_year(self, mock_client):
        """Test an unrepresentable year is reported without a traceback."""
        result = runner.invoke(app, ["list", "--object", "worklogs", "-y", "0"])

        assert result.exit_code == 1
        assert "invalid year 0" in result.output
        mock_client.search_issues.assert_not_called()

    def test_list_worklogs(self, mock_client):
        """Test worklog table listing."""
        mock_client.search_issues.return_value = [
            Issue(id="1", key="A-1", summary="a", updated=datetime(2024, 2, 20).astimezone()),
        ]
        mock_client.get_worklogs.return_value = [
            make_entry(datetime(2024, 2, 5, 10).astimezone()),
        ]

        result = runner.invoke(app, ["list", "--object", "worklogs", "-m", "2", "-y", "2024"])

        assert result.exit_code == 0
        assert "Listing issue worklogs for Month February, 2024" in result.output
        assert "A-1" in result.output

    def test_list_issues(self, mock_client):
        """Test issue listing."""
        mock_client.search_issues.return_value = [
            Issue(id="1", key="A-1", summary="Fix login", updated=datetime(2024, 2, 20, 9, 0)),
        ]

        result = runner.invoke(app, ["list", "--object", "issues"])

        assert result.exit_code == 0
        assert "A-1" in result.output
        mock_client.get_worklogs.assert_not_called()


class TestDumpenvCommand:
    """Tests for dumpenv command."""

    def test_creates_env_file(self, tmp_path, monkeypatch):
        """Test .env template is written in the working directory."""
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["dumpenv"])

        assert result.exit_code == 0
        assert "# JIRA_API_KEY=" in (tmp_path / ".env").read_text()

    def test_existing_env_file(self, tmp_path, monkeypatch):
        """Test an existing .env is kept."""
        monkeypatch.chdir(tmp_path)
        env_file = tmp_path / ".env"
        env_file.write_text("JIRA_API_KEY=keep\n")

        result = runner.invoke(app, ["dumpenv"])

        assert result.exit_code == 1
        assert "file already exists" in result.output
        assert env_file.read_text() == "JIRA_API_KEY=keep\n"


class TestWhoamiCommand:
    """Tests for whoami command."""

    def test_connected(self, mock_client):
        """Test successful connection output."""
        mock_client.test_connection.return_value = (True, "Connected as: Test User")

        result = runner.invoke(app, ["whoami"])

        assert result.exit_code == 0
        assert "Test User" in result.output

    def test_connection_failed(self, mock_client):
        """Test failed connection exit code."""
        mock_client.test_connection.return_value = (False, "Connection failed: refused")

        result = runner.invoke(app, ["whoami"])

        assert result.exit_code == 1
        assert "refused" in result.output
