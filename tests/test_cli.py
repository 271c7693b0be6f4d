"""Tests for the command-line interface."""

import argparse
import io
import json
import os

import pytest
from unittest.mock import Mock, patch

from directory_client.cli import DirectoryClientCommand, main
from directory_client.config.loader import CONFIG_ENV_VAR, load_config
from directory_client.core.exceptions import EnumerationError, UnauthorizedError
from directory_client.models import DirectoryGroupMembership


@pytest.fixture
def config_file(tmp_path):
    """Temporary JSON config file for the CLI."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "directory": {
            "urls": ["dc1.test.local:389"],
            "reader_dn": "CN=reader,DC=test,DC=local",
            "password": "password123",
            "search_settings": [
                {"base_dn": "OU=Staff,DC=test,DC=local", "username_attribute": "uid"}
            ]
        }
    }))
    return str(path)


@pytest.fixture
def mock_service():
    """Mock directory service."""
    return Mock()


def run(mock_service, argv):
    """Run the command with the given arguments and return the exit code and JSON output."""
    stdout = io.StringIO()
    command = DirectoryClientCommand(service=mock_service, stdout=stdout)
    parser = argparse.ArgumentParser()
    command.add_arguments(parser)
    with patch('directory_client.cli.setup_logging'):
        code = command.handle(**vars(parser.parse_args(argv)))
    return code, json.loads(stdout.getvalue())


class TestDirectoryClientCommand:

    def test_connectivity(self, mock_service, config_file):
        """Test the connectivity operation."""
        code, output = run(mock_service, ["--config", config_file, "test"])

        assert code == 0
        assert output == {"success": True}
        mock_service.test_connectivity.assert_called_once()

    def test_config_from_environment(self, mock_service, config_file):
        """Test that the configuration path falls back to the environment variable."""
        with patch.dict(os.environ, {CONFIG_ENV_VAR: config_file}), \
             patch('directory_client.cli.load_config', wraps=load_config) as mock_load:
            code, output = run(mock_service, ["test"])

        assert code == 0
        mock_load.assert_called_once_with(None)
        assert mock_service.test_connectivity.call_args.args[0].urls == ["dc1.test.local:389"]

    def test_auth_with_password_argument(self, mock_service, config_file):
        """Test authentication with the password on the command line."""
        code, output = run(mock_service, ["--config", config_file, "auth", "jdoe", "--password", "s3cret"])

        assert code == 0
        assert output["username"] == "jdoe"
        username, password, settings = mock_service.authenticate.call_args.args
        assert (username, password) == ("jdoe", "s3cret")
        assert settings.urls == ["dc1.test.local:389"]

    @patch('directory_client.cli.getpass.getpass', return_value="prompted")
    def test_auth_prompts_for_password(self, mock_getpass, mock_service, config_file):
        """Test that a missing password is prompted for."""
        run(mock_service, ["--config", config_file, "auth", "jdoe"])

        mock_getpass.assert_called_once()
        assert mock_service.authenticate.call_args.args[1] == "prompted"

    def test_auth_failure(self, mock_service, config_file):
        """Test that failed authentication exits non-zero with the error."""
        mock_service.authenticate.side_effect = UnauthorizedError()

        code, output = run(mock_service, ["--config", config_file, "auth", "jdoe", "--password", "x"])

        assert code == 1
        assert output == {"success": False, "error": "Unauthorized", "error_type": "UnauthorizedError"}

    def test_groups(self, mock_service, config_file):
        """Test successful group listing."""
        mock_service.get_user_groups.return_value = ["admins", "dev"]

        code, output = run(mock_service, ["--config", config_file, "groups", "jdoe"])

        assert code == 0
        assert output == {"username": "jdoe", "groups": ["admins", "dev"]}

    def test_users(self, mock_service, config_file):
        """Test user enumeration output."""
        mock_service.search_users.return_value = ["alice", "bob"]

        code, output = run(mock_service, ["--config", config_file, "users"])

        assert output == {"users": ["alice", "bob"]}

    def test_memberships(self, mock_service, config_file):
        """Test membership enumeration output."""
        mock_service.search_groups.return_value = [DirectoryGroupMembership(name="CN=a", group="admins")]

        code, output = run(mock_service, ["--config", config_file, "memberships"])

        assert output == {"memberships": [{"name": "CN=a", "group": "admins"}]}

    def test_partial_results_are_reported(self, mock_service, config_file):
        """Test that partial results are printed with the error."""
        mock_service.search_groups.side_effect = EnumerationError(
            "Search failed", partial_results=[DirectoryGroupMembership(name="CN=a", group="admins")]
        )

        code, output = run(mock_service, ["--config", config_file, "memberships"])

        assert code == 1
        assert output["partial_results"] == [{"name": "CN=a", "group": "admins"}]


class TestMain:

    def test_missing_config_exits(self):
        """Test that a missing config file exits with status 2."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", "/nonexistent/config.json", "test"])

        assert exc_info.value.code == 2
