"""Tests for CLI main module."""

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from chatcmd.cli.main import app
from chatcmd.messagebus.cli_bus import CliBus

runner = CliRunner()


def test_commands_registered():
    """Test that run and try commands are registered."""
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "run" in result.output
    assert "try" in result.output


def test_try_help_prints_help(tmp_path):
    result = runner.invoke(app, ["--workspace", str(tmp_path), "try", "help"])

    assert result.exit_code == 0
    assert "Help" in result.output
    assert "help" in result.output


def test_try_unknown_command_fails(tmp_path):
    result = runner.invoke(app, ["--workspace", str(tmp_path), "try", "nothing-here"])

    assert result.exit_code == 1
    assert "No command matches 'nothing-here'" in result.output


def test_invalid_config_fails(tmp_path):
    (tmp_path / "config.user.yaml").write_text("commands:\n  help_names: []\n")

    result = runner.invoke(app, ["--workspace", str(tmp_path), "try", "help"])

    assert result.exit_code == 1
    assert "Error loading config" in result.output


def test_run_without_buses_fails(tmp_path):
    result = runner.invoke(app, ["--workspace", str(tmp_path), "run"])

    assert result.exit_code == 1
    assert "No message bus enabled" in result.output


def test_run_cli_uses_cli_bus(tmp_path):
    with patch("chatcmd.cli.server.run_buses", new_callable=AsyncMock) as mock_run:
        result = runner.invoke(app, ["--workspace", str(tmp_path), "run", "--cli"])

    assert result.exit_code == 0
    assert "platform(s): cli" in result.output
    buses = mock_run.call_args.args[1]
    assert len(buses) == 1
    assert isinstance(buses[0], CliBus)
