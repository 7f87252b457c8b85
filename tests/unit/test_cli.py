"""Tests for CLI entry point."""

from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from migledger.__main__ import cli

pytestmark = pytest.mark.usefixtures("restore_logging")


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a config pointing at a SQLite ledger in tmp_path."""
    path = tmp_path / "migledger.yaml"
    path.write_text(
        f"""
storage:
  backend: sqlite
  sqlite_path: {tmp_path / "ledger.db"}
logging:
  level: ERROR
"""
    )
    return path


def invoke(runner: CliRunner, config_file: Path, *args: str) -> Result:
    return runner.invoke(cli, [*args, "--config", str(config_file)])


def test_cli_help(runner: CliRunner) -> None:
    """Test CLI help command."""
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Migration ledger and lock" in result.output
    for command in ("provision", "deprovision", "status", "add", "finish", "unlock"):
        assert command in result.output


def test_cli_version(runner: CliRunner) -> None:
    """Test CLI version command."""
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "version" in result.output.lower()


def test_provision_command(runner: CliRunner, config_file: Path) -> None:
    result = invoke(runner, config_file, "provision")
    assert result.exit_code == 0, result.output
    assert "_migrations, _migrations-lock" in result.output


def test_status_on_empty_ledger(runner: CliRunner, config_file: Path) -> None:
    invoke(runner, config_file, "provision")
    result = invoke(runner, config_file, "status")
    assert result.exit_code == 0, result.output
    assert "No migrations recorded." in result.output
    assert "Current: none" in result.output
    assert "Lock: free" in result.output


def test_add_finish_status(runner: CliRunner, config_file: Path) -> None:
    invoke(runner, config_file, "provision")
    assert invoke(runner, config_file, "add", "0001").exit_code == 0
    assert invoke(runner, config_file, "finish", "0001").exit_code == 0
    assert invoke(runner, config_file, "add", "0002").exit_code == 0

    result = invoke(runner, config_file, "status")

    assert "0001  done" in result.output
    assert "0002  DIRTY" in result.output
    assert "Current: unavailable (dirty migration 0002)" in result.output


def test_start_and_remove(runner: CliRunner, config_file: Path) -> None:
    invoke(runner, config_file, "provision")
    invoke(runner, config_file, "add", "0001")
    invoke(runner, config_file, "finish", "0001")

    result = invoke(runner, config_file, "start", "0001")
    assert result.exit_code == 0
    assert "Marked 0001 dirty" in result.output

    result = invoke(runner, config_file, "remove", "0001")
    assert result.exit_code == 0
    assert "No migrations recorded." in invoke(runner, config_file, "status").output


def test_duplicate_add_exits_with_error(runner: CliRunner, config_file: Path) -> None:
    invoke(runner, config_file, "provision")
    invoke(runner, config_file, "add", "0001")
    result = invoke(runner, config_file, "add", "0001")
    assert result.exit_code == 1
    assert "migration already exists: 0001" in result.output


def test_finish_missing_exits_with_error(runner: CliRunner, config_file: Path) -> None:
    invoke(runner, config_file, "provision")
    result = invoke(runner, config_file, "finish", "0009")
    assert result.exit_code == 1
    assert "migration not found: 0009" in result.output


def test_unlock_requires_confirmation(runner: CliRunner, config_file: Path) -> None:
    invoke(runner, config_file, "provision")
    result = runner.invoke(cli, ["unlock", "--config", str(config_file)], input="n\n")
    assert result.exit_code != 0
    assert "Aborted" in result.output


def test_unlock_with_yes(runner: CliRunner, config_file: Path) -> None:
    invoke(runner, config_file, "provision")
    result = invoke(runner, config_file, "unlock", "--yes")
    assert result.exit_code == 0
    assert "Lock released" in result.output


def test_deprovision_with_yes(runner: CliRunner, config_file: Path) -> None:
    invoke(runner, config_file, "provision")
    result = invoke(runner, config_file, "deprovision", "--yes")
    assert result.exit_code == 0
    assert "Tables deleted" in result.output

    result = invoke(runner, config_file, "status")
    assert result.exit_code == 1
    assert "failed to scan migrations table" in result.output
