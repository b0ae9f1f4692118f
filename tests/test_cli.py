from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from tasklic.cli import cli

from .helpers import AUTHORITY_URL, FakeSession


@pytest.fixture
def env(monkeypatch: Any) -> None:
    monkeypatch.delenv("LICENSE_MANAGER_URL", raising=False)
    monkeypatch.setenv("LICENSE_ENCRYPTION_KEY", "cli-secret")
    monkeypatch.setenv("TASKLIC_APP_ID", "app1")


def test_cli_help():
    """Test CLI help command."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Usage:" in result.output
    for command in ("acquire", "validate", "status", "limits", "serve"):
        assert command in result.output


def test_cli_serve_help():
    """Test serve command help."""
    runner = CliRunner()
    result = runner.invoke(cli, ["serve", "--help"])
    assert result.exit_code == 0
    assert "Start the license admin API" in result.output


def test_cli_status_without_license(env, tmp_path: Path):
    """Test status for a client with nothing stored."""
    runner = CliRunner()
    result = runner.invoke(
        cli, ["status", "clientA", "--db-path", str(tmp_path / "l.db")]
    )
    assert result.exit_code == 0
    assert '"has_license": false' in result.output
    assert "No license found" in result.output


def test_cli_validate_without_license(env, tmp_path: Path):
    """Test validate exits non-zero when the license is not valid."""
    runner = CliRunner()
    result = runner.invoke(
        cli, ["validate", "clientA", "app.example.com", "--db-path", str(tmp_path / "l.db")]
    )
    assert result.exit_code == 1
    assert "No active license found" in result.output


def test_cli_acquire_without_url(env, tmp_path: Path):
    """Test acquire fails cleanly with no authority configured."""
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["acquire", "clientA", "https://app.example.com", "--db-path", str(tmp_path / "l.db")],
    )
    assert result.exit_code == 1
    assert "License manager URL not configured" in result.output


def test_cli_acquire_then_limits(env, tmp_path: Path, monkeypatch: Any):
    """Test acquiring a license and checking user limits against it."""
    monkeypatch.setattr("tasklic.client.authority.requests.Session", FakeSession)
    db = str(tmp_path / "l.db")
    runner = CliRunner()

    result = runner.invoke(
        cli,
        [
            "acquire",
            "clientA",
            "https://app.example.com",
            "--db-path",
            db,
            "--license-manager-url",
            AUTHORITY_URL,
        ],
    )
    assert result.exit_code == 0, result.output
    assert "License acquired successfully" in result.output
    assert "mutual_key" not in result.output

    result = runner.invoke(cli, ["limits", "clientA", "--db-path", db])
    assert result.exit_code == 0
    assert '"maximum": 10' in result.output

    result = runner.invoke(cli, ["limits", "clientA", "--users", "11", "--db-path", db])
    assert result.exit_code == 1
    assert "User limit exceeded" in result.output

    result = runner.invoke(
        cli, ["validate", "clientA", "app.example.com", "--db-path", db]
    )
    assert result.exit_code == 1
    assert "License has expired" in result.output
