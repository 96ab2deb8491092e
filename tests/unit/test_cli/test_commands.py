"""Tests for the management CLI against a file-backed SQLite database."""

from __future__ import annotations

import re
import uuid

from click.testing import CliRunner
import pytest

from cleancut_service.cli.main import cli
from cleancut_service.core.settings import clear_all_caches
from cleancut_service.infra.storage import reset_asset_store

UUID_RE = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("DB_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/cli.db")
    monkeypatch.setenv("STORAGE_LOCAL_ROOT", str(tmp_path / "assets"))
    clear_all_caches()
    reset_asset_store()

    runner = CliRunner()
    result = runner.invoke(cli, ["db", "init"], obj={})
    assert result.exit_code == 0, result.output
    assert "Database ready" in result.output

    yield runner

    clear_all_caches()
    reset_asset_store()


def _create_account(runner: CliRunner, *args: str) -> str:
    result = runner.invoke(cli, ["accounts", "create", *args], obj={})
    assert result.exit_code == 0, result.output
    match = UUID_RE.search(result.output)
    assert match is not None
    return match.group(0)


@pytest.mark.unit
def test_version():
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output


@pytest.mark.unit
def test_create_account_and_show_usage(runner):
    account_id = _create_account(runner, "--email", "cli@example.com", "--plan", "premium")

    result = runner.invoke(cli, ["accounts", "usage", account_id], obj={})

    assert result.exit_code == 0, result.output
    assert "premium (active)" in result.output
    assert "0 / unlimited" in result.output
    assert "high" in result.output


@pytest.mark.unit
def test_duplicate_email_fails(runner):
    _create_account(runner, "--email", "dup@example.com")

    result = runner.invoke(cli, ["accounts", "create", "--email", "dup@example.com"], obj={})

    assert result.exit_code == 1
    assert "Email already registered" in result.output


@pytest.mark.unit
def test_unknown_plan_is_rejected_by_click(runner):
    result = runner.invoke(cli, ["accounts", "create", "--plan", "platinum"], obj={})

    assert result.exit_code == 2


@pytest.mark.unit
def test_set_plan(runner):
    account_id = _create_account(runner)

    result = runner.invoke(
        cli, ["accounts", "set-plan", account_id, "intermediate", "--days", "30"], obj={}
    )
    assert result.exit_code == 0, result.output
    assert "'intermediate'" in result.output

    usage = runner.invoke(cli, ["accounts", "usage", account_id], obj={})
    assert "0 / 30" in usage.output


@pytest.mark.unit
def test_usage_unknown_account(runner):
    result = runner.invoke(cli, ["accounts", "usage", str(uuid.uuid4())], obj={})

    assert result.exit_code == 1
    assert "Account not found" in result.output


@pytest.mark.unit
def test_db_check_counts_rows(runner):
    _create_account(runner)

    result = runner.invoke(cli, ["db", "check"], obj={})

    assert result.exit_code == 0, result.output
    assert re.search(r"accounts\s+1", result.output)
    assert re.search(r"projects\s+0", result.output)


@pytest.mark.unit
def test_queue_commands(runner):
    stats = runner.invoke(cli, ["queue", "stats"], obj={})
    assert stats.exit_code == 0, stats.output
    assert "Queue entries" in stats.output

    reap = runner.invoke(cli, ["queue", "reap"], obj={})
    assert reap.exit_code == 0, reap.output
    assert "Reaped 0 expired leases" in reap.output


@pytest.mark.unit
def test_sweep_commands(runner):
    _create_account(runner)

    swept = runner.invoke(cli, ["sweep", "run"], obj={})
    assert swept.exit_code == 0, swept.output
    assert "Swept 0/0 expired projects" in swept.output

    reclaim = runner.invoke(cli, ["sweep", "reclaim", str(uuid.uuid4())], obj={})
    assert reclaim.exit_code == 0, reclaim.output
    assert "nothing to do" in reclaim.output

    reset = runner.invoke(cli, ["sweep", "reset-monthly"], obj={})
    assert reset.exit_code == 0, reset.output
    assert "Reset monthly counters for 1 accounts" in reset.output
