# tests/test_cli.py

from __future__ import annotations

import json
from dataclasses import replace

import pytest

from thumb_tasks.cli import main as cli
from thumb_tasks.config import Settings
from thumb_tasks.core.run import RunResult


@pytest.fixture()
def patched(monkeypatch: pytest.MonkeyPatch, settings: Settings):
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    return monkeypatch


def test_run_prints_result_and_exit_code(patched, capsys) -> None:
    async def fake_run_once(settings: Settings) -> RunResult:
        return RunResult(ok=True, checked=4, reported=1)

    patched.setattr(cli, "run_once", fake_run_once)

    assert cli.main(["run"]) == 0
    assert json.loads(capsys.readouterr().out) == {"ok": True, "checked": 4, "reported": 1}


def test_failed_run_exits_non_zero(patched, capsys) -> None:
    async def fake_run_once(settings: Settings) -> RunResult:
        return RunResult(ok=False, error="getUpdates error")

    patched.setattr(cli, "run_once", fake_run_once)

    assert cli.main(["run"]) == 1
    assert json.loads(capsys.readouterr().out)["error"] == "getUpdates error"


def test_run_with_missing_config(monkeypatch: pytest.MonkeyPatch, settings: Settings, capsys) -> None:
    monkeypatch.setattr(cli, "get_settings", lambda: replace(settings, admin_chat_id=""))
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)

    assert cli.main(["run"]) == 2
    assert "ADMIN_CHAT_ID" in json.loads(capsys.readouterr().out)["error"]


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])
    args = cli.build_parser().parse_args(["serve", "--port", "8000"])
    assert (args.command, args.port, args.host) == ("serve", 8000, "127.0.0.1")
