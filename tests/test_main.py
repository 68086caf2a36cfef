import argparse

import pytest

from regbot import main as cli
from regbot.config import settings


def test_serve_debug_flag_sets_uvicorn_log_level(monkeypatch):
    calls = []
    monkeypatch.setattr(settings, "debug", False)
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    monkeypatch.setattr("sys.argv", ["regbot", "serve", "--port", "8080", "--debug"])

    cli.main()

    assert settings.debug is True
    assert calls[0]["port"] == 8080
    assert calls[0]["log_level"] == "debug"


def test_serve_uses_configured_log_level(monkeypatch):
    calls = []
    monkeypatch.setattr(settings, "debug", False)
    monkeypatch.setattr(settings, "log_level", "WARNING")
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    monkeypatch.setattr("sys.argv", ["regbot", "serve"])

    cli.main()

    assert calls[0]["log_level"] == "warning"


@pytest.mark.asyncio
async def test_status_lists_tables(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    monkeypatch.setattr(settings, "database_path", str(tmp_path / "status.db"))

    exit_code = await cli.run_command(argparse.Namespace(command="status"))

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Tables: registrations" in output
    assert "Active sessions: 0" in output


@pytest.mark.asyncio
async def test_status_without_api_key_fails(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "openai_api_key", None)
    monkeypatch.setattr(settings, "database_path", str(tmp_path / "status.db"))

    assert await cli.run_command(argparse.Namespace(command="status")) == 1
