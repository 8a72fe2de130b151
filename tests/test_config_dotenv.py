from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from lib_log_jsonpost import cli as cli_module
from lib_log_jsonpost import config as log_config


@pytest.fixture(autouse=True)
def _reset_dotenv_state() -> Iterator[None]:
    """Reset shared dotenv state around each test."""

    log_config._reset_dotenv_state_for_testing()
    yield
    log_config._reset_dotenv_state_for_testing()


def test_enable_dotenv_populates_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Loading the nearest .env injects values found above the working directory."""

    nested = tmp_path / "nested"
    nested.mkdir()
    env_file = tmp_path / ".env"
    env_file.write_text("LOG_JSONPOST_URL=https://dotenv.example/ingest\n")
    monkeypatch.chdir(nested)
    monkeypatch.delenv("LOG_JSONPOST_URL", raising=False)

    loaded = log_config.enable_dotenv()

    assert loaded == env_file.resolve()
    assert os.environ["LOG_JSONPOST_URL"] == "https://dotenv.example/ingest"

    os.environ.pop("LOG_JSONPOST_URL", None)


def test_enable_dotenv_respects_existing_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Existing environment variables keep precedence over .env entries."""

    nested = tmp_path / "nested"
    nested.mkdir()
    (tmp_path / ".env").write_text("LOG_JSONPOST_URL=https://dotenv.example/ingest\n")
    monkeypatch.chdir(nested)
    monkeypatch.setenv("LOG_JSONPOST_URL", "https://real.example/ingest")

    result = log_config.enable_dotenv()

    assert result is not None
    assert os.environ["LOG_JSONPOST_URL"] == "https://real.example/ingest"


def test_enable_dotenv_searches_from_explicit_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    start = tmp_path / "a" / "b"
    start.mkdir(parents=True)
    env_file = tmp_path / "a" / ".env"
    env_file.write_text("LOG_JSONPOST_TIMEOUT=3\n")
    monkeypatch.delenv("LOG_JSONPOST_TIMEOUT", raising=False)

    loaded = log_config.enable_dotenv(search_from=start)

    assert loaded == env_file.resolve()
    assert os.environ["LOG_JSONPOST_TIMEOUT"] == "3"

    os.environ.pop("LOG_JSONPOST_TIMEOUT", None)


def test_enable_dotenv_loads_only_once(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (first / ".env").write_text("LOG_JSONPOST_FIELDS=message\n")
    (second / ".env").write_text("LOG_JSONPOST_FIELDS=level\n")
    monkeypatch.delenv("LOG_JSONPOST_FIELDS", raising=False)

    loaded = log_config.enable_dotenv(search_from=first)
    again = log_config.enable_dotenv(search_from=second)

    assert again == loaded == (first / ".env").resolve()
    assert os.environ["LOG_JSONPOST_FIELDS"] == "message"

    os.environ.pop("LOG_JSONPOST_FIELDS", None)


def test_enable_dotenv_without_file_returns_none(tmp_path: Path) -> None:
    assert log_config.enable_dotenv(search_from=tmp_path) is None


def test_cli_dotenv_toggle_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    """CLI flag wins over environment toggle when deciding whether to load .env."""

    runner = CliRunner()

    calls: list[tuple[tuple[object, ...], dict[str, object]]] = []

    def record_enable(*args: object, **kwargs: object) -> None:
        calls.append((args, kwargs))

    monkeypatch.setattr(log_config, "enable_dotenv", record_enable)
    monkeypatch.delenv(log_config.DOTENV_ENV_VAR, raising=False)

    result = runner.invoke(cli_module.cli, ["--use-dotenv", "info"])
    assert result.exit_code == 0
    assert len(calls) == 1

    calls.clear()
    result = runner.invoke(cli_module.cli, ["info"])
    assert result.exit_code == 0
    assert calls == []

    env = {log_config.DOTENV_ENV_VAR: "1"}
    result = runner.invoke(cli_module.cli, ["info"], env=env)
    assert result.exit_code == 0
    assert len(calls) == 1

    calls.clear()
    result = runner.invoke(cli_module.cli, ["--no-use-dotenv", "info"], env=env)
    assert result.exit_code == 0
    assert calls == []
