from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from envgroup import __version__
from envgroup.cli.main import app

runner = CliRunner()

SETTINGS = {
    "envGroups": {
        "prod": {"name": "Prod", "variables": {"X": "9"}},
        "dev": {"name": "Dev", "variables": {"A": "1", "B": "2"}},
    },
    "activeEnvGroup": "dev",
    "env": {"A": "1", "B": "2"},
    "model": "opus",
}


def _settings(tmp_path: Path, data: object = SETTINGS) -> Path:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_cli_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"envgroup {__version__}" in result.stdout


def test_cli_list_marks_active_group(tmp_path: Path) -> None:
    path = _settings(tmp_path)

    result = runner.invoke(app, ["list", "--settings", str(path)])

    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0].startswith("  prod  Prod  (1 variable)")
    assert lines[1].startswith("* dev  Dev  (2 variables)")


def test_cli_list_migrates_legacy_settings_in_memory(tmp_path: Path) -> None:
    path = _settings(tmp_path, {"env": {"A": "1"}})

    result = runner.invoke(app, ["list", "--settings", str(path)])

    assert result.exit_code == 0
    assert "* default  Default  (1 variable)" in result.stdout
    assert json.loads(path.read_text(encoding="utf-8")) == {"env": {"A": "1"}}


def test_cli_current_shows_summary(tmp_path: Path) -> None:
    path = _settings(tmp_path)

    result = runner.invoke(app, ["current", "--settings", str(path)])

    assert result.exit_code == 0
    assert "Environment: Dev" in result.stdout
    assert "2 variables • 2 groups" in result.stdout


def test_cli_current_uses_configured_settings_path(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = _settings(tmp_path)
    monkeypatch.setenv("ENVGROUP_SETTINGS_PATH", str(path))

    result = runner.invoke(app, ["current"])

    assert result.exit_code == 0
    assert "Environment: Dev" in result.stdout


def test_cli_use_switches_and_persists(tmp_path: Path) -> None:
    path = _settings(tmp_path)

    result = runner.invoke(app, ["use", "prod", "--settings", str(path)])

    assert result.exit_code == 0
    assert "Switched to Prod (1 variable)" in result.stdout
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["activeEnvGroup"] == "prod"
    assert saved["env"] == {"X": "9"}
    assert saved["model"] == "opus"
    assert saved["envGroups"] == SETTINGS["envGroups"]


def test_cli_use_rejects_unknown_group(tmp_path: Path) -> None:
    path = _settings(tmp_path)

    result = runner.invoke(app, ["use", "staging", "--settings", str(path)])

    assert result.exit_code == 1
    assert "unknown group" in result.output
    assert json.loads(path.read_text(encoding="utf-8")) == SETTINGS


def test_cli_reports_unreadable_settings(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{broken", encoding="utf-8")

    result = runner.invoke(app, ["list", "--settings", str(path)])

    assert result.exit_code == 1
    assert "cannot load" in result.output


def test_cli_use_reports_save_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from envgroup.store import JsonSettingsStore, StoreError

    path = _settings(tmp_path)

    async def failing_save(self, settings):  # type: ignore[no-untyped-def]
        raise StoreError(str(self.path), "read-only file system")

    monkeypatch.setattr(JsonSettingsStore, "save", failing_save)

    result = runner.invoke(app, ["use", "prod", "--settings", str(path)])

    assert result.exit_code == 1
    assert "failed to save selection" in result.output
    assert json.loads(path.read_text(encoding="utf-8"))["activeEnvGroup"] == "dev"


def test_cli_rejects_invalid_log_level(tmp_path: Path) -> None:
    path = _settings(tmp_path)

    result = runner.invoke(app, ["list", "--settings", str(path), "--log-level", "loud"])

    assert result.exit_code == 1
    assert "invalid log level" in result.output
    assert not isinstance(result.exception, ValueError)


def test_cli_reports_invalid_config_file(tmp_path: Path) -> None:
    from envgroup.core.global_paths import GlobalPath

    config_dir = Path(GlobalPath.config())
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "envgroup.json").write_text('{"colour": "blue"}', encoding="utf-8")
    path = _settings(tmp_path)

    result = runner.invoke(app, ["current", "--settings", str(path)])

    assert result.exit_code == 1
    assert "Config error" in result.output
    assert "colour" in result.output
