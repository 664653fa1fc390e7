from collections.abc import Iterator
from pathlib import Path

import pytest

from envgroup.core.config import ConfigManager
from envgroup.core.global_paths import GlobalPath
from envgroup.util.log import Log, LogFormat, LogLevel


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("ENVGROUP_TEST_HOME", str(home))
    monkeypatch.delenv("ENVGROUP_SETTINGS_PATH", raising=False)
    monkeypatch.delenv("ENVGROUP_CONFIG_CONTENT", raising=False)
    monkeypatch.setattr(GlobalPath, "config", classmethod(lambda cls: str(tmp_path / "config")))
    monkeypatch.setattr(GlobalPath, "state", classmethod(lambda cls: str(tmp_path / "state")))
    monkeypatch.setattr(GlobalPath, "log", classmethod(lambda cls: str(tmp_path / "log")))
    yield home


@pytest.fixture(autouse=True)
def config_manager(monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    manager = ConfigManager()
    monkeypatch.setattr(ConfigManager, "current", classmethod(lambda cls: manager))
    return manager


@pytest.fixture(autouse=True)
def _log_teardown() -> Iterator[None]:
    yield
    Log.configure(level=LogLevel.INFO, format=LogFormat.KV, console=False, file=False)
