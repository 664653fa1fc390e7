"""Configuration management.

Loads and merges envgroup configuration from the user config directory and
the environment, and resolves where the shared settings document lives.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config_loader import merge_config, read_config_file
from .global_paths import GlobalPath
from ..util.log import Log

log = Log.create({"service": "config"})

CONFIG_FILES = ("envgroup.json", "envgroup.jsonc")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: Optional[str] = None
    format: Optional[Literal["kv", "json", "pretty"]] = None
    console: Optional[bool] = None
    file: Optional[bool] = None
    dev_file: Optional[bool] = Field(None, alias="devFile")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class Config(BaseModel):
    """Main configuration schema."""
    schema_: Optional[str] = Field(None, alias="$schema")
    settings_path: Optional[str] = Field(None, alias="settingsPath")
    log_level: Optional[str] = Field(None, alias="logLevel")
    logging: Optional[LoggingConfig] = None

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Config error in {path}: {message}")


class ConfigManager:
    """Configuration management.

    One process-wide instance caches the merged configuration; class
    methods delegate to it.

    Sources, lowest precedence first:
    1. ``envgroup.json`` in the user config directory
    2. ``envgroup.jsonc`` in the user config directory
    3. ``ENVGROUP_CONFIG_CONTENT`` inline JSON
    """

    _instance: Optional["ConfigManager"] = None

    def __init__(self) -> None:
        self._cache: Optional[Config] = None

    @classmethod
    def current(cls) -> "ConfigManager":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset cached configuration."""
        cls.current()._cache = None

    @classmethod
    async def get(cls) -> Config:
        inst = cls.current()
        if inst._cache is None:
            inst._cache = inst._load()
        return inst._cache

    @classmethod
    async def settings_path(cls) -> str:
        """Resolve the settings document path.

        ``ENVGROUP_SETTINGS_PATH`` wins over the ``settingsPath`` config key,
        which wins over the default under the user's home.
        """
        override = os.environ.get("ENVGROUP_SETTINGS_PATH")
        if override:
            return override
        config = await cls.get()
        if config.settings_path:
            return str(Path(config.settings_path).expanduser())
        return GlobalPath.settings()

    def _load(self) -> Config:
        result: Dict[str, Any] = {}
        source = "defaults"

        for filename in CONFIG_FILES:
            filepath = os.path.join(GlobalPath.config(), filename)
            data = read_config_file(filepath)
            if data:
                result = merge_config(result, data)
                source = filepath
                log.info("loaded config", {"path": filepath})

        env_config = os.environ.get("ENVGROUP_CONFIG_CONTENT")
        if env_config:
            try:
                data = json.loads(env_config)
            except json.JSONDecodeError:
                log.error("failed to parse ENVGROUP_CONFIG_CONTENT")
            else:
                if isinstance(data, dict):
                    result = merge_config(result, data)
                    source = "ENVGROUP_CONFIG_CONTENT"
                    log.info("loaded config from ENVGROUP_CONFIG_CONTENT")

        try:
            return Config.model_validate(result)
        except ValidationError as e:
            raise ConfigError(source, str(e)) from e
