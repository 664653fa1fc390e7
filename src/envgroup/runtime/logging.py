"""Logging setup for processes that embed or run envgroup."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Literal, Optional

from ..core.config import ConfigManager, LoggingConfig
from ..util.log import Log, LogFormat, LogLevel

LogMode = Literal["cli", "embedded"]


@dataclass(frozen=True)
class LogSettings:
    level: LogLevel
    format: LogFormat
    console: bool
    file: bool
    dev_file: bool


def _first(*values: Any) -> Any:
    """First value that is not None; the last argument acts as the default."""
    return next((value for value in values if value is not None), values[-1])


async def resolve_log_settings(
    mode: LogMode,
    *,
    level: Optional[str] = None,
    format: Optional[str] = None,
    console: Optional[bool] = None,
    file: Optional[bool] = None,
    dev_file: Optional[bool] = None,
) -> LogSettings:
    """Combine explicit arguments, the ``logging`` config section and mode defaults.

    The CLI keeps a log file unless told otherwise; embedding hosts opt in.
    """
    config = await ConfigManager.get()
    section = config.logging or LoggingConfig()
    return LogSettings(
        level=LogLevel.parse(_first(level, section.level, config.log_level, None)),
        format=LogFormat.parse(_first(format, section.format, None)),
        console=_first(console, section.console, False),
        file=_first(file, section.file, mode == "cli"),
        dev_file=_first(dev_file, section.dev_file, False),
    )


def bootstrap_logging(mode: LogMode, **overrides: Any) -> LogSettings:
    """Resolve settings and apply them to ``Log``. Call outside a running event loop.

    Raises ValueError for an unknown level or format, and ConfigError when
    the configuration files are invalid.
    """
    settings = asyncio.run(resolve_log_settings(mode, **overrides))
    Log.configure(
        level=settings.level,
        format=settings.format,
        console=settings.console,
        file=settings.file,
        dev=settings.dev_file,
    )
    return settings
