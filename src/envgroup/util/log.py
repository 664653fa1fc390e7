"""Tagged logging for envgroup.

Every service gets one cached ``Logger`` whose tags ride along on each
record. A record renders as ``key=value`` pairs, a JSON object or a
pretty line, and goes to stderr, a log file, both, or nowhere (the
default until ``Log.configure`` turns a sink on).
"""

import json
import sys
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from ..core.global_paths import GlobalPath

KEEP_LOG_FILES = 10
HEADER_FIELDS = ("time", "delta_ms", "level", "msg")


class LogLevel(str, Enum):
    """Log severity levels, lowest first."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @property
    def rank(self) -> int:
        return list(LogLevel).index(self)

    @classmethod
    def parse(cls, value: str | None) -> "LogLevel":
        if value is None:
            return cls.INFO
        name = value.strip().upper()
        if name == "WARNING":
            name = "WARN"
        if name not in cls.__members__:
            raise ValueError(f"invalid log level: {value}")
        return cls[name]


class LogFormat(str, Enum):
    """Record rendering style."""
    KV = "kv"
    JSON = "json"
    PRETTY = "pretty"

    @classmethod
    def parse(cls, value: str | None) -> "LogFormat":
        if value is None:
            return cls.KV
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"invalid log format: {value}") from None


@dataclass
class _Sinks:
    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.KV
    console: bool = False
    handle: Optional[TextIO] = None
    path: Optional[str] = None
    last: float = field(default_factory=time.time)


_sinks = _Sinks()


def _describe(error: BaseException) -> str:
    text = str(error) or error.__class__.__name__
    if error.__cause__ is not None:
        text += f" Caused by: {_describe(error.__cause__)}"
    return text


def _plain(value: Any) -> Any:
    if isinstance(value, BaseException):
        return _describe(value)
    if value is None or isinstance(value, (str, int, float, bool, dict, list, tuple)):
        return value
    return str(value)


def _pair_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    text = str(value)
    if not text or "=" in text or any(ch.isspace() for ch in text):
        return json.dumps(text, ensure_ascii=False)
    return text


def _render(level: LogLevel, message: Any, fields: Dict[str, Any]) -> str:
    now = time.time()
    delta = int((now - _sinks.last) * 1000)
    _sinks.last = now

    record: Dict[str, Any] = {
        "time": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "delta_ms": delta,
        "level": level.value.lower(),
        "msg": _plain(message),
    }
    record.update((k, _plain(v)) for k, v in fields.items() if v is not None and k not in record)

    if _sinks.format == LogFormat.JSON:
        return json.dumps(record, ensure_ascii=False, separators=(",", ":")) + "\n"

    pairs = " ".join(f"{k}={_pair_value(v)}" for k, v in record.items() if k not in HEADER_FIELDS)
    if _sinks.format == LogFormat.PRETTY:
        detail = f" ({pairs})" if pairs else ""
        return f"{record['time']} {level.value} {record['msg'] or ''}{detail} +{delta}ms\n"

    head = f"{record['time']} +{delta}ms level={record['level']} msg={_pair_value(record['msg'])}"
    return f"{head} {pairs}\n" if pairs else f"{head}\n"


class Logger:
    """Logger bound to a fixed set of tags."""

    def __init__(self, tags: Optional[Dict[str, Any]] = None):
        self.tags = dict(tags or {})

    def _emit(self, level: LogLevel, message: Any, extra: Optional[Dict[str, Any]]) -> None:
        if level.rank < _sinks.level.rank:
            return
        if not _sinks.console and _sinks.handle is None:
            return
        line = _render(level, message, {**self.tags, **(extra or {})})
        if _sinks.console:
            sys.stderr.write(line)
            sys.stderr.flush()
        if _sinks.handle is not None:
            _sinks.handle.write(line)
            _sinks.handle.flush()

    def debug(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self._emit(LogLevel.DEBUG, message, extra)

    def info(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self._emit(LogLevel.INFO, message, extra)

    def warn(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self._emit(LogLevel.WARN, message, extra)

    warning = warn

    def error(self, message: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        self._emit(LogLevel.ERROR, message, extra)


class Log:
    """Logger factory and sink configuration."""

    _loggers: Dict[str, Logger] = {}

    @classmethod
    def create(cls, tags: Optional[Dict[str, Any]] = None) -> Logger:
        """Return the logger for ``tags["service"]``, or a fresh one without a service."""
        tags = tags or {}
        service = tags.get("service")
        if not isinstance(service, str) or not service:
            return Logger(tags)
        return cls._loggers.setdefault(service, Logger(tags))

    @classmethod
    def configure(
        cls,
        *,
        level: LogLevel | None = None,
        format: LogFormat | None = None,
        console: bool | None = None,
        file: bool | None = None,
        dev: bool = False,
    ) -> None:
        """Set the minimum level, format and sinks.

        Turning the file sink on opens a new timestamped file in the user
        log directory (``dev.log`` when ``dev``), pruning old ones.
        """
        if level is not None:
            _sinks.level = level
        if format is not None:
            _sinks.format = format
        if console is not None:
            _sinks.console = console

        keep_file = _sinks.handle is not None if file is None else file
        cls.close()
        _sinks.path = None
        if not keep_file:
            return

        log_dir = Path(GlobalPath.log())
        log_dir.mkdir(parents=True, exist_ok=True)
        cls._prune(log_dir)
        name = "dev.log" if dev else datetime.now().strftime("%Y-%m-%dT%H%M%S") + ".log"
        _sinks.path = str(log_dir / name)
        _sinks.handle = open(_sinks.path, "w", encoding="utf-8")

    @classmethod
    def file(cls) -> str:
        """Path of the current (or last) log file, empty when there is none."""
        return _sinks.path or ""

    @classmethod
    def close(cls) -> None:
        if _sinks.handle is not None:
            _sinks.handle.close()
            _sinks.handle = None

    @staticmethod
    def _prune(log_dir: Path) -> None:
        stamped = sorted(log_dir.glob("????-??-??T??????.log"), key=lambda p: p.stat().st_mtime)
        for old in stamped[:-KEEP_LOG_FILES]:
            old.unlink(missing_ok=True)
