"""JSON file settings store.

The settings document is a hand-editable JSON file, so reads accept
comments (JSONC). Writes go to a temp file in the same directory and are
renamed over the target, so readers never observe a half-written file.
"""

from __future__ import annotations

import asyncio
import json
import os
import uuid
from pathlib import Path
from typing import Any

import commentjson

from ..util.log import Log
from .base import Settings, StoreError
from .lock import Lock

log = Log.create({"service": "store.json"})


class JsonSettingsStore:
    """Settings store backed by a single JSON document on disk."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path).expanduser()

    @property
    def _key(self) -> str:
        return str(self.path.resolve())

    def _read(self) -> Settings:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(str(self.path), f"cannot read file: {e}") from e
        if not text.strip():
            return {}
        try:
            data = commentjson.loads(text)
        except Exception as e:  # commentjson lets lark parse errors through
            raise StoreError(str(self.path), f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(str(self.path), "settings document is not an object")
        return data

    @staticmethod
    def _encode(settings: Any) -> bytes:
        return (json.dumps(settings, indent=2, ensure_ascii=False) + "\n").encode("utf-8")

    def _write(self, settings: Settings) -> None:
        try:
            body = self._encode(settings)
        except (TypeError, ValueError) as e:
            raise StoreError(str(self.path), f"cannot serialize settings: {e}") from e

        parent = self.path.parent
        tmp = parent / f".{self.path.name}.{os.getpid()}.{uuid.uuid4().hex}.tmp"
        try:
            parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "wb") as file:
                file.write(body)
                file.flush()
                os.fsync(file.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            raise StoreError(str(self.path), f"cannot write file: {e}") from e
        finally:
            tmp.unlink(missing_ok=True)

    async def load(self) -> Settings:
        async with Lock.exclusive(self._key):
            data = await asyncio.to_thread(self._read)
        log.debug("loaded settings", {"path": str(self.path), "keys": len(data)})
        return data

    async def save(self, settings: Settings) -> None:
        if not isinstance(settings, dict):
            raise StoreError(str(self.path), "settings document is not an object")
        async with Lock.exclusive(self._key):
            await asyncio.to_thread(self._write, settings)
        log.debug("saved settings", {"path": str(self.path), "keys": len(settings)})
