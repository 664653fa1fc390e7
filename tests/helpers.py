"""Shared test helpers."""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Optional

from envgroup.store import StoreError


class ScriptedStore:
    """Settings store with controllable failures and an optional save gate."""

    def __init__(self, data: Optional[dict[str, Any]] = None) -> None:
        self.data: Any = copy.deepcopy(data) if data is not None else {}
        self.saves: list[dict[str, Any]] = []
        self.loads = 0
        self.fail_load: Optional[Exception] = None
        self.fail_save: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.save_started = asyncio.Event()

    async def load(self) -> Any:
        self.loads += 1
        if self.fail_load is not None:
            raise self.fail_load
        return copy.deepcopy(self.data)

    async def save(self, settings: dict[str, Any]) -> None:
        self.save_started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_save is not None:
            raise self.fail_save
        self.data = copy.deepcopy(settings)
        self.saves.append(copy.deepcopy(settings))


def store_error(message: str = "disk full") -> StoreError:
    return StoreError("/tmp/settings.json", message)


TWO_GROUPS: dict[str, Any] = {
    "envGroups": {
        "g1": {"name": "Prod", "variables": {"X": "9"}},
        "g2": {"name": "Dev", "variables": {}},
    },
    "activeEnvGroup": "g2",
}
