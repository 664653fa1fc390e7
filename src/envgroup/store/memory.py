"""In-process settings store."""

from __future__ import annotations

import copy
from typing import List, Optional

from .base import Settings


class MemorySettingsStore:
    """Settings store holding the document in memory.

    Documents are deep-copied in both directions, so neither the caller
    nor the store can mutate the other's copy. Every saved document is
    appended to ``saves``.
    """

    def __init__(self, initial: Optional[Settings] = None) -> None:
        self._data: Settings = copy.deepcopy(initial) if initial else {}
        self.saves: List[Settings] = []

    @property
    def data(self) -> Settings:
        return copy.deepcopy(self._data)

    async def load(self) -> Settings:
        return copy.deepcopy(self._data)

    async def save(self, settings: Settings) -> None:
        self._data = copy.deepcopy(settings)
        self.saves.append(copy.deepcopy(settings))
