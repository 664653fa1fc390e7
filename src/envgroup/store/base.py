"""Settings store capability.

A store loads and saves the whole settings document. The document is
opaque to the store; the group manager only reads and writes the
``envGroups``, ``activeEnvGroup`` and ``env`` keys and leaves every other
key as it found it.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol, runtime_checkable

Settings = Dict[str, Any]


class StoreError(Exception):
    """Raised when the settings document cannot be read or written."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Settings store error for {path}: {message}")


@runtime_checkable
class SettingsStore(Protocol):
    async def load(self) -> Settings: ...

    async def save(self, settings: Settings) -> None: ...
