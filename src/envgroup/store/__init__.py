"""Settings document persistence."""

from .base import SettingsStore, StoreError
from .json_store import JsonSettingsStore
from .memory import MemorySettingsStore

__all__ = ["SettingsStore", "StoreError", "JsonSettingsStore", "MemorySettingsStore"]
