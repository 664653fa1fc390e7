"""Core infrastructure modules."""

from .global_paths import GlobalPath

__all__ = ["GlobalPath"]

# Config is imported from .config directly to keep logging free of import cycles
# from .config import ConfigManager
