"""envgroup - switch between named groups of environment variables.

Groups live in a shared settings document next to a legacy flat ``env``
mapping, which is kept in sync with the active group on every save.
"""

__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy import package components."""
    if name in ("EnvGroupManager", "EnvironmentGroup", "ManagerState", "Ready", "NotReady"):
        from . import groups
        return getattr(groups, name)
    if name in ("SettingsStore", "StoreError", "JsonSettingsStore", "MemorySettingsStore"):
        from . import store
        return getattr(store, name)
    if name == "Log":
        from .util.log import Log
        return Log
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    "EnvGroupManager",
    "EnvironmentGroup",
    "ManagerState",
    "Ready",
    "NotReady",
    "SettingsStore",
    "StoreError",
    "JsonSettingsStore",
    "MemorySettingsStore",
    "Log",
]
