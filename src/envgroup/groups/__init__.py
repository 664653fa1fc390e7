"""Environment groups and the active group selection."""

from .manager import EnvGroupManager, ManagerState, NotReady, Ready
from .models import (
    DEFAULT_GROUP_ID,
    DEFAULT_GROUP_NAME,
    EnvironmentGroup,
    GroupCollection,
    legacy_groups,
    parse_groups,
)

__all__ = [
    "DEFAULT_GROUP_ID",
    "DEFAULT_GROUP_NAME",
    "EnvGroupManager",
    "EnvironmentGroup",
    "GroupCollection",
    "ManagerState",
    "NotReady",
    "Ready",
    "legacy_groups",
    "parse_groups",
]
