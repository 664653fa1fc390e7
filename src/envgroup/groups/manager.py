"""Environment group manager.

Keeps the group collection and the active selection in memory, loaded once
from a settings store. Selecting a group updates memory immediately and
persists in the background: a single writer task per manager re-fetches the
document, merges the selection into it and saves it. Requests made while a
write is in flight collapse into one pending slot, so only the newest
selection is written next and durable state never moves backwards.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..store.base import Settings, SettingsStore
from ..util.error import format_unknown_error
from ..util.log import Log
from .models import (
    ACTIVE_GROUP_KEY,
    DEFAULT_GROUP_ID,
    DEFAULT_GROUP_NAME,
    ENV_GROUPS_KEY,
    ENV_KEY,
    EnvironmentGroup,
    GroupCollection,
    dump_groups,
    legacy_groups,
    parse_groups,
)

log = Log.create({"service": "groups.manager"})


class ManagerState(str, Enum):
    """Lifecycle of a manager instance."""
    PENDING = "pending"
    LOADING = "loading"
    READY = "ready"
    NOT_READY = "not_ready"


@dataclass(frozen=True)
class Ready:
    """Successful load result."""
    groups: GroupCollection
    active_group_id: str
    migrated: bool = False


@dataclass(frozen=True)
class NotReady:
    """Failed load result. Nothing should be shown until a later load succeeds."""
    error: BaseException


class EnvGroupManager:
    """Owns environment groups and the active selection for one settings store."""

    def __init__(self, store: SettingsStore) -> None:
        self._store = store
        self._state = ManagerState.PENDING
        self._groups: GroupCollection = {}
        self._active_id: Optional[str] = None
        self._pending: Optional[str] = None
        self._writer: Optional[asyncio.Task[None]] = None
        self._last_error: Optional[BaseException] = None

    # -- Lifecycle --

    async def initialize(self) -> Ready | NotReady:
        """Load groups from the store.

        Never raises for store failures: the manager ends up READY with at
        least one group, or NOT_READY with no groups.
        """
        self._state = ManagerState.LOADING
        log.info("loading environment groups")
        try:
            settings = await self._store.load()
            if not isinstance(settings, dict):
                raise TypeError(f"settings document is {type(settings).__name__}, expected object")
        except Exception as e:
            log.error("failed to load environment groups", {"error": format_unknown_error(e)})
            self._groups = {}
            self._active_id = None
            self._state = ManagerState.NOT_READY
            return NotReady(error=e)

        groups = parse_groups(settings.get(ENV_GROUPS_KEY))
        if groups is not None:
            active = settings.get(ACTIVE_GROUP_KEY)
            active_id = active if isinstance(active, str) and active else DEFAULT_GROUP_ID
            migrated = False
        else:
            groups = legacy_groups(settings.get(ENV_KEY))
            active_id = DEFAULT_GROUP_ID
            migrated = True

        self._groups = groups
        self._active_id = active_id
        self._state = ManagerState.READY

        if active_id not in groups:
            log.warn("active environment group not found", {"group": active_id})
        log.info(
            "loaded environment groups",
            {"groups": len(groups), "active": active_id, "migrated": migrated},
        )
        return Ready(groups=dict(groups), active_group_id=active_id, migrated=migrated)

    # -- Selection --

    def select_group(self, group_id: str) -> bool:
        """Make ``group_id`` the active group and persist it in the background.

        The in-memory selection changes before this returns. Persistence
        failures are logged and leave the selection in place. Returns False,
        with no effect, when the manager is not READY.
        """
        if self._state != ManagerState.READY:
            log.warn("ignoring group selection before load", {"group": group_id, "state": self._state.value})
            return False

        if group_id not in self._groups:
            log.warn("selecting unknown environment group", {"group": group_id})

        self._active_id = group_id
        self._pending = group_id
        if self._writer is None or self._writer.done():
            self._writer = asyncio.get_running_loop().create_task(self._drain())
        return True

    async def flush(self) -> None:
        """Wait until every requested selection has been persisted or has failed."""
        while self._writer is not None and not self._writer.done():
            await self._writer

    async def _drain(self) -> None:
        while self._pending is not None:
            group_id = self._pending
            self._pending = None
            await self._persist(group_id)

    async def _persist(self, group_id: str) -> None:
        try:
            current = await self._store.load()
            if not isinstance(current, dict):
                raise TypeError(f"settings document is {type(current).__name__}, expected object")
            await self._store.save(self._merge(current, group_id))
        except Exception as e:
            self._last_error = e
            log.error(
                "failed to save active environment group",
                {"group": group_id, "error": format_unknown_error(e)},
            )
            return

        self._last_error = None
        log.debug("saved active environment group", {"group": group_id})

    def _merge(self, current: Settings, group_id: str) -> Settings:
        group = self._groups.get(group_id)
        merged: Dict[str, Any] = {
            **current,
            ACTIVE_GROUP_KEY: group_id,
            ENV_KEY: dict(group.variables) if group else {},
        }
        # Only a document without groups gets the migrated ones; a malformed
        # envGroups value belongs to the user and is written back untouched.
        if current.get(ENV_GROUPS_KEY) is None:
            merged[ENV_GROUPS_KEY] = dump_groups(self._groups)
        return merged

    # -- Read accessors --

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state == ManagerState.READY

    @property
    def active_group_id(self) -> Optional[str]:
        return self._active_id

    @property
    def groups(self) -> GroupCollection:
        return dict(self._groups)

    @property
    def last_error(self) -> Optional[BaseException]:
        """Error of the most recent failed save, cleared by the next successful one."""
        return self._last_error

    def active_group(self) -> Optional[EnvironmentGroup]:
        if self._active_id is None:
            return None
        return self._groups.get(self._active_id)

    def group_count(self) -> int:
        return len(self._groups)

    def variable_count(self, group_id: Optional[str] = None) -> int:
        """Number of variables in ``group_id``, or in the active group by default."""
        key = self._active_id if group_id is None else group_id
        group = self._groups.get(key) if key is not None else None
        if group is None or not group.variables:
            return 0
        return len(group.variables)

    def display_name(self) -> str:
        group = self.active_group()
        return group.name if group else DEFAULT_GROUP_NAME
