"""Environment group models and settings document helpers."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..util.log import Log

log = Log.create({"service": "groups.models"})

# Settings document keys.
ENV_GROUPS_KEY = "envGroups"
ACTIVE_GROUP_KEY = "activeEnvGroup"
ENV_KEY = "env"

DEFAULT_GROUP_ID = "default"
DEFAULT_GROUP_NAME = "Default"


class EnvironmentGroup(BaseModel):
    """A named set of environment variables.

    Variable names and values are passed through untouched. Keys other
    than ``name`` and ``variables`` are kept so a group written back to the
    settings document looks the way another tool left it.
    """
    name: str
    variables: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")

    @field_validator("name")
    @classmethod
    def _non_empty_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("group name must not be empty")
        return value

    @field_validator("variables", mode="before")
    @classmethod
    def _null_variables(cls, value: Any) -> Any:
        return {} if value is None else value


GroupCollection = Dict[str, EnvironmentGroup]


def parse_groups(raw: Any) -> Optional[GroupCollection]:
    """Parse the ``envGroups`` value of a settings document.

    Returns None when the value is missing, not a mapping, empty, or holds
    any entry that is not a valid group. Callers then fall back to
    migrating the legacy ``env`` mapping.
    """
    if not isinstance(raw, dict) or not raw:
        return None

    groups: GroupCollection = {}
    for group_id, entry in raw.items():
        if not isinstance(group_id, str) or not group_id:
            log.warn("ignoring envGroups with invalid group id", {"group": repr(group_id)})
            return None
        try:
            groups[group_id] = EnvironmentGroup.model_validate(entry)
        except ValidationError as e:
            log.warn("ignoring malformed envGroups", {"group": group_id, "error": str(e)})
            return None
    return groups


def legacy_groups(env: Any) -> GroupCollection:
    """Build the single default group from a legacy flat ``env`` mapping."""
    variables = dict(env) if isinstance(env, dict) else {}
    return {DEFAULT_GROUP_ID: EnvironmentGroup(name=DEFAULT_GROUP_NAME, variables=variables)}


def dump_groups(groups: GroupCollection) -> Dict[str, Dict[str, Any]]:
    """Serialize a group collection into its settings document shape."""
    return {group_id: group.model_dump() for group_id, group in groups.items()}
