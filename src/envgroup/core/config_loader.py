"""Reading envgroup config files.

Config files are JSON with comments allowed. ``{env:NAME}`` references
are replaced with the environment value (empty when unset) before parsing.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict

import commentjson

from ..util.log import Log

log = Log.create({"service": "config.loader"})

ENV_REF = re.compile(r"\{env:([^}]+)\}")


def merge_config(lower: Dict[str, Any], higher: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``lower`` overlaid with ``higher``, merging nested sections key by key."""
    merged = dict(lower)
    for key, value in higher.items():
        below = merged.get(key)
        merged[key] = merge_config(below, value) if isinstance(below, dict) and isinstance(value, dict) else value
    return merged


def expand_env_refs(text: str) -> str:
    return ENV_REF.sub(lambda match: os.environ.get(match.group(1), ""), text)


def read_config_file(filepath: str) -> Dict[str, Any]:
    """Parse one config file. Missing, unreadable or invalid files yield ``{}``."""
    path = Path(filepath)
    if not path.is_file():
        return {}

    try:
        data = commentjson.loads(expand_env_refs(path.read_text(encoding="utf-8")))
    except (OSError, UnicodeDecodeError) as e:
        log.error("cannot read config file", {"path": filepath, "error": e})
        return {}
    except Exception as e:  # commentjson lets lark parse errors through
        log.error("cannot parse config file", {"path": filepath, "error": e})
        return {}

    if isinstance(data, dict):
        return data
    log.error("config file is not an object", {"path": filepath})
    return {}
