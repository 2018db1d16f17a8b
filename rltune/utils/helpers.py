"""General-purpose helper utilities used across rltune modules."""

from __future__ import annotations

import copy
import os
from datetime import datetime
from typing import Any, Dict, Mapping


def timestamp_id() -> str:
    """Return a compact timestamp string suitable for directory or run naming.

    Returns:
        A string like ``20260206_143021``.
    """
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def ensure_dir(path: str) -> str:
    """Create *path* (and parents) if it does not exist yet.

    Args:
        path: Directory path to create.

    Returns:
        The same *path* for chaining convenience.
    """
    os.makedirs(path, exist_ok=True)
    return path


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow-merge *override* into *base*, returning a new dict.

    Keys in *override* take precedence.

    Args:
        base: Base dictionary.
        override: Dictionary whose values win on conflict.

    Returns:
        Merged dictionary (new object; inputs are not mutated).
    """
    return {**base, **override}


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge *override* into a copy of *base*.

    Nested mappings are merged key by key; any other value in *override*
    (lists included) replaces the value in *base* wholesale.

    Args:
        base: Base mapping.
        override: Mapping whose values win on conflict.

    Returns:
        A new dictionary; neither input is mutated.
    """
    merged: Dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def flatten_dict(data: Mapping[str, Any], sep: str = "/") -> Dict[str, Any]:
    """Flatten nested mappings into ``{"a/b": value}`` form.

    Args:
        data: Possibly nested mapping.
        sep: Separator placed between nested keys.

    Returns:
        Flat dictionary whose keys are joined paths.
    """
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping) and value:
            for sub_key, sub_value in flatten_dict(value, sep=sep).items():
                flat[f"{key}{sep}{sub_key}"] = sub_value
        else:
            flat[str(key)] = value
    return flat
