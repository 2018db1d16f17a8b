"""Tuned run specifications shipped with rltune.

Files are laid out as ``<algorithm>/<name>.yaml``; paths handed to and
returned from this module are relative to this directory.
"""

from __future__ import annotations

import os
from typing import List

EXAMPLES_DIR = os.path.dirname(os.path.abspath(__file__))


def list_tuned_examples() -> List[str]:
    """Return the relative paths of all shipped YAML files, sorted."""
    found = []
    for root, _dirs, files in os.walk(EXAMPLES_DIR):
        for fname in files:
            if fname.endswith((".yaml", ".yml")):
                found.append(os.path.relpath(os.path.join(root, fname), EXAMPLES_DIR))
    return sorted(p.replace(os.sep, "/") for p in found)


def tuned_example_path(relpath: str) -> str:
    """Absolute path of a shipped example.

    Raises:
        FileNotFoundError: If no such example exists.
    """
    path = os.path.join(EXAMPLES_DIR, *relpath.split("/"))
    if not os.path.isfile(path):
        raise FileNotFoundError(f"No tuned example '{relpath}'")
    return path
