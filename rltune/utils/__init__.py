"""Shared utility functions for the rltune package."""

from rltune.utils.helpers import deep_merge, ensure_dir, flatten_dict, merge_dicts, timestamp_id

__all__ = [
    'deep_merge',
    'ensure_dir',
    'flatten_dict',
    'merge_dicts',
    'timestamp_id',
]
