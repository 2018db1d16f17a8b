"""Learning checks for tuned examples.

A tuned example is considered to have *learned* when at least one of its
trials reached the reward threshold named in its ``stop`` block.  Results
coming back from Ray Tune are nested dictionaries; stop keys address them
with ``/``-separated paths such as ``evaluation/episode_reward_mean``.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Iterable, Mapping, Optional


def lookup_metric(result: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Fetch *key* from a (possibly nested) result mapping.

    A flat key wins when present; otherwise the key is split on ``/`` and
    followed through nested mappings.

    Args:
        result: Trial result as reported by the trainer.
        key: Flat or ``/``-separated metric name.
        default: Value returned when the metric is absent.

    Returns:
        The metric value, or *default*.
    """
    if key in result:
        return result[key]
    node: Any = result
    for part in key.split("/"):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def stop_reached(result: Mapping[str, Any], stop: Mapping[str, Any]) -> bool:
    """Return ``True`` when any stop metric in *result* hit its threshold.

    Mirrors Tune's dict-based stopping rule: a trial stops as soon as one
    metric is greater than or equal to its threshold.
    """
    for key, threshold in stop.items():
        value = lookup_metric(result, key)
        if not isinstance(value, numbers.Number):
            continue
        if float(value) >= float(threshold):
            return True
    return False


def reward_key(stop: Mapping[str, Any], metric: str = "episode_reward_mean") -> Optional[str]:
    """Pick the stop key that carries the reward threshold.

    Prefers a key ending in *metric* (``evaluation/episode_reward_mean`` for
    offline algorithms), else *metric* itself if present.
    """
    for key in stop:
        if key == metric or key.endswith("/" + metric):
            return key
    return None


def learning_achieved(
    results: Iterable[Mapping[str, Any]],
    stop: Mapping[str, Any],
    metric: str = "episode_reward_mean",
) -> bool:
    """Decide whether any trial reached the reward threshold.

    Args:
        results: Last result of every trial.
        stop: The run's stopping condition.
        metric: Reward metric name to look for among the stop keys.

    Returns:
        ``True`` if a trial's reward reached the threshold.  When the stop
        block names no reward metric the check falls back to
        :func:`stop_reached` on any stop key.
    """
    key = reward_key(stop, metric)
    for result in results:
        if key is None:
            if stop_reached(result, stop):
                return True
            continue
        value = lookup_metric(result, key)
        if not isinstance(value, numbers.Number):
            continue
        value = float(value)
        if not math.isnan(value) and value >= float(stop[key]):
            return True
    return False
