"""Hartmann6 benchmark landscape and its evaluation loop.

The six-dimensional Hartmann function is a standard multi-modal test
surface for Bayesian optimisation.  On the unit hypercube it takes values
in ``[HARTMANN6_MIN, 0)`` with the global minimum at ``HARTMANN6_ARGMIN``.

:func:`evaluate_landscape` is the loop a search trial runs: it evaluates the
sampled point a fixed number of times and reports one result per iteration.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

import numpy as np

logger = logging.getLogger(__name__)

PARAM_NAMES = ("x1", "x2", "x3", "x4", "x5", "x6")
DEFAULT_ITERATIONS = 100

ALPHA = np.array([1.0, 1.2, 3.0, 3.2])
A = np.array(
    [
        [10.0, 3.0, 17.0, 3.5, 1.7, 8.0],
        [0.05, 10.0, 17.0, 0.1, 8.0, 14.0],
        [3.0, 3.5, 1.7, 10.0, 17.0, 8.0],
        [17.0, 8.0, 0.05, 10.0, 0.1, 14.0],
    ]
)
P = 1e-4 * np.array(
    [
        [1312, 1696, 5569, 124, 8283, 5886],
        [2329, 4135, 8307, 3736, 1004, 9991],
        [2348, 1451, 3522, 2883, 3047, 6650],
        [4047, 8828, 8732, 5743, 1091, 381],
    ]
)

HARTMANN6_MIN = -3.32237
HARTMANN6_ARGMIN = np.array([0.20169, 0.150011, 0.476874, 0.275332, 0.311652, 0.6573])


def hartmann6(x: Any) -> Any:
    """Evaluate the Hartmann6 function.

    Args:
        x: A point of shape ``(6,)`` or a batch of shape ``(n, 6)``.

    Returns:
        A float for a single point, an array of shape ``(n,)`` for a batch.

    Raises:
        ValueError: If the trailing dimension is not 6.
    """
    arr = np.asarray(x, dtype=float)
    if arr.ndim not in (1, 2) or arr.shape[-1] != 6:
        raise ValueError(f"hartmann6 expects 6 coordinates, got shape {arr.shape}")
    batch = np.atleast_2d(arr)
    # (n, 4): weighted squared distance to each of the four centres
    exponent = np.einsum("ij,nij->ni", A, (batch[:, None, :] - P[None, :, :]) ** 2)
    values = -np.exp(-exponent) @ ALPHA
    if arr.ndim == 1:
        return float(values[0])
    return values


def point_from_config(config: Mapping[str, Any]) -> np.ndarray:
    """Read ``x1``..``x6`` from a trial config into a vector.

    Raises:
        KeyError: If a coordinate is missing.
    """
    missing = [name for name in PARAM_NAMES if name not in config]
    if missing:
        raise KeyError(f"Landscape config lacks coordinates: {', '.join(missing)}")
    return np.array([float(config[name]) for name in PARAM_NAMES])


def evaluate_landscape(
    config: Mapping[str, Any],
    report: Callable[[Dict[str, Any]], Any],
    iterations: Optional[int] = None,
    sleep: float = 0.0,
) -> int:
    """Run the evaluation loop for one sampled point.

    Each iteration reports ``timesteps_total`` (the iteration index),
    ``hartmann6`` (objective value) and ``l2norm`` (norm of the point).

    Args:
        config: Trial config holding ``x1``..``x6`` and optionally
            ``iterations``.
        report: Called once per iteration with the result mapping.
        iterations: Overrides ``config["iterations"]``.
        sleep: Seconds to wait between reports.

    Returns:
        Number of results reported.
    """
    if iterations is None:
        iterations = int(config.get("iterations", DEFAULT_ITERATIONS))
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")

    x = point_from_config(config)
    value = hartmann6(x)
    l2norm = float(np.sqrt((x**2).sum()))
    logger.debug("Evaluating %s: hartmann6=%.5f l2norm=%.5f", x, value, l2norm)

    for i in range(iterations):
        report({"timesteps_total": i, "hartmann6": value, "l2norm": l2norm})
        if sleep:
            time.sleep(sleep)
    return iterations


def landscape_trainable(config: Dict[str, Any]) -> None:
    """Ray Tune function trainable around :func:`evaluate_landscape`."""
    from ray import tune

    evaluate_landscape(config, tune.report, sleep=float(config.get("sleep", 0.0)))
