"""AxOptimizer — constrained Bayesian optimisation with Ax through Ray Tune.

Ax accepts linear *parameter constraints* (``"x1 + x2 <= 2.0"``) that
restrict where it samples, and *outcome constraints* (``"l2norm <= 1.25"``)
on reported metrics that a trial must satisfy to count as feasible.  Both
are passed through as strings; Ax parses and validates them.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from rltune.benchmarks.landscape import landscape_trainable
from rltune.optim.base import OptimizationResult
from rltune.optim.ray_optimizer import TuneOptimizer
from rltune.optim.search_space import hartmann6_space

logger = logging.getLogger(__name__)


def _check_constraints(constraints: Optional[Sequence[str]], kind: str) -> List[str]:
    checked = list(constraints or [])
    for expr in checked:
        if not isinstance(expr, str) or not expr.strip():
            raise ValueError(f"{kind} constraints must be non-empty strings, got {expr!r}")
    return checked


class AxOptimizer(TuneOptimizer):
    """:class:`TuneOptimizer` whose search algorithm is ``AxSearch``.

    Recognises, on top of the base settings:

    * ``parameter_constraints`` — list of linear constraint strings.
    * ``outcome_constraints``   — list of metric constraint strings.
    * ``use_scheduler``         — stop unpromising trials early with
      ``AsyncHyperBandScheduler`` (default ``True``).
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        config = {"use_scheduler": True, **(config or {})}
        super().__init__(config)
        self.parameter_constraints = _check_constraints(
            self.config.get("parameter_constraints"), "parameter"
        )
        self.outcome_constraints = _check_constraints(
            self.config.get("outcome_constraints"), "outcome"
        )

    def build_search_alg(self) -> Any:
        from ray.tune.search.ax import AxSearch

        logger.debug(
            "AxSearch with parameter constraints %s, outcome constraints %s",
            self.parameter_constraints,
            self.outcome_constraints,
        )
        return AxSearch(
            parameter_constraints=self.parameter_constraints or None,
            outcome_constraints=self.outcome_constraints or None,
        )

    def build_scheduler(self) -> Any:
        if not self.config.get("use_scheduler"):
            return None
        from ray.tune.schedulers import AsyncHyperBandScheduler

        return AsyncHyperBandScheduler()


def run_hartmann6_search(
    num_samples: int = 10,
    max_concurrent: int = 4,
    iterations: int = 100,
    storage_path: Optional[str] = None,
    verbose: int = 0,
) -> OptimizationResult:
    """Minimise Hartmann6 with Ax under the example's constraints.

    Args:
        num_samples: Number of points Ax proposes.
        max_concurrent: Trials evaluated at the same time.
        iterations: Reports per trial; also the ``timesteps_total`` stop.
        storage_path: Where Tune keeps results.
        verbose: Tune verbosity.

    Returns:
        The best point found and the per-trial summaries.
    """
    optimizer = AxOptimizer(
        {
            "name": "ax",
            "metric": "hartmann6",
            "mode": "min",
            "num_samples": num_samples,
            "max_concurrent": max_concurrent,
            "stop": {"timesteps_total": iterations},
            "parameter_constraints": ["x1 + x2 <= 2.0"],
            "outcome_constraints": ["l2norm <= 1.25"],
            "storage_path": storage_path,
            "verbose": verbose,
        }
    )
    return optimizer.run(None, hartmann6_space(iterations), landscape_trainable)
