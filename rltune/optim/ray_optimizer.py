"""TuneOptimizer — hyperparameter optimisation via Ray Tune.

The optimiser only assembles arguments: the search space, an optional
search algorithm (capped by a ``ConcurrencyLimiter``), an optional trial
scheduler and the stopping condition.  Trial execution, parallelism and
result aggregation belong to Ray Tune.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Optional

from rltune.optim.base import BaseOptimizer, OptimizationResult
from rltune.optim.search_space import SearchSpace
from rltune.runtime.spec import RunSpec
from rltune.utils.helpers import merge_dicts

logger = logging.getLogger(__name__)


class TuneOptimizer(BaseOptimizer):
    """Hyperparameter optimiser backed by ``ray.tune.run``.

    Attributes:
        config: Optimiser-level configuration (``num_samples``, etc.).
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Initialise the optimiser.

        Args:
            config: Optimiser settings.  Recognised keys:

                * ``num_samples``    — number of trials (default 4).
                * ``metric``         — metric name to optimise (default ``"loss"``).
                * ``mode``           — ``"min"`` or ``"max"`` (default ``"min"``).
                * ``max_concurrent`` — cap on concurrently running trials
                  (default ``None``, no cap).
                * ``stop``           — stopping condition mapping.
                * ``name``           — experiment name.
                * ``storage_path``   — where Tune keeps results.
                * ``verbose``        — Tune verbosity (default 0).

        Raises:
            ValueError: On an unknown ``mode`` or ``num_samples < 1``.
        """
        self.config: Dict[str, Any] = {
            "num_samples": 4,
            "metric": "loss",
            "mode": "min",
            "max_concurrent": None,
            "stop": None,
            "name": None,
            "storage_path": None,
            "verbose": 0,
            **(config or {}),
        }
        if self.config["mode"] not in ("min", "max"):
            raise ValueError(f"mode must be 'min' or 'max', got {self.config['mode']!r}")
        if int(self.config["num_samples"]) < 1:
            raise ValueError("num_samples must be at least 1")

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    @staticmethod
    def merge_search_spaces(
        model_space: Dict[str, Any],
        task_constraints: Dict[str, Any],
        user_overrides: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Merge search spaces with precedence: user > task > model.

        Args:
            model_space: Default ranges declared for the algorithm.
            task_constraints: Constraints imposed by the environment.
            user_overrides: Explicit overrides from the user / config file.

        Returns:
            Merged search space dictionary.
        """
        merged = {**model_space}
        merged.update(task_constraints)
        merged.update(user_overrides)
        return merged

    def build_search_alg(self) -> Any:
        """Return the search algorithm; ``None`` means Tune's default."""
        return None

    def build_scheduler(self) -> Any:
        """Return the trial scheduler; ``None`` means FIFO."""
        return None

    def limit_concurrency(self, search_alg: Any) -> Any:
        """Wrap *search_alg* in a ``ConcurrencyLimiter`` when a cap is set."""
        max_concurrent = self.config.get("max_concurrent")
        if search_alg is None or not max_concurrent or max_concurrent < 1:
            return search_alg
        from ray.tune.search import ConcurrencyLimiter

        return ConcurrencyLimiter(search_alg, max_concurrent=int(max_concurrent))

    # ------------------------------------------------------------------
    # run()
    # ------------------------------------------------------------------

    def run(
        self,
        spec: Optional[RunSpec],
        search_space: Any,
        trainable: Optional[Callable[..., Any]] = None,
    ) -> OptimizationResult:
        """Run hyperparameter optimisation.

        Args:
            spec: Optional run spec.  Its ``config`` (with ``env``) seeds
                every trial, its ``stop`` is the default stopping condition
                and its ``run`` is the default trainable.
            search_space: A :class:`SearchSpace` or a mapping of Ray Tune
                domains.  Entries override the spec's config.
            trainable: Function or registered trainable name evaluated per
                trial.

        Returns:
            :class:`OptimizationResult` with the best configuration found.

        Raises:
            ValueError: If neither *trainable* nor *spec* is given.
        """
        if trainable is None and spec is None:
            raise ValueError("Pass a trainable or a RunSpec to optimise")

        if isinstance(search_space, SearchSpace):
            search_space = search_space.to_tune()

        param_space = dict(search_space)
        stop = self.config.get("stop")
        if spec is not None:
            experiment = spec.to_experiment()
            param_space = merge_dicts(experiment["config"], param_space)
            stop = merge_dicts(spec.stop, stop or {})
            trainable = trainable or spec.run

        search_alg = self.limit_concurrency(self.build_search_alg())
        analysis = self._tune_run(
            trainable,
            config=param_space,
            num_samples=int(self.config["num_samples"]),
            metric=self.config["metric"],
            mode=self.config["mode"],
            search_alg=search_alg,
            scheduler=self.build_scheduler(),
            stop=stop or None,
            name=self.config.get("name"),
            storage_path=self.config.get("storage_path"),
            verbose=self.config.get("verbose", 0),
        )
        result = self._to_result(analysis)
        logger.info(
            "Search finished: %d trial(s), best %s=%s",
            result.n_trials,
            self.config["metric"],
            result.best_value,
        )
        return result

    # ------------------------------------------------------------------
    # Ray Tune glue
    # ------------------------------------------------------------------

    def _tune_run(self, trainable: Any, **kwargs: Any) -> Any:
        """Call ``ray.tune.run``, dropping keyword arguments set to ``None``."""
        from ray import tune

        kwargs = {k: v for k, v in kwargs.items() if v is not None}
        return tune.run(trainable, **kwargs)

    def _to_result(self, analysis: Any) -> OptimizationResult:
        """Turn a Tune ``ExperimentAnalysis`` into an :class:`OptimizationResult`."""
        metric = self.config["metric"]
        mode = self.config["mode"]

        trials_summary: List[Dict[str, Any]] = [
            {
                "trial_id": i,
                "config": t.config,
                "metrics": t.last_result,
            }
            for i, t in enumerate(analysis.trials)
        ]

        best_config: Dict[str, Any] = {}
        best_value = math.nan
        best_trial = analysis.get_best_trial(metric=metric, mode=mode)
        if best_trial is not None:
            best_config = best_trial.config
            best_value = float(best_trial.last_result.get(metric, math.nan))
        else:
            logger.warning("No trial reported metric '%s'", metric)

        return OptimizationResult(
            best_config=best_config,
            best_value=best_value,
            n_trials=len(analysis.trials),
            trials_summary=trials_summary,
        )
