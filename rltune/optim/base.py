"""Base optimiser interface and result container.

All hyperparameter optimisers implement :class:`BaseOptimizer` so the CLI
and example scripts can invoke a search uniformly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


@dataclass
class OptimizationResult:
    """Container for the outcome of a hyperparameter search.

    Attributes:
        best_config: Hyperparameters of the best trial.
        best_value: Metric value achieved by the best trial.
        n_trials: Total number of evaluated configurations.
        trials_summary: Per-trial records with config and metrics.
    """

    best_config: Dict[str, Any]
    best_value: float
    n_trials: int
    trials_summary: List[Dict[str, Any]] = field(default_factory=list)


class BaseOptimizer(ABC):
    """Abstract base class for hyperparameter optimisers.

    Subclasses must implement :meth:`run`.
    """

    @abstractmethod
    def run(
        self,
        spec: Any,
        search_space: Any,
        trainable: Optional[Callable[..., Any]] = None,
    ) -> OptimizationResult:
        """Execute a hyperparameter search.

        Args:
            spec: Optional :class:`RunSpec` whose config seeds every trial.
            search_space: A :class:`SearchSpace` or a backend-native mapping.
            trainable: Function evaluated once per sampled configuration.

        Returns:
            An :class:`OptimizationResult` with the best configuration.
        """
