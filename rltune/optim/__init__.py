"""Optimiser layer — hyperparameter search through Ray Tune."""

from rltune.optim.ax_optimizer import AxOptimizer, run_hartmann6_search
from rltune.optim.base import BaseOptimizer, OptimizationResult
from rltune.optim.ray_optimizer import TuneOptimizer
from rltune.optim.search_space import ParamSpec, SearchSpace, hartmann6_space

__all__ = [
    "AxOptimizer",
    "BaseOptimizer",
    "OptimizationResult",
    "ParamSpec",
    "SearchSpace",
    "TuneOptimizer",
    "hartmann6_space",
    "run_hartmann6_search",
]
