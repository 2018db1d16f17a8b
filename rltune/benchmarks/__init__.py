"""Benchmark landscapes used to exercise search algorithms."""

from rltune.benchmarks.landscape import (
    HARTMANN6_ARGMIN,
    HARTMANN6_MIN,
    PARAM_NAMES,
    evaluate_landscape,
    hartmann6,
    landscape_trainable,
)

__all__ = [
    "HARTMANN6_ARGMIN",
    "HARTMANN6_MIN",
    "PARAM_NAMES",
    "evaluate_landscape",
    "hartmann6",
    "landscape_trainable",
]
