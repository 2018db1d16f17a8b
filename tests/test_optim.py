"""Unit tests for the optimiser module."""

from __future__ import annotations

import math
from types import SimpleNamespace
from typing import Any, Dict, List

import numpy as np
import pytest

from rltune.optim.ax_optimizer import AxOptimizer
from rltune.optim.base import OptimizationResult
from rltune.optim.ray_optimizer import TuneOptimizer
from rltune.optim.search_space import ParamSpec, SearchSpace, hartmann6_space
from rltune.runtime.spec import RunSpec


class FakeAnalysis:
    """Mimics the parts of Tune's ``ExperimentAnalysis`` the optimiser reads."""

    def __init__(self, trials: List[SimpleNamespace]) -> None:
        self.trials = trials

    def get_best_trial(self, metric: str, mode: str) -> Any:
        scored = [t for t in self.trials if metric in t.last_result]
        if not scored:
            return None
        pick = min if mode == "min" else max
        return pick(scored, key=lambda t: t.last_result[metric])


def _trial(config: Dict[str, Any], **metrics: Any) -> SimpleNamespace:
    return SimpleNamespace(config=config, last_result=metrics)


class RecordingOptimizer(TuneOptimizer):
    """TuneOptimizer that records the ``tune.run`` call instead of making it."""

    def __init__(self, analysis: FakeAnalysis, config: Dict[str, Any] | None = None) -> None:
        super().__init__(config)
        self.analysis = analysis
        self.calls: List[Dict[str, Any]] = []

    def _tune_run(self, trainable: Any, **kwargs: Any) -> Any:
        self.calls.append({"trainable": trainable, **kwargs})
        return self.analysis


# ---------------------------------------------------------------------------
# Search space
# ---------------------------------------------------------------------------


class TestParamSpec:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"kind": "uniform", "bounds": (1.0, 1.0)},
            {"kind": "uniform"},
            {"kind": "loguniform", "bounds": (0.0, 1.0)},
            {"kind": "choice", "values": []},
            {"kind": "normal", "bounds": (0.0, 1.0)},
        ],
    )
    def test_invalid(self, kwargs: Dict[str, Any]) -> None:
        with pytest.raises(ValueError):
            ParamSpec(**kwargs)

    def test_from_descriptor(self) -> None:
        assert ParamSpec.from_descriptor({"uniform": [0, 1]}) == ParamSpec.uniform(0.0, 1.0)
        assert ParamSpec.from_descriptor({"choice": ["a", "b"]}).values == ["a", "b"]
        assert ParamSpec.from_descriptor(64) == ParamSpec.constant(64)
        assert ParamSpec.from_descriptor([128, 128]).value == [128, 128]

    @pytest.mark.parametrize(
        "descriptor",
        [{"uniform": [0, 1], "choice": [1]}, {"uniform": [0]}, {"normal": [0, 1]}],
    )
    def test_bad_descriptor(self, descriptor: Dict[str, Any]) -> None:
        with pytest.raises(ValueError):
            ParamSpec.from_descriptor(descriptor)

    def test_sample_within_bounds(self) -> None:
        rng = np.random.default_rng(3)
        lr = ParamSpec.loguniform(1e-5, 1e-2)
        batch = ParamSpec.randint(16, 64)
        for _ in range(200):
            assert 1e-5 <= lr.sample(rng) <= 1e-2
            value = batch.sample(rng)
            assert isinstance(value, int) and 16 <= value < 64


class TestSearchSpace:
    def test_from_dict(self) -> None:
        space = SearchSpace.from_dict(
            {
                "lr": {"loguniform": [1e-5, 1e-3]},
                "gamma": {"grid": [0.95, 0.99]},
                "train_batch_size": 64,
            }
        )
        assert space.names == ["lr", "gamma", "train_batch_size"]
        assert space.tunable() == ["lr", "gamma"]
        assert "lr" in space and len(space) == 3
        assert space["gamma"].kind == "grid"

    def test_sample_is_reproducible(self) -> None:
        space = hartmann6_space(iterations=7)
        a = space.sample(np.random.default_rng(11))
        b = space.sample(np.random.default_rng(11))
        assert a == b
        assert a["iterations"] == 7
        assert all(0.0 <= a[f"x{i}"] <= 1.0 for i in range(1, 7))

    def test_hartmann6_space(self) -> None:
        space = hartmann6_space()
        assert space.names == ["iterations", "x1", "x2", "x3", "x4", "x5", "x6"]
        assert space["x3"] == ParamSpec.uniform(0.0, 1.0)


# ---------------------------------------------------------------------------
# TuneOptimizer
# ---------------------------------------------------------------------------


class TestOptimizationResult:
    def test_creation(self) -> None:
        result = OptimizationResult(best_config={"lr": 0.01}, best_value=0.42, n_trials=4)
        assert result.best_value == pytest.approx(0.42)
        assert result.trials_summary == []


class TestTuneOptimizer:
    def test_default_config(self) -> None:
        opt = TuneOptimizer()
        assert opt.config["num_samples"] == 4
        assert opt.config["mode"] == "min"
        assert opt.config["max_concurrent"] is None

    def test_invalid_mode(self) -> None:
        with pytest.raises(ValueError, match="mode"):
            TuneOptimizer({"mode": "minimise"})

    def test_invalid_num_samples(self) -> None:
        with pytest.raises(ValueError, match="num_samples"):
            TuneOptimizer({"num_samples": 0})

    def test_merge_search_spaces(self) -> None:
        merged = TuneOptimizer.merge_search_spaces(
            model_space={"lr": 0.01, "hidden": 64},
            task_constraints={"hidden": 128},
            user_overrides={"lr": 0.001},
        )
        assert merged["lr"] == 0.001  # user wins
        assert merged["hidden"] == 128  # task wins over model

    def test_no_limiter_without_cap(self) -> None:
        sentinel = object()
        assert TuneOptimizer().limit_concurrency(sentinel) is sentinel
        assert TuneOptimizer({"max_concurrent": 4}).limit_concurrency(None) is None

    def test_requires_trainable_or_spec(self) -> None:
        with pytest.raises(ValueError, match="trainable"):
            RecordingOptimizer(FakeAnalysis([])).run(None, {})

    def test_run_with_trainable(self) -> None:
        analysis = FakeAnalysis(
            [_trial({"lr": 0.1}, loss=0.5), _trial({"lr": 0.01}, loss=0.2)]
        )
        opt = RecordingOptimizer(analysis, {"num_samples": 2, "stop": {"training_iteration": 3}})

        def trainable(config):  # type: ignore[no-untyped-def]
            return None

        result = opt.run(None, {"lr": [0.1, 0.01]}, trainable)

        call = opt.calls[0]
        assert call["trainable"] is trainable
        assert call["num_samples"] == 2
        assert call["stop"] == {"training_iteration": 3}
        assert call["search_alg"] is None
        assert result.best_config == {"lr": 0.01}
        assert result.best_value == pytest.approx(0.2)
        assert result.n_trials == 2
        assert [t["trial_id"] for t in result.trials_summary] == [0, 1]

    def test_max_mode(self) -> None:
        analysis = FakeAnalysis([_trial({"a": 1}, reward=1.0), _trial({"a": 2}, reward=3.0)])
        opt = RecordingOptimizer(analysis, {"metric": "reward", "mode": "max"})
        result = opt.run(None, {}, lambda config: None)
        assert result.best_config == {"a": 2}

    def test_no_metric_reported(self) -> None:
        opt = RecordingOptimizer(FakeAnalysis([_trial({"a": 1})]))
        result = opt.run(None, {}, lambda config: None)
        assert result.best_config == {}
        assert math.isnan(result.best_value)
        assert result.n_trials == 1

    def test_run_from_spec(self, cartpole_spec: RunSpec) -> None:
        opt = RecordingOptimizer(
            FakeAnalysis([_trial({}, episode_reward_mean=10.0)]),
            {"metric": "episode_reward_mean", "mode": "max", "stop": {"training_iteration": 5}},
        )
        opt.run(cartpole_spec, {"lr": 0.001})
        call = opt.calls[0]
        assert call["trainable"] == "DQN"
        assert call["config"]["env"] == "CartPole-v1"
        assert call["config"]["lr"] == 0.001
        assert call["config"]["framework"] == "tf"
        assert call["stop"] == {
            "episode_reward_mean": 200,
            "timesteps_total": 100000,
            "training_iteration": 5,
        }


# ---------------------------------------------------------------------------
# AxOptimizer
# ---------------------------------------------------------------------------


class TestAxOptimizer:
    def test_constraints_kept(self) -> None:
        opt = AxOptimizer(
            {
                "parameter_constraints": ["x1 + x2 <= 2.0"],
                "outcome_constraints": ["l2norm <= 1.25"],
            }
        )
        assert opt.parameter_constraints == ["x1 + x2 <= 2.0"]
        assert opt.outcome_constraints == ["l2norm <= 1.25"]
        assert opt.config["use_scheduler"] is True

    @pytest.mark.parametrize("bad", [[""], ["  "], [3]])
    def test_bad_constraints(self, bad: list) -> None:
        with pytest.raises(ValueError, match="constraints"):
            AxOptimizer({"parameter_constraints": bad})

    def test_scheduler_disabled(self) -> None:
        assert AxOptimizer({"use_scheduler": False}).build_scheduler() is None


# ---------------------------------------------------------------------------
# Ray / Ax integration (skipped when the libraries are absent)
# ---------------------------------------------------------------------------


def _dummy_searcher() -> Any:
    from ray.tune.search import Searcher

    class Dummy(Searcher):
        def suggest(self, trial_id):  # type: ignore[no-untyped-def]
            return {}

        def on_trial_complete(self, trial_id, result=None, error=False):  # type: ignore[no-untyped-def]
            pass

    return Dummy()


class TestRayIntegration:
    def test_to_tune_domains(self) -> None:
        pytest.importorskip("ray.tune")
        from ray.tune.search.sample import Categorical, Float, Integer

        space = SearchSpace.from_dict(
            {
                "lr": {"loguniform": [1e-5, 1e-3]},
                "gamma": {"grid": [0.95, 0.99]},
                "act": {"choice": ["relu", "tanh"]},
                "n": {"randint": [1, 4]},
                "batch": 64,
            }
        )
        converted = space.to_tune()
        assert isinstance(converted["lr"], Float)
        assert isinstance(converted["n"], Integer)
        assert isinstance(converted["act"], Categorical)
        assert converted["gamma"] == {"grid_search": [0.95, 0.99]}
        assert converted["batch"] == 64

    def test_concurrency_limiter(self) -> None:
        pytest.importorskip("ray.tune")
        from ray.tune.search import ConcurrencyLimiter

        limited = TuneOptimizer({"max_concurrent": 2}).limit_concurrency(_dummy_searcher())
        assert isinstance(limited, ConcurrencyLimiter)
        assert limited.max_concurrent == 2

    def test_ax_search_alg(self) -> None:
        pytest.importorskip("ray.tune")
        pytest.importorskip("ax")
        from ray.tune.search.ax import AxSearch

        opt = AxOptimizer(
            {
                "max_concurrent": 4,
                "parameter_constraints": ["x1 + x2 <= 2.0"],
                "outcome_constraints": ["l2norm <= 1.25"],
            }
        )
        searcher = opt.build_search_alg()
        assert isinstance(searcher, AxSearch)
        assert opt.limit_concurrency(searcher).max_concurrent == 4
