"""Shared test fixtures for the rltune test suite."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

import pytest

from rltune.runtime.spec import RunSpec


class FakeRunner:
    """Stand-in for the external trainer.

    Records every experiment it receives and returns canned trial results,
    so runs can be exercised without a Ray cluster.
    """

    def __init__(self, results: List[Mapping[str, Any]] | None = None) -> None:
        self.results = results if results is not None else [
            {"episode_reward_mean": 195.0, "training_iteration": 12},
            {"episode_reward_mean": 201.5, "training_iteration": 9},
        ]
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, name: str, experiment: Dict[str, Any]) -> List[Mapping[str, Any]]:
        self.calls.append({"name": name, "experiment": experiment})
        return self.results


@pytest.fixture
def cartpole_spec() -> RunSpec:
    """A small DQN-style run spec."""
    return RunSpec(
        name="cartpole-dqn",
        env="CartPole-v1",
        run="DQN",
        stop={"episode_reward_mean": 200, "timesteps_total": 100000},
        config={
            "framework": "tf",
            "lr": 0.0005,
            "replay_buffer_config": {"type": "MultiAgentReplayBuffer", "capacity": 50000},
        },
    )


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def in_tmp_dir(tmp_path, monkeypatch):  # type: ignore[no-untyped-def]
    """Run the test from an empty temporary directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
