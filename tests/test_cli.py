"""Tests for the rltune command-line interface."""

from __future__ import annotations

import pytest
import yaml

from rltune import __version__
from rltune.cli import main
from rltune.loggers import wandb_logger as wandb_logger_module
from rltune.loggers.local_logger import LocalFileLogger
from rltune.runtime import experiment as experiment_module

APEX = "apex_dqn/pong-apex-dqn.yaml"
CRR = "crr/cartpole-v0-crr_expectation.yaml"


@pytest.fixture
def patched_runner(monkeypatch, fake_runner):  # type: ignore[no-untyped-def]
    monkeypatch.setattr(experiment_module, "tune_runner", fake_runner)
    return fake_runner


class TestInfoAndList:
    def test_info(self, capsys) -> None:  # type: ignore[no-untyped-def]
        assert main(["info"]) == 0
        assert __version__ in capsys.readouterr().out

    def test_list(self, capsys) -> None:  # type: ignore[no-untyped-def]
        assert main(["list"]) == 0
        assert capsys.readouterr().out.split() == [APEX, CRR]

    def test_no_command(self, capsys) -> None:  # type: ignore[no-untyped-def]
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out


class TestShow:
    def test_show_shipped_example(self, capsys) -> None:  # type: ignore[no-untyped-def]
        assert main(["show", APEX]) == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["pong-apex"]["config"]["lr"] == 0.00005

    def test_show_unknown_block(self, capsys) -> None:  # type: ignore[no-untyped-def]
        assert main(["show", CRR, "--name", "missing"]) == 1
        assert "No run block named 'missing'" in capsys.readouterr().err

    def test_show_missing_file(self, capsys) -> None:  # type: ignore[no-untyped-def]
        assert main(["show", "does/not/exist.yaml"]) == 1
        assert "config file not found" in capsys.readouterr().err

    def test_show_broken_yaml(self, tmp_path, capsys) -> None:  # type: ignore[no-untyped-def]
        path = tmp_path / "broken.yaml"
        path.write_text("a: [1, 2\n", encoding="utf-8")
        assert main(["show", str(path)]) == 1
        assert "cannot parse" in capsys.readouterr().err


class TestTrain:
    def test_dry_run(self, capsys, patched_runner) -> None:  # type: ignore[no-untyped-def]
        code = main(["train", "-f", CRR, "--framework", "tf2", "--dry-run"])
        assert code == 0
        assert patched_runner.calls == []
        data = yaml.safe_load(capsys.readouterr().out)
        experiment = data["cartpole_crr"]
        assert experiment["run"] == "CRR"
        assert experiment["config"]["framework"] == "tf2"
        assert experiment["config"]["env"] == "CartPole-v0"

    def test_train_passes(self, in_tmp_dir, patched_runner, capsys) -> None:  # type: ignore[no-untyped-def]
        patched_runner.results = [{"episode_reward_mean": 19.5}]
        code = main(
            [
                "train",
                "-f",
                APEX,
                "--config",
                '{"num_workers": 1, "replay_buffer_config": {"capacity": 1000}}',
                "--stop",
                '{"timesteps_total": 1000}',
            ]
        )
        assert code == 0
        sent = patched_runner.calls[0]["experiment"]
        assert sent["config"]["num_workers"] == 1
        assert sent["config"]["replay_buffer_config"] == {
            "type": "MultiAgentPrioritizedReplayBuffer",
            "capacity": 1000,
        }
        assert sent["stop"]["timesteps_total"] == 1000
        assert "Learning achieved: yes" in capsys.readouterr().out

    def test_train_fails_learning_check(self, in_tmp_dir, patched_runner) -> None:  # type: ignore[no-untyped-def]
        patched_runner.results = [{"episode_reward_mean": 3.0}]
        assert main(["train", "-f", APEX]) == 1

    def test_bad_json(self, capsys) -> None:  # type: ignore[no-untyped-def]
        assert main(["train", "-f", APEX, "--config", "{lr: 1}"]) == 1
        assert "--config is not valid JSON" in capsys.readouterr().err

    def test_json_must_be_object(self, capsys) -> None:  # type: ignore[no-untyped-def]
        assert main(["train", "-f", APEX, "--stop", "[1, 2]"]) == 1
        assert "--stop must be a JSON object" in capsys.readouterr().err

    def test_bad_framework(self) -> None:
        with pytest.raises(SystemExit):
            main(["train", "-f", APEX, "--framework", "jax"])


class RecordingWandbLogger(LocalFileLogger):
    """Local logger standing in for WandB; remembers lifecycle calls."""

    created: list = []

    def __init__(self, project: str, name: str | None = None, config=None) -> None:  # type: ignore[no-untyped-def]
        super().__init__(run_dir="artifacts/wandb")
        self.project = project
        self.finished = False
        RecordingWandbLogger.created.append(self)

    def finish(self) -> None:
        self.finished = True


class TestTrainWandb:
    @pytest.fixture(autouse=True)
    def fake_wandb(self, monkeypatch, in_tmp_dir):  # type: ignore[no-untyped-def]
        RecordingWandbLogger.created = []
        monkeypatch.setattr(wandb_logger_module, "WandbLogger", RecordingWandbLogger)

    def test_dry_run_starts_no_wandb_run(self, patched_runner) -> None:  # type: ignore[no-untyped-def]
        assert main(["train", "-f", CRR, "--wandb-project", "p", "--dry-run"]) == 0
        assert RecordingWandbLogger.created == []

    def test_logger_finished_after_run(self, patched_runner) -> None:  # type: ignore[no-untyped-def]
        patched_runner.results = [{"episode_reward_mean": 19.5}]
        assert main(["train", "-f", APEX, "--wandb-project", "p"]) == 0
        (logger,) = RecordingWandbLogger.created
        assert logger.project == "p"
        assert logger.finished is True
        assert logger.read_metrics()[0]["episode_reward_mean"] == pytest.approx(19.5)

    def test_logger_finished_when_run_fails(self, monkeypatch) -> None:  # type: ignore[no-untyped-def]
        def broken(name, experiment):  # type: ignore[no-untyped-def]
            raise RuntimeError("trainer crashed")

        monkeypatch.setattr(experiment_module, "tune_runner", broken)
        with pytest.raises(RuntimeError, match="trainer crashed"):
            main(["train", "-f", APEX, "--wandb-project", "p"])
        (logger,) = RecordingWandbLogger.created
        assert logger.finished is True
