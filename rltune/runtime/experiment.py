"""RunExperiment — drives one :class:`RunSpec` through the external trainer.

The class owns nothing of the training itself.  It turns the spec into the
experiment mapping the trainer expects, hands it over unchanged, collects
the last result of every trial and records it through an experiment
logger::

    spec = load_run_spec("rltune/tuned_examples/crr/cartpole-v0-crr_expectation.yaml")
    summary = RunExperiment(spec, overrides={"framework": "torch"}).run()
    summary["passed"]   # did a trial reach the reward threshold?

By default the trainer is Ray Tune (``ray.tune.run``), which resolves the
``run`` identifier to an RLlib algorithm.  Any callable with the signature
``runner(name, experiment) -> list of result dicts`` can replace it.
"""

from __future__ import annotations

import logging
import numbers
import os
from typing import Any, Callable, Dict, List, Mapping, Optional

from rltune.loggers.interface import LoggerInterface
from rltune.runtime.regression import learning_achieved
from rltune.runtime.spec import RunSpec
from rltune.runtime.state_machine import LifecycleState, StateMachine
from rltune.utils.helpers import ensure_dir, flatten_dict, timestamp_id

logger = logging.getLogger(__name__)

Runner = Callable[[str, Dict[str, Any]], List[Mapping[str, Any]]]


def tune_runner(name: str, experiment: Dict[str, Any]) -> List[Mapping[str, Any]]:
    """Run *experiment* with ``ray.tune.run`` and return each trial's last result.

    Args:
        name: Experiment name shown by Tune.
        experiment: Mapping with ``run``, ``stop``, ``config`` and any other
            ``tune.run`` keyword arguments.

    Returns:
        The last reported result of every trial.
    """
    from ray import tune

    kwargs = dict(experiment)
    run = kwargs.pop("run")
    analysis = tune.run(run, name=name, **kwargs)
    return [trial.last_result for trial in analysis.trials]


class RunExperiment:
    """Orchestrates the lifecycle of a single run specification.

    Usage::

        exp = RunExperiment(spec, exp_logger=LocalFileLogger("logs"))
        exp.dry_run()        # mapping that would be handed to the trainer
        summary = exp.run()  # actually train
    """

    def __init__(
        self,
        spec: RunSpec,
        exp_logger: Optional[LoggerInterface] = None,
        runner: Optional[Runner] = None,
        overrides: Optional[Dict[str, Any]] = None,
        stop_overrides: Optional[Dict[str, Any]] = None,
        artifacts_root: str = "artifacts",
    ) -> None:
        """Set up the run.

        Args:
            spec: The run specification to execute.
            exp_logger: Logger for trial results; a :class:`LocalFileLogger`
                in the run's artifacts directory is created when omitted.
            runner: Trainer entry point; defaults to :func:`tune_runner`.
            overrides: Hyperparameters deep-merged into ``spec.config``.
            stop_overrides: Entries merged into ``spec.stop``.
            artifacts_root: Parent directory of per-run artifact folders.
        """
        self.spec = spec.with_overrides(config=overrides, stop=stop_overrides)
        self.exp_logger = exp_logger
        self.runner = runner or tune_runner
        self.artifacts_root = artifacts_root

        self._sm = StateMachine()
        self._callbacks: Dict[str, List[Callable[..., Any]]] = {
            'on_start': [],
            'on_trial_result': [],
            'on_complete': [],
        }
        self._artifacts_dir: Optional[str] = None

    # ------------------------------------------------------------------
    # Callback registration
    # ------------------------------------------------------------------

    def register_callback(self, event: str, fn: Callable[..., Any]) -> None:
        """Register a callback for *event*.

        Args:
            event: One of ``"on_start"``, ``"on_trial_result"``,
                ``"on_complete"``.
            fn: Callable invoked when the event fires.

        Raises:
            KeyError: If *event* is not recognised.
        """
        if event not in self._callbacks:
            raise KeyError(f"Unknown event '{event}'. Valid: {list(self._callbacks)}")
        self._callbacks[event].append(fn)

    def _fire(self, event: str, **kwargs: Any) -> None:
        """Invoke all callbacks registered for *event*."""
        for fn in self._callbacks.get(event, []):
            fn(**kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def dry_run(self) -> Dict[str, Any]:
        """Return the experiment mapping without running anything."""
        return self.spec.to_experiment()

    def run(self) -> Dict[str, Any]:
        """Hand the spec to the trainer and summarise the outcome.

        Returns:
            Summary dictionary with ``status``, ``run_id``, ``artifacts_dir``,
            ``trials`` (last result per trial), ``passed`` and ``state``.

        Raises:
            Exception: Whatever the trainer raised; the run is marked
                ``ERRORED`` first.
        """
        run_id = f'{self.spec.name}_{timestamp_id()}'
        self._artifacts_dir = ensure_dir(os.path.join(self.artifacts_root, run_id))

        spec_path = os.path.join(self._artifacts_dir, 'spec.yaml')
        self.spec.to_yaml(spec_path)
        logger.info('Run spec saved to %s', spec_path)

        if self.exp_logger is None:
            from rltune.loggers.local_logger import LocalFileLogger

            self.exp_logger = LocalFileLogger(run_dir=self._artifacts_dir)

        experiment = self.spec.to_experiment()
        self._sm.transition(LifecycleState.RUNNING)
        self._fire('on_start', experiment=experiment)
        logger.info(
            "Starting run '%s' (%s on %s)", self.spec.name, self.spec.run, self.spec.env
        )

        try:
            results = list(self.runner(self.spec.name, experiment))
        except Exception:
            self._sm.transition(LifecycleState.ERRORED)
            logger.exception("Run '%s' failed", self.spec.name)
            raise

        for index, result in enumerate(results):
            self.exp_logger.log_metrics(step=index, metrics=scalar_metrics(result))
            self._fire('on_trial_result', index=index, result=result)

        passed = learning_achieved(results, self.spec.stop)
        self._sm.transition(LifecycleState.TERMINATED)
        self.exp_logger.log_artifact(spec_path)

        summary: Dict[str, Any] = {
            'status': 'ok',
            'run_id': run_id,
            'artifacts_dir': self._artifacts_dir,
            'trials': results,
            'passed': passed,
            'state': self._sm.state.value,
        }
        self._fire('on_complete', summary=summary)
        logger.info(
            "Run '%s' finished: %d trial(s), learning %s",
            self.spec.name,
            len(results),
            'achieved' if passed else 'not achieved',
        )
        return summary

    # ------------------------------------------------------------------
    # Pause / Resume
    # ------------------------------------------------------------------

    def pause(self) -> None:
        """Mark the run as paused (only valid while RUNNING).

        Raises:
            ValueError: If the current state does not allow pausing.
        """
        self._sm.transition(LifecycleState.PAUSED)
        logger.info('Run paused.')

    def resume(self) -> None:
        """Resume a paused run.

        Raises:
            ValueError: If the run is not in PAUSED state.
        """
        self._sm.transition(LifecycleState.RUNNING)
        logger.info('Run resumed.')

    @property
    def state(self) -> LifecycleState:
        """Current lifecycle state of the run."""
        return self._sm.state

    @property
    def artifacts_dir(self) -> Optional[str]:
        """Path to the artifacts directory (set after :meth:`run`)."""
        return self._artifacts_dir


def scalar_metrics(result: Mapping[str, Any]) -> Dict[str, Any]:
    """Flatten a trial result and keep the numeric and string leaves."""
    return {
        key: value
        for key, value in flatten_dict(result).items()
        if isinstance(value, (numbers.Number, str))
    }
