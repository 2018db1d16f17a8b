"""Runtime layer — run specifications, lifecycle and execution."""

from rltune.runtime.experiment import RunExperiment, tune_runner
from rltune.runtime.regression import learning_achieved, lookup_metric, stop_reached
from rltune.runtime.spec import (
    RunSpec,
    RunSpecError,
    dump_run_specs,
    load_run_spec,
    load_run_specs,
    run_specs_to_yaml,
)
from rltune.runtime.state_machine import LifecycleState, StateMachine

__all__ = [
    'LifecycleState',
    'RunExperiment',
    'RunSpec',
    'RunSpecError',
    'StateMachine',
    'dump_run_specs',
    'learning_achieved',
    'load_run_spec',
    'load_run_specs',
    'lookup_metric',
    'run_specs_to_yaml',
    'stop_reached',
    'tune_runner',
]
