"""RunSpec — a named training-run block as found in tuned-example YAML files.

A tuned-example file maps one or more run names to a block of the form::

    cartpole_crr:
        env: CartPole-v0
        run: CRR
        stop:
            training_iteration: 100
        config:
            gamma: 0.99
            ...

Each block becomes a :class:`RunSpec`.  The ``config`` mapping is kept
exactly as written; its keys belong to the external RL framework and are
not validated here.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from rltune.utils.helpers import deep_merge, merge_dicts

_CORE_KEYS = ("env", "run", "stop", "config")


class RunSpecError(ValueError):
    """Raised when a run-spec file or block is malformed."""


@dataclass
class RunSpec:
    """Specification of one training run handed to the external trainer.

    Attributes:
        name: Block name (the top-level key in the YAML file).
        env: Environment identifier, e.g. ``"PongNoFrameskip-v4"``.
        run: Algorithm identifier, e.g. ``"APEX"``.
        stop: Stopping condition, metric name → threshold.
        config: Nested hyperparameter mapping passed through untouched.
        extra: Any further top-level keys of the block (``checkpoint_freq``,
            ``num_samples``...), preserved for the runner.
    """

    name: str
    env: str
    run: str
    stop: Dict[str, Any] = field(default_factory=dict)
    config: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, block: Mapping[str, Any]) -> "RunSpec":
        """Build a spec from one YAML block.

        Args:
            name: Block name.
            block: Mapping with ``env``, ``run`` and optional ``stop`` /
                ``config`` entries.

        Returns:
            The parsed :class:`RunSpec`.

        Raises:
            RunSpecError: If required keys are missing or have the wrong type.
        """
        if not isinstance(block, Mapping):
            raise RunSpecError(
                f"Run block '{name}' must be a mapping, got {type(block).__name__}"
            )
        for key in ("env", "run"):
            value = block.get(key)
            if not isinstance(value, str) or not value:
                raise RunSpecError(f"Run block '{name}' needs a non-empty '{key}'")

        stop = block.get("stop") or {}
        config = block.get("config") or {}
        if not isinstance(stop, Mapping):
            raise RunSpecError(f"'stop' of run block '{name}' must be a mapping")
        if not isinstance(config, Mapping):
            raise RunSpecError(f"'config' of run block '{name}' must be a mapping")

        extra = {k: copy.deepcopy(v) for k, v in block.items() if k not in _CORE_KEYS}
        return cls(
            name=str(name),
            env=block["env"],
            run=block["run"],
            stop=copy.deepcopy(dict(stop)),
            config=copy.deepcopy(dict(config)),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the block as it appears in YAML (without the name)."""
        block: Dict[str, Any] = {
            "env": self.env,
            "run": self.run,
            "stop": copy.deepcopy(self.stop),
            "config": copy.deepcopy(self.config),
        }
        block.update(copy.deepcopy(self.extra))
        return block

    def to_experiment(self) -> Dict[str, Any]:
        """Build the experiment mapping consumed by the external runner.

        The environment id moves into ``config["env"]``, which is where the
        trainer expects it.  ``self.config`` is left untouched.
        """
        experiment: Dict[str, Any] = {
            "run": self.run,
            "stop": copy.deepcopy(self.stop),
            "config": {**copy.deepcopy(self.config), "env": self.env},
        }
        experiment.update(copy.deepcopy(self.extra))
        return experiment

    def with_overrides(
        self,
        config: Optional[Mapping[str, Any]] = None,
        stop: Optional[Mapping[str, Any]] = None,
    ) -> "RunSpec":
        """Return a copy with *config* deep-merged and *stop* merged in.

        Args:
            config: Hyperparameter overrides; nested mappings merge key by key.
            stop: Stopping-condition overrides.

        Returns:
            A new :class:`RunSpec`; this instance is not modified.
        """
        return RunSpec(
            name=self.name,
            env=self.env,
            run=self.run,
            stop=merge_dicts(self.stop, dict(stop or {})),
            config=deep_merge(self.config, config or {}),
            extra=copy.deepcopy(self.extra),
        )

    def to_yaml(self, path: str) -> None:
        """Write this spec as a single-block YAML file.

        Args:
            path: Target file path.
        """
        dump_run_specs([self], path)


def parse_run_specs(data: Any, source: str = "<string>") -> List[RunSpec]:
    """Turn an already-parsed YAML document into run specs.

    Args:
        data: Top-level mapping of run name → block.
        source: Description of where *data* came from, for error messages.

    Returns:
        Specs in file order.

    Raises:
        RunSpecError: If the document is empty or not a mapping.
    """
    if not data:
        raise RunSpecError(f"No run blocks found in {source}")
    if not isinstance(data, Mapping):
        raise RunSpecError(f"Top level of {source} must map run names to blocks")
    return [RunSpec.from_dict(name, block) for name, block in data.items()]


def load_run_specs(path: str) -> List[RunSpec]:
    """Load every run block from a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Specs in file order.
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return parse_run_specs(data, source=path)


def load_run_spec(path: str, name: Optional[str] = None) -> RunSpec:
    """Load a single run block from a YAML file.

    Args:
        path: Path to the YAML file.
        name: Block to select.  May be omitted when the file holds one block.

    Returns:
        The selected :class:`RunSpec`.

    Raises:
        RunSpecError: If *name* is unknown, or omitted for a multi-block file.
    """
    specs = load_run_specs(path)
    if name is None:
        if len(specs) != 1:
            names = ", ".join(s.name for s in specs)
            raise RunSpecError(f"{path} holds several run blocks ({names}); pick one")
        return specs[0]
    for spec in specs:
        if spec.name == name:
            return spec
    raise RunSpecError(f"No run block named '{name}' in {path}")


def run_specs_to_yaml(specs: Sequence[RunSpec]) -> str:
    """Serialise specs to a YAML document, keeping block and key order."""
    data = {spec.name: spec.to_dict() for spec in specs}
    return yaml.dump(data, default_flow_style=False, sort_keys=False)


def dump_run_specs(specs: Sequence[RunSpec], path: str) -> None:
    """Write specs to *path* as one YAML document."""
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(run_specs_to_yaml(specs))
