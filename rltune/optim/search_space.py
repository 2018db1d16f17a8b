"""Search-space descriptors independent of any tuning backend.

A :class:`SearchSpace` maps parameter names to :class:`ParamSpec` entries.
It can be written by hand, read from YAML/JSON descriptor mappings::

    lr: {loguniform: [1.0e-5, 1.0e-3]}
    gamma: {choice: [0.95, 0.99]}
    train_batch_size: 64            # constant

and converted to Ray Tune domains with :meth:`SearchSpace.to_tune`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

NUMERIC_KINDS = ("uniform", "loguniform", "randint")
CATEGORICAL_KINDS = ("choice", "grid")
KINDS = NUMERIC_KINDS + CATEGORICAL_KINDS + ("constant",)


@dataclass(frozen=True)
class ParamSpec:
    """Sampling distribution of one parameter.

    Attributes:
        kind: One of ``uniform``, ``loguniform``, ``randint``, ``choice``,
            ``grid`` or ``constant``.
        bounds: ``(low, high)`` for numeric kinds.  ``randint`` excludes
            ``high``.
        values: Candidates for ``choice`` / ``grid``.
        value: The fixed value of a ``constant``.
    """

    kind: str
    bounds: Optional[Tuple[float, float]] = None
    values: Optional[Sequence[Any]] = None
    value: Any = None

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(f"Unknown parameter kind '{self.kind}'. Valid: {KINDS}")
        if self.kind in NUMERIC_KINDS:
            if self.bounds is None or len(self.bounds) != 2:
                raise ValueError(f"'{self.kind}' needs (low, high) bounds")
            low, high = self.bounds
            if not low < high:
                raise ValueError(f"Bounds must satisfy low < high, got {self.bounds}")
            if self.kind == "loguniform" and low <= 0:
                raise ValueError("loguniform bounds must be positive")
        if self.kind in CATEGORICAL_KINDS and not self.values:
            raise ValueError(f"'{self.kind}' needs a non-empty list of values")

    @classmethod
    def uniform(cls, low: float, high: float) -> "ParamSpec":
        return cls("uniform", bounds=(float(low), float(high)))

    @classmethod
    def loguniform(cls, low: float, high: float) -> "ParamSpec":
        return cls("loguniform", bounds=(float(low), float(high)))

    @classmethod
    def randint(cls, low: int, high: int) -> "ParamSpec":
        return cls("randint", bounds=(int(low), int(high)))

    @classmethod
    def choice(cls, values: Sequence[Any]) -> "ParamSpec":
        return cls("choice", values=list(values))

    @classmethod
    def grid(cls, values: Sequence[Any]) -> "ParamSpec":
        return cls("grid", values=list(values))

    @classmethod
    def constant(cls, value: Any) -> "ParamSpec":
        return cls("constant", value=value)

    @classmethod
    def from_descriptor(cls, descriptor: Any) -> "ParamSpec":
        """Parse ``{kind: args}`` or a bare value (taken as a constant).

        Raises:
            ValueError: If the mapping does not hold exactly one known kind.
        """
        if not isinstance(descriptor, Mapping):
            return cls.constant(descriptor)
        if len(descriptor) != 1:
            raise ValueError(f"Descriptor must have exactly one key, got {dict(descriptor)}")
        kind, args = next(iter(descriptor.items()))
        if kind in NUMERIC_KINDS:
            if not isinstance(args, Sequence) or len(args) != 2:
                raise ValueError(f"'{kind}' expects [low, high], got {args!r}")
            return getattr(cls, kind)(*args)
        if kind in CATEGORICAL_KINDS:
            return getattr(cls, kind)(args)
        if kind == "constant":
            return cls.constant(args)
        raise ValueError(f"Unknown parameter kind '{kind}'. Valid: {KINDS}")

    def to_tune(self) -> Any:
        """Return the equivalent Ray Tune domain (or the raw constant)."""
        from ray import tune

        if self.kind == "constant":
            return self.value
        if self.kind == "grid":
            return tune.grid_search(list(self.values))
        if self.kind == "choice":
            return tune.choice(list(self.values))
        low, high = self.bounds
        if self.kind == "randint":
            return tune.randint(int(low), int(high))
        return getattr(tune, self.kind)(low, high)

    def sample(self, rng: np.random.Generator) -> Any:
        """Draw one value."""
        if self.kind == "constant":
            return self.value
        if self.kind in CATEGORICAL_KINDS:
            return self.values[int(rng.integers(len(self.values)))]
        low, high = self.bounds
        if self.kind == "uniform":
            return float(rng.uniform(low, high))
        if self.kind == "loguniform":
            return float(math.exp(rng.uniform(math.log(low), math.log(high))))
        return int(rng.integers(int(low), int(high)))


class SearchSpace:
    """Ordered mapping of parameter name → :class:`ParamSpec`."""

    def __init__(self, params: Optional[Mapping[str, ParamSpec]] = None) -> None:
        self.params: Dict[str, ParamSpec] = dict(params or {})

    @classmethod
    def from_dict(cls, mapping: Mapping[str, Any]) -> "SearchSpace":
        """Build a space from descriptor mappings (see module docstring)."""
        return cls(
            {
                name: spec if isinstance(spec, ParamSpec) else ParamSpec.from_descriptor(spec)
                for name, spec in mapping.items()
            }
        )

    @property
    def names(self) -> List[str]:
        return list(self.params)

    def tunable(self) -> List[str]:
        """Names of the parameters that are not constants."""
        return [name for name, spec in self.params.items() if spec.kind != "constant"]

    def to_tune(self) -> Dict[str, Any]:
        """Convert every entry to a Ray Tune domain."""
        return {name: spec.to_tune() for name, spec in self.params.items()}

    def sample(self, rng: Optional[np.random.Generator] = None) -> Dict[str, Any]:
        """Draw one configuration."""
        rng = rng if rng is not None else np.random.default_rng()
        return {name: spec.sample(rng) for name, spec in self.params.items()}

    def __len__(self) -> int:
        return len(self.params)

    def __contains__(self, name: object) -> bool:
        return name in self.params

    def __iter__(self) -> Iterator[str]:
        return iter(self.params)

    def __getitem__(self, name: str) -> ParamSpec:
        return self.params[name]


def hartmann6_space(iterations: int = 100) -> SearchSpace:
    """The unit-hypercube space of the Hartmann6 example."""
    params: Dict[str, ParamSpec] = {"iterations": ParamSpec.constant(iterations)}
    for i in range(1, 7):
        params[f"x{i}"] = ParamSpec.uniform(0.0, 1.0)
    return SearchSpace(params)
