"""Contract shared by the places a run's outcome is recorded.

A :class:`~rltune.runtime.experiment.RunExperiment` talks to its logger at
two points.  After the trainer returns, each trial's last result goes to
:meth:`LoggerInterface.log_metrics`; once all trials are logged the run's
``spec.yaml`` snapshot goes to :meth:`LoggerInterface.log_artifact`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class LoggerInterface(ABC):
    """Sink for trial results and the spec snapshot of one run."""

    @abstractmethod
    def log_metrics(self, step: int, metrics: Dict[str, Any]) -> None:
        """Record the last result of one trial.

        Args:
            step: Index of the trial within the run, starting at 0.
            metrics: The trial result flattened to ``/``-joined keys, e.g.
                ``evaluation/episode_reward_mean``.  Values are numbers or
                strings; nested mappings and lists never reach a logger.
        """

    @abstractmethod
    def log_artifact(
        self, path: str, metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Keep the ``spec.yaml`` written for the run.

        The file holds the run block after overrides, in the same YAML
        shape the tuned examples use, so it can be fed back to
        ``rltune train -f``.

        Args:
            path: Path of the snapshot on local disk.
            metadata: Extra key/value pairs a backend may store with it.
        """

    def finish(self) -> None:
        """Close the backend once the run is over.  Does nothing by default."""
