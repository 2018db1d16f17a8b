"""WandbLogger — experiment logger backed by Weights & Biases."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import wandb

from rltune.loggers.interface import LoggerInterface


class WandbLogger(LoggerInterface):
    """Experiment logger backed by the WandB SDK.

    Attributes:
        project: WandB project name.
        entity: WandB team / user entity (optional).
    """

    def __init__(
        self,
        project: str,
        entity: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None,
        mode: Optional[str] = None,
        run_dir: Optional[str] = None,
    ) -> None:
        """Start a WandB run.

        Args:
            project: WandB project name.
            entity: WandB entity (team or user).
            config: Run specification logged as run metadata.
            name: Display name of the run.
            mode: ``"online"``, ``"offline"`` or ``"disabled"``; ``None``
                lets WandB pick from its environment.
            run_dir: Local directory for WandB files.
        """
        self.project = project
        self.entity = entity
        self._run = wandb.init(
            project=project,
            entity=entity,
            config=config or {},
            name=name,
            mode=mode,
            dir=run_dir,
            reinit=True,
        )

    def log_metrics(self, step: int, metrics: Dict[str, Any]) -> None:
        """Log metrics to the active run.

        Args:
            step: Step counter.
            metrics: Metric name → value mapping.
        """
        self._run.log({**metrics, "step": step})

    def log_artifact(
        self, path: str, metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Upload *path* as a WandB artifact.

        Args:
            path: Local file path of the artifact.
            metadata: Optional metadata attached to the artifact.
        """
        artifact_name = os.path.splitext(os.path.basename(path))[0]
        artifact = wandb.Artifact(name=artifact_name, type="run-spec")
        artifact.add_file(path)
        if metadata:
            artifact.metadata = metadata
        self._run.log_artifact(artifact)

    def finish(self) -> None:
        """Finalise the WandB run."""
        self._run.finish()
