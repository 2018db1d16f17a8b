"""LocalFileLogger — JSON-lines logger for offline use.

Writes metrics as JSON lines to ``metrics.json`` and copies artifact files
into the run directory.  This is the default logger of a run when none is
configured.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from typing import Any, Dict, Optional

from rltune.loggers.interface import LoggerInterface

logger = logging.getLogger(__name__)


class LocalFileLogger(LoggerInterface):
    """Logger that persists metrics and artifacts to the local file system.

    Attributes:
        run_dir: Directory where logs and artifacts are stored.
    """

    def __init__(self, run_dir: str = "artifacts/logs") -> None:
        """Initialise the logger, creating *run_dir* if needed.

        Args:
            run_dir: Target directory for metrics and artifact files.
        """
        os.makedirs(run_dir, exist_ok=True)
        self.run_dir = run_dir
        self._metrics_path = os.path.join(run_dir, "metrics.json")

    def log_metrics(self, step: int, metrics: Dict[str, Any]) -> None:
        """Append a metrics record as a JSON line.

        Values that JSON cannot encode (numpy scalars, objects) are stored
        through ``str``.

        Args:
            step: Step counter.
            metrics: Metric name → value mapping.
        """
        record = {"step": step, **metrics}
        with open(self._metrics_path, "a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, default=str) + "\n")

    def log_artifact(
        self, path: str, metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Copy an artifact file into the run directory.

        Args:
            path: Source file path.
            metadata: Ignored by local logger (kept for interface compat).
        """
        if not os.path.isfile(path):
            logger.warning("Artifact %s does not exist; skipped", path)
            return
        dest = os.path.join(self.run_dir, os.path.basename(path))
        if os.path.abspath(dest) == os.path.abspath(path):
            return
        shutil.copy2(path, dest)

    def read_metrics(self) -> list[Dict[str, Any]]:
        """Read all logged metrics from the JSON-lines file.

        Returns:
            List of metric records (dicts).
        """
        if not os.path.isfile(self._metrics_path):
            return []
        records = []
        with open(self._metrics_path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if line:
                    records.append(json.loads(line))
        return records
