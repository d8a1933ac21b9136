"""MLFlow experiment logger."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import mlflow
import numpy as np

from deepframe.vision.render import draw_frame


class ExperimentLogger:
    """Thin wrapper around MLFlow for experiment tracking."""

    def __init__(self, experiment_name: str, tracking_uri: str = "mlruns"):
        mlflow.set_tracking_uri(tracking_uri)
        mlflow.set_experiment(experiment_name)
        self.run = mlflow.start_run()

    def log_params(self, params: dict[str, Any], prefix: str = "") -> None:
        """Log a (possibly nested) dict of parameters."""
        flat = flatten_params(params, prefix)
        # MLFlow has a 100-param batch limit
        items = list(flat.items())
        for i in range(0, len(items), 100):
            mlflow.log_params(dict(items[i : i + 100]))

    def log_metrics(self, metrics: dict[str, float], step: int | None = None) -> None:
        mlflow.log_metrics(metrics, step=step)

    def log_text(self, text: str, artifact_file: str) -> None:
        """Store a text artifact such as a frame dump."""
        mlflow.log_text(text, artifact_file)

    def log_frame(self, frame: np.ndarray, name: str, step: int) -> None:
        """Store the hex dump of *frame* under ``frames/``."""
        self.log_text(draw_frame(frame), f"frames/{name}_step_{step}.txt")

    def log_artifact(self, path: str | Path) -> None:
        mlflow.log_artifact(str(path))

    def end(self) -> None:
        mlflow.end_run()


def flatten_params(d: dict, prefix: str = "") -> dict[str, str]:
    """Flatten a nested dict into dot-separated keys with string values."""
    items: dict[str, str] = {}
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else k
        if isinstance(v, dict):
            items.update(flatten_params(v, key))
        else:
            items[key] = str(v)
    return items
