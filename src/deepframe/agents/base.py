"""Abstract function approximator consumed by the training core."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import numpy as np


class FunctionApproximator(ABC):
    """Interface every learned model plugged into :class:`~deepframe.agents.dqn.DQN` implements.

    The core only relies on a fixed batch size and on the declared input and
    target shapes; it never reaches into the model's layers.
    """

    @property
    @abstractmethod
    def batch_size(self) -> int:
        """Number of rows every input/target array must have."""

    @property
    @abstractmethod
    def input_shape(self) -> tuple[int, ...]:
        """Expected input shape, ``(M, K, S, S)``."""

    @property
    @abstractmethod
    def target_shape(self) -> tuple[int, ...]:
        """Expected target shape, ``(M, S, S)``."""

    @abstractmethod
    def initialize(self) -> None:
        """Build the model and its optimizer."""

    @abstractmethod
    def predict(self, inputs: np.ndarray) -> np.ndarray:
        """Run inference on a full ``input_shape`` array."""

    @abstractmethod
    def train_step(self, inputs: np.ndarray, targets: np.ndarray) -> dict[str, float]:
        """Perform one optimisation step over the whole batch.

        Returns a dict of metrics (e.g. ``{"train/loss": 0.01}``).
        """

    @abstractmethod
    def load_weights(self, path: str | Path) -> None:
        """Load trained model weights only."""

    @abstractmethod
    def save_weights(self, path: str | Path) -> None:
        """Save model weights only."""

    @abstractmethod
    def save_state(self, path: str | Path) -> None:
        """Save weights together with optimizer state."""

    @abstractmethod
    def restore_state(self, path: str | Path) -> None:
        """Resume from a file written by :meth:`save_state`."""

    def first_parameters(self) -> dict[str, float]:
        """One representative weight per layer, for debug logging."""
        return {}
