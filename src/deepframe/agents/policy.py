"""Action selection."""

from __future__ import annotations

from typing import Sequence

import numpy as np


class RandomActionSelector:
    """Pick a uniformly random legal action.

    Placeholder policy: *epsilon* is validated but does not influence the
    choice, since the model predicts frames rather than action values.
    """

    def __init__(self, legal_actions: Sequence[int], rng: np.random.Generator) -> None:
        if len(legal_actions) == 0:
            raise ValueError("Legal action set is empty")
        self.legal_actions = list(legal_actions)
        self.rng = rng

    def select(self, frames: Sequence[np.ndarray], epsilon: float, stack_depth: int) -> int:
        if len(frames) != stack_depth:
            raise ValueError(
                f"Action selection needs {stack_depth} stacked frames, got {len(frames)}"
            )
        if not 0.0 <= epsilon <= 1.0:
            raise ValueError(f"Epsilon must be in [0, 1], got {epsilon}")
        return self.legal_actions[int(self.rng.integers(len(self.legal_actions)))]
