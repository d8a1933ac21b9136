"""Single recorded environment step."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Transition:
    """A ``(state, action, reward, next_frame)`` observation.

    *state* is the tuple of stacked frames the action was chosen from.
    *next_frame* is the frame observed after the action, or ``None`` when
    the action ended the episode.  Frames are shared by reference with the
    frame stack and with neighbouring transitions.
    """

    state: tuple[np.ndarray, ...]
    action: int
    reward: float
    next_frame: np.ndarray | None

    def __post_init__(self) -> None:
        if not -1.0 <= self.reward <= 1.0:
            raise ValueError(f"Reward must be in [-1, 1], got {self.reward!r}")
        if not isinstance(self.state, tuple):
            object.__setattr__(self, "state", tuple(self.state))

    @property
    def is_terminal(self) -> bool:
        return self.next_frame is None
