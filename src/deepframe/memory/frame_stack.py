"""Fixed-depth sliding window over the most recent frames."""

from __future__ import annotations

from collections import deque

import numpy as np


class FrameStack:
    """Keeps the last *depth* frames, oldest first.

    The stack is *warm* once *depth* frames have been pushed since the last
    :meth:`reset`; only then can it be read as model input.
    """

    def __init__(self, depth: int = 4) -> None:
        if depth < 1:
            raise ValueError(f"Frame stack depth must be positive, got {depth}")
        self.depth = depth
        self._frames: deque[np.ndarray] = deque(maxlen=depth)

    def push(self, frame: np.ndarray) -> None:
        """Append *frame*, dropping the oldest one when full."""
        self._frames.append(frame)

    def reset(self) -> None:
        """Forget all frames (episode boundary)."""
        self._frames.clear()

    @property
    def is_warm(self) -> bool:
        return len(self._frames) == self.depth

    def frames(self) -> tuple[np.ndarray, ...]:
        """Return the stacked frames, oldest first."""
        if not self.is_warm:
            raise RuntimeError(
                f"Frame stack holds {len(self._frames)} of {self.depth} frames; "
                "push more frames before reading it"
            )
        return tuple(self._frames)

    def as_array(self) -> np.ndarray:
        """Stacked frames as a single ``(depth, S, S)`` array."""
        return np.stack(self.frames())

    def __len__(self) -> int:
        return len(self._frames)
