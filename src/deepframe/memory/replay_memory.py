"""Bounded FIFO experience replay memory with uniform sampling."""

from __future__ import annotations

from typing import Iterator

import numpy as np

from deepframe.memory.transition import Transition


class ReplayMemory:
    """Fixed-size circular store of :class:`Transition` objects.

    Pushing into a full memory evicts the single oldest transition.  Index
    ``0`` always refers to the oldest stored transition.  Frames are held by
    reference, so a frame shared by consecutive transitions is released only
    when the last of them is evicted.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Replay capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._items: list[Transition | None] = [None] * capacity
        self.idx = 0
        self.size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, transition: Transition) -> None:
        """Store a transition, evicting the oldest one when full."""
        self._items[self.idx] = transition
        self.idx = (self.idx + 1) % self._capacity
        self.size = min(self.size + 1, self._capacity)

    def sample(self, count: int, rng: np.random.Generator) -> np.ndarray:
        """Draw *count* indices uniformly from ``[0, len(self))``, with replacement."""
        if self.size == 0:
            raise ValueError("Cannot sample from an empty replay memory")
        if count < 1:
            raise ValueError(f"Sample count must be positive, got {count}")
        return rng.integers(0, self.size, size=count)

    def clear(self) -> None:
        self._items = [None] * self._capacity
        self.idx = 0
        self.size = 0

    # ── access ────────────────────────────────────────────────────────────

    def _slot(self, index: int) -> int:
        if index < 0:
            index += self.size
        if not 0 <= index < self.size:
            raise IndexError(f"Replay index {index} out of range for size {self.size}")
        start = self.idx if self.size == self._capacity else 0
        return (start + index) % self._capacity

    def __getitem__(self, index: int) -> Transition:
        return self._items[self._slot(int(index))]

    def __iter__(self) -> Iterator[Transition]:
        for i in range(self.size):
            yield self[i]

    def __len__(self) -> int:
        return self.size
