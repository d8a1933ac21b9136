"""Lay sampled transitions out as parallel input/target arrays."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from deepframe.memory.transition import Transition


def assemble_minibatch(
    transitions: Sequence[Transition], stack_depth: int, frame_size: int
) -> tuple[np.ndarray, np.ndarray]:
    """Build ``inputs`` of shape ``(M, K, S, S)`` and ``targets`` of shape ``(M, S, S)``.

    Row *i* of ``inputs`` holds the stacked frames of ``transitions[i]`` in
    stack order.  Row *i* of ``targets`` holds the next frame, or zeros when
    the transition is terminal.
    """
    batch_size = len(transitions)
    inputs = np.zeros((batch_size, stack_depth, frame_size, frame_size), dtype=np.float32)
    targets = np.zeros((batch_size, frame_size, frame_size), dtype=np.float32)

    for i, transition in enumerate(transitions):
        if len(transition.state) != stack_depth:
            raise ValueError(
                f"Transition {i} has {len(transition.state)} frames, expected {stack_depth}"
            )
        for j, frame in enumerate(transition.state):
            inputs[i, j] = frame
        if transition.next_frame is not None:
            targets[i] = transition.next_frame
    return inputs, targets


def assemble_single(
    frames: Sequence[np.ndarray], batch_size: int, frame_size: int
) -> np.ndarray:
    """Input array for one-off inference: row 0 is *frames*, other rows are zero."""
    inputs = np.zeros((batch_size, len(frames), frame_size, frame_size), dtype=np.float32)
    for j, frame in enumerate(frames):
        inputs[0, j] = frame
    return inputs
