"""Text renderings used for debugging frames and action values."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def draw_frame(frame: np.ndarray) -> str:
    """Render a frame as rows of hex digits, one digit per pixel (``v // 16``)."""
    frame = np.asarray(frame)
    if frame.ndim != 2:
        raise ValueError(f"Frame must be 2-D, got shape {frame.shape}")
    digits = (frame.astype(np.int64) // 16).clip(0, 15)
    return "".join("".join(f"{d:x}" for d in row) + "\n" for row in digits)


def format_action_values(
    action_names: Sequence[str],
    values: Sequence[float],
    prefix: str = "PLAYER_A_",
) -> str:
    """Two aligned lines: action names (with *prefix* removed) and their values.

    Each column is right-justified to ``max(len(name), len(value)) + 1``.
    """
    if not action_names:
        raise ValueError("No actions to format")
    if len(action_names) != len(values):
        raise ValueError(
            f"Got {len(action_names)} action names but {len(values)} values"
        )
    names_line = []
    values_line = []
    for name, value in zip(action_names, values):
        a_str = name.replace(prefix, "") if prefix else name
        v_str = f"{float(value):f}"
        width = max(len(a_str), len(v_str)) + 1
        names_line.append(a_str.rjust(width))
        values_line.append(v_str.rjust(width))
    return "".join(names_line) + "\n" + "".join(values_line) + "\n"
