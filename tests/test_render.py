"""Tests for the debug text renderings."""

from __future__ import annotations

import numpy as np
import pytest

from deepframe.vision.render import draw_frame, format_action_values


def test_draw_frame_hex_digits() -> None:
    frame = np.array([[0, 255], [16, 31]], dtype=np.uint8)
    assert draw_frame(frame) == "0f\n11\n"


def test_draw_frame_one_line_per_row() -> None:
    frame = np.full((84, 84), 170, dtype=np.uint8)
    lines = draw_frame(frame).splitlines()
    assert len(lines) == 84
    assert all(line == "a" * 84 for line in lines)


def test_format_action_values_alignment() -> None:
    text = format_action_values(["PLAYER_A_UP", "NOOP"], [1.5, -0.25])
    assert text == "       UP      NOOP\n 1.500000 -0.250000\n"


def test_format_action_values_long_name() -> None:
    text = format_action_values(["UPRIGHTFIRE"], [0.0])
    names, values = text.splitlines()
    assert names == " UPRIGHTFIRE"
    assert values == "    0.000000"


def test_format_action_values_mismatch() -> None:
    with pytest.raises(ValueError):
        format_action_values(["NOOP", "FIRE"], [0.0])
    with pytest.raises(ValueError):
        format_action_values([], [])
