"""Raw emulator screen → fixed-size grayscale frame.

Pipeline: palette decode → luminosity grayscale → crop → area-weighted
resample.  Every step is a pure function of its inputs; the palette and
grayscale tables are module-level read-only arrays.
"""

from __future__ import annotations

import math

import numpy as np

from deepframe.vision.palette import GRAYSCALE_LUT

_TRUNCATION_EPS = 1e-6


def resample_weights(src_len: int, out_len: int) -> np.ndarray:
    """Area weights mapping *src_len* source pixels onto *out_len* cells.

    Returns an ``(out_len, src_len)`` matrix whose entry ``[j, x]`` is the
    fraction of source pixel *x* covered by output cell *j*, divided by the
    cell width.  Every row therefore sums to 1.

    Output cell *j* spans ``[j * ratio, (j + 1) * ratio)`` in source
    coordinates; the first and last pixel it touches only contribute the
    overlapping part, inner pixels contribute fully.  When the source is
    shorter than the output a cell lies inside one or two pixels, and the
    same overlap rule still makes each row sum to 1.
    """
    if out_len < 1:
        raise ValueError(f"Output length must be positive, got {out_len}")
    if src_len < 1:
        raise ValueError(f"Source length must be positive, got {src_len}")
    ratio = src_len / out_len
    weights = np.zeros((out_len, src_len), dtype=np.float64)
    for j in range(out_len):
        start = j * ratio
        end = (j + 1) * ratio
        first = math.floor(start)
        last = math.floor(end)
        for x in range(first, last + 1):
            w = max(0.0, min(x + 1, end) - max(x, start))
            if not 0.0 <= w <= 1.0:
                raise ArithmeticError(
                    f"Resample weight {w!r} outside [0, 1] for cell {j}, pixel {x}"
                )
            if x >= src_len:
                # The right edge of the last cell lands exactly on src_len.
                if w > _TRUNCATION_EPS:
                    raise ArithmeticError(
                        f"Cell {j} reaches past the source edge with weight {w!r}"
                    )
                continue
            weights[j, x] += w / ratio
    return weights


def crop_bounds(
    height: int, width: int, crop_fraction: float = 0.92, left_crop: int = 8
) -> tuple[int, int, int, int]:
    """Return ``(start_y, cropped_height, start_x, cropped_width)``.

    The vertical crop removes equal margins from top and bottom so that
    ``floor(crop_fraction * height)`` rows remain; the horizontal crop drops
    the leftmost *left_crop* columns.
    """
    cropped_h = int(crop_fraction * height)
    start_y = int((height - cropped_h) / 2)
    cropped_w = width - left_crop
    if cropped_h < 1 or cropped_w < 1:
        raise ValueError(
            f"Crop leaves no pixels: screen {height}x{width}, "
            f"crop_fraction={crop_fraction}, left_crop={left_crop}"
        )
    return start_y, cropped_h, left_crop, cropped_w


def screen_to_grayscale(raw_screen: np.ndarray) -> np.ndarray:
    """Decode a 2-D array of palette codes into uint8 grayscale."""
    raw = np.asarray(raw_screen)
    if raw.ndim != 2:
        raise ValueError(f"Raw screen must be 2-D (height, width), got shape {raw.shape}")
    if not np.issubdtype(raw.dtype, np.integer):
        raise ValueError(f"Raw screen must hold integer palette codes, got {raw.dtype}")
    if raw.dtype != np.uint8 and raw.size and (raw.min() < 0 or raw.max() > 255):
        raise ValueError(
            f"Palette codes must be in [0, 255], got range [{raw.min()}, {raw.max()}]"
        )
    return GRAYSCALE_LUT[raw]


def preprocess_screen(
    raw_screen: np.ndarray,
    frame_size: int = 84,
    crop_fraction: float = 0.92,
    left_crop: int = 8,
) -> np.ndarray:
    """Convert a raw screen of palette codes into a ``(frame_size, frame_size)`` frame.

    The returned array is read-only so it can be shared between any number
    of transitions.
    """
    raw = np.asarray(raw_screen)
    if raw.ndim != 2:
        raise ValueError(f"Raw screen must be 2-D (height, width), got shape {raw.shape}")
    height, width = raw.shape
    if height <= width:
        raise ValueError(f"Raw screen must be taller than wide, got {height}x{width}")

    start_y, cropped_h, start_x, cropped_w = crop_bounds(
        height, width, crop_fraction, left_crop
    )
    gray = screen_to_grayscale(raw[start_y : start_y + cropped_h, start_x : start_x + cropped_w])

    wy = resample_weights(cropped_h, frame_size)
    wx = resample_weights(cropped_w, frame_size)
    resampled = wy @ gray.astype(np.float64) @ wx.T

    frame = np.floor(resampled + _TRUNCATION_EPS).astype(np.uint8)
    frame.setflags(write=False)
    return frame


def preprocess_from_config(raw_screen: np.ndarray, config: dict) -> np.ndarray:
    """Run :func:`preprocess_screen` with the ``preprocess`` config section."""
    cfg = config.get("preprocess", {})
    return preprocess_screen(
        raw_screen,
        frame_size=cfg.get("frame_size", 84),
        crop_fraction=cfg.get("crop_fraction", 0.92),
        left_crop=cfg.get("left_crop", 8),
    )
