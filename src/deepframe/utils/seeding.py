"""Seeding and device helpers."""

from __future__ import annotations

import random

import numpy as np
import torch


def seed_everything(seed: int) -> np.random.Generator:
    """Seed python, numpy and torch; return a generator for explicit sampling."""
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    return make_rng(seed)


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Generator passed to replay sampling and action selection."""
    return np.random.default_rng(seed)


def get_device(name: str = "auto") -> torch.device:
    """Resolve ``"auto"`` to the best available device."""
    if name == "auto":
        if torch.cuda.is_available():
            return torch.device("cuda")
        if hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
            return torch.device("mps")
        return torch.device("cpu")
    return torch.device(name)
