"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest


@pytest.fixture
def configs_dir() -> Path:
    """Path to the configs/ directory."""
    return Path(__file__).resolve().parent.parent / "configs"


@pytest.fixture
def default_config(configs_dir: Path) -> dict:
    """Load the default config dict."""
    from deepframe.utils.config import load_yaml

    return load_yaml(configs_dir / "default.yaml")


@pytest.fixture
def small_config() -> dict:
    """Config small enough for fast network tests."""
    return {
        "env": {"frame_stack": 4, "legal_actions": [0, 1, 2]},
        "preprocess": {"frame_size": 36},
        "agent": {"batch_size": 4, "lr": 1e-3, "grad_clip": 10.0, "hidden": 64},
        "replay": {"capacity": 16},
    }


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(0)
