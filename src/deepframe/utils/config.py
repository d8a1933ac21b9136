"""YAML config loading with layered merging, CLI overrides and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (returns a new dict)."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_overrides(config: dict, overrides: list[str]) -> dict:
    """Apply dot-notation CLI overrides like ``replay.capacity=1000``.

    Values are parsed as YAML scalars, so ``"null"`` becomes ``None`` and
    ``"[0, 1, 3]"`` becomes a list.
    """
    for override in overrides:
        if "=" not in override:
            raise ValueError(f"Override must be key=value, got: {override!r}")
        key_path, raw_value = override.split("=", 1)
        keys = key_path.split(".")
        node = config
        for k in keys[:-1]:
            node = node.setdefault(k, {})
            if not isinstance(node, dict):
                raise ValueError(f"Cannot override {key_path!r}: {k!r} is not a section")
        node[keys[-1]] = yaml.safe_load(raw_value)
    return config


def validate_config(config: dict) -> dict:
    """Check the parameters the preprocessing/replay core depends on.

    Raises ``ValueError`` naming the first offending key.
    """
    pre = config.get("preprocess", {})
    checks = [
        ("preprocess.frame_size", pre.get("frame_size", 84), lambda v: isinstance(v, int) and v > 0),
        (
            "preprocess.crop_fraction",
            pre.get("crop_fraction", 0.92),
            lambda v: isinstance(v, (int, float)) and 0.0 < v <= 1.0,
        ),
        ("preprocess.left_crop", pre.get("left_crop", 8), lambda v: isinstance(v, int) and v >= 0),
        (
            "env.frame_stack",
            config.get("env", {}).get("frame_stack", 4),
            lambda v: isinstance(v, int) and v > 0,
        ),
        (
            "agent.batch_size",
            config.get("agent", {}).get("batch_size"),
            lambda v: isinstance(v, int) and v > 0,
        ),
        (
            "replay.capacity",
            config.get("replay", {}).get("capacity"),
            lambda v: isinstance(v, int) and v > 0,
        ),
    ]
    for key, value, ok in checks:
        if not ok(value):
            raise ValueError(f"Invalid config value {key}={value!r}")

    legal = config.get("env", {}).get("legal_actions")
    if legal is not None and (
        not isinstance(legal, list) or not legal or not all(isinstance(a, int) for a in legal)
    ):
        raise ValueError(f"env.legal_actions must be a non-empty list of ints, got {legal!r}")
    return config


def load_config(
    default_path: str | Path = "configs/default.yaml",
    env_path: str | Path | None = None,
    overrides: list[str] | None = None,
) -> dict[str, Any]:
    """Build a validated config by merging: default → env → CLI overrides."""
    config = load_yaml(default_path)
    if env_path:
        config = deep_merge(config, load_yaml(env_path))
    if overrides:
        config = apply_overrides(config, overrides)
    return validate_config(config)
