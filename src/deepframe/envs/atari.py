"""Atari environment factory exposing raw palette screens."""

from __future__ import annotations

import gymnasium as gym
import numpy as np


def make_atari_env(
    env_id: str = "ALE/Pong-v5",
    seed: int = 42,
    frameskip: int = 4,
    repeat_action_probability: float = 0.0,
    render_mode: str | None = None,
) -> gym.Env:
    """Create an Atari env without observation wrappers.

    Frames are read straight from the emulator with :func:`raw_screen` and
    preprocessed by :mod:`deepframe.vision.preprocess`, so the env's own
    observation is ignored.
    """
    import ale_py

    gym.register_envs(ale_py)
    env = gym.make(
        env_id,
        frameskip=frameskip,
        repeat_action_probability=repeat_action_probability,
        render_mode=render_mode,
    )
    env.reset(seed=seed)
    return env


def make_atari_env_from_config(config: dict, render_mode: str | None = None) -> gym.Env:
    """Create an Atari env from a config dict."""
    env_cfg = config["env"]
    return make_atari_env(
        env_id=env_cfg["id"],
        seed=config.get("seed", 42),
        frameskip=env_cfg.get("frameskip", 4),
        repeat_action_probability=env_cfg.get("repeat_action_probability", 0.0),
        render_mode=render_mode,
    )


def raw_screen(env: gym.Env) -> np.ndarray:
    """Current screen as a ``(height, width)`` array of NTSC palette codes."""
    return np.asarray(env.unwrapped.ale.getScreen())


def legal_actions(env: gym.Env, config: dict) -> list[int]:
    """Actions the agent may take: ``env.legal_actions`` or the env's full action space."""
    configured = config["env"].get("legal_actions")
    n = env.action_space.n
    if configured is None:
        return list(range(n))
    illegal = [a for a in configured if not 0 <= a < n]
    if illegal:
        raise ValueError(f"Configured actions {illegal} are outside the env's {n} actions")
    return list(configured)


def action_names(env: gym.Env, actions: list[int]) -> list[str]:
    meanings = env.unwrapped.get_action_meanings()
    return [meanings[a] for a in actions]
