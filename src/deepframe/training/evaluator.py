"""Evaluation loop measuring episode reward and next-frame prediction error."""

from __future__ import annotations

import gymnasium as gym
import numpy as np

from deepframe.agents.dqn import DQN
from deepframe.envs.atari import raw_screen
from deepframe.memory.frame_stack import FrameStack
from deepframe.vision.preprocess import preprocess_from_config


def start_episode(env: gym.Env, stack: FrameStack, config: dict) -> None:
    """Reset *env* and fill *stack* with copies of the first frame."""
    env.reset()
    stack.reset()
    frame = preprocess_from_config(raw_screen(env), config)
    for _ in range(stack.depth):
        stack.push(frame)


def evaluate(
    dqn: DQN,
    env: gym.Env,
    config: dict,
    n_episodes: int = 10,
    epsilon: float = 0.05,
) -> dict[str, float]:
    """Play *n_episodes* and compare each predicted frame with the real one.

    Returns:
        Dict with ``reward_mean``, ``reward_std``, ``length_mean`` and
        ``prediction_mse`` (over non-terminal steps, intensities in [0, 255]).
    """
    rewards: list[float] = []
    lengths: list[int] = []
    errors: list[float] = []
    stack = FrameStack(dqn.stack_depth)

    for _ in range(n_episodes):
        start_episode(env, stack, config)
        done = False
        episode_reward = 0.0
        episode_length = 0

        while not done:
            frames = stack.frames()
            action = dqn.select_action(frames, epsilon)
            _, reward, terminated, truncated, _ = env.step(action)
            episode_reward += float(reward)
            episode_length += 1
            done = terminated or truncated

            if not terminated:
                actual = preprocess_from_config(raw_screen(env), config)
                predicted = dqn.predict_next_frame(frames)
                errors.append(float(np.mean((predicted - actual.astype(np.float32)) ** 2)))
                stack.push(actual)

        rewards.append(episode_reward)
        lengths.append(episode_length)

    return {
        "reward_mean": float(np.mean(rewards)),
        "reward_std": float(np.std(rewards)),
        "length_mean": float(np.mean(lengths)),
        "prediction_mse": float(np.mean(errors)) if errors else 0.0,
    }
