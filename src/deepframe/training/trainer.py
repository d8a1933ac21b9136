"""Main training loop for the next-frame predictor."""

from __future__ import annotations

from collections import deque
from pathlib import Path

import numpy as np
from tqdm import tqdm

from deepframe.agents.dqn import DQN
from deepframe.envs.atari import make_atari_env_from_config, raw_screen
from deepframe.memory.frame_stack import FrameStack
from deepframe.memory.transition import Transition
from deepframe.training.evaluator import evaluate, start_episode
from deepframe.utils.logging import ExperimentLogger
from deepframe.vision.preprocess import preprocess_from_config


def get_epsilon(step: int, cfg: dict) -> float:
    """Linear epsilon decay."""
    agent_cfg = cfg["agent"]
    frac = min(1.0, step / agent_cfg["epsilon_decay_steps"])
    return agent_cfg["epsilon_start"] + frac * (
        agent_cfg["epsilon_end"] - agent_cfg["epsilon_start"]
    )


def clip_reward(reward: float) -> float:
    """Clip a raw game reward into [-1, 1]."""
    return max(-1.0, min(1.0, float(reward)))


def train(dqn: DQN, config: dict) -> None:
    """Run the full training loop.

    Steps: act → store transition → update → eval → checkpoint → log.
    """
    train_cfg = config["training"]
    replay_cfg = config["replay"]
    ckpt_dir = Path(config["paths"]["checkpoint_dir"])
    # ── environments ──────────────────────────────────────────────────────
    train_env = make_atari_env_from_config(config)
    eval_env = make_atari_env_from_config(config)

    # ── logger ────────────────────────────────────────────────────────────
    logger = ExperimentLogger(
        experiment_name=config["mlflow"]["experiment_name"],
        tracking_uri=config["mlflow"]["tracking_uri"],
    )
    logger.log_params(config)

    # ── training ──────────────────────────────────────────────────────────
    stack = FrameStack(dqn.stack_depth)
    start_episode(train_env, stack, config)

    episode_rewards: deque[float] = deque(maxlen=100)
    episode_reward = 0.0

    pbar = tqdm(range(1, train_cfg["total_steps"] + 1), desc="Training")

    for step in pbar:
        epsilon = get_epsilon(step, config)

        frames = stack.frames()
        action = dqn.select_action(frames, epsilon)
        _, reward, terminated, truncated, _ = train_env.step(action)
        episode_reward += float(reward)

        # A truncated episode still has a real next frame
        next_frame = None if terminated else preprocess_from_config(raw_screen(train_env), config)
        dqn.add_transition(Transition(frames, action, clip_reward(reward), next_frame))

        if terminated or truncated:
            episode_rewards.append(episode_reward)
            logger.log_metrics(
                {
                    "episode/reward": episode_reward,
                    "episode/reward_avg100": float(np.mean(episode_rewards)),
                },
                step=step,
            )
            episode_reward = 0.0
            start_episode(train_env, stack, config)
        else:
            stack.push(next_frame)

        # ── train step ────────────────────────────────────────────────────
        if len(dqn.memory) >= replay_cfg["min_size"] and step % train_cfg["train_freq"] == 0:
            metrics = dqn.update()
            if step % train_cfg["log_freq"] == 0:
                metrics["train/epsilon"] = epsilon
                metrics["replay/size"] = len(dqn.memory)
                logger.log_metrics(metrics, step=step)

        # ── evaluation ────────────────────────────────────────────────────
        if step % train_cfg["eval_freq"] == 0:
            eval_metrics = evaluate(
                dqn,
                eval_env,
                config,
                n_episodes=train_cfg["eval_episodes"],
                epsilon=train_cfg.get("eval_epsilon", 0.05),
            )
            logger.log_metrics(
                {f"eval/{k}": v for k, v in eval_metrics.items()},
                step=step,
            )
            logger.log_frame(dqn.predict_next_frame(stack.frames()), "predicted", step)
            pbar.set_postfix(
                eval_mse=f"{eval_metrics['prediction_mse']:.1f}",
                epsilon=f"{epsilon:.3f}",
            )

        # ── checkpoint ────────────────────────────────────────────────────
        if step % train_cfg["checkpoint_freq"] == 0:
            weights_path = ckpt_dir / f"model_step_{step}.pt"
            state_path = ckpt_dir / f"solver_step_{step}.pt"
            dqn.snapshot(weights_path, state_path)
            logger.log_artifact(weights_path)

    # ── cleanup ───────────────────────────────────────────────────────────
    final_weights = ckpt_dir / "model_final.pt"
    dqn.snapshot(final_weights, ckpt_dir / "solver_final.pt")
    logger.log_artifact(final_weights)
    logger.end()
    train_env.close()
    eval_env.close()
