#!/usr/bin/env python3
"""Run a trained predictor and print its predicted frames next to the real ones."""

from __future__ import annotations

import argparse

import numpy as np

from deepframe.agents import create_approximator
from deepframe.agents.dqn import DQN
from deepframe.envs.atari import action_names, legal_actions, make_atari_env_from_config, raw_screen
from deepframe.memory.frame_stack import FrameStack
from deepframe.training.evaluator import start_episode
from deepframe.utils.config import load_config
from deepframe.utils.seeding import get_device, seed_everything
from deepframe.vision.preprocess import preprocess_from_config
from deepframe.vision.render import draw_frame, format_action_values


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show frames predicted by a trained model")
    parser.add_argument("--weights", required=True, help="Path to model weights")
    parser.add_argument("--config", default="configs/default.yaml", help="Base config")
    parser.add_argument("--env", default=None, help="Env config override")
    parser.add_argument("--steps", type=int, default=20, help="Number of steps to show")
    parser.add_argument("--epsilon", type=float, default=0.05, help="Exploration parameter")
    parser.add_argument(
        "--set", action="append", default=[], dest="overrides", metavar="KEY=VALUE"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    config = load_config(
        default_path=args.config,
        env_path=args.env,
        overrides=args.overrides,
    )

    rng = seed_everything(config["seed"])
    device = get_device(config.get("device", "auto"))

    env = make_atari_env_from_config(config)
    actions = legal_actions(env, config)
    names = action_names(env, actions)

    approximator = create_approximator(
        config["approximator"]["type"], config=config, device=device
    )
    dqn = DQN(approximator, actions, config, rng)
    dqn.initialize()
    dqn.load_trained_model(args.weights)
    print(f"Loaded weights: {args.weights}")

    stack = FrameStack(dqn.stack_depth)
    start_episode(env, stack, config)

    counts = np.zeros(len(actions))

    for step in range(1, args.steps + 1):
        frames = stack.frames()
        predicted = dqn.predict_next_frame(frames)
        action = dqn.select_action(frames, args.epsilon)
        _, reward, terminated, truncated, _ = env.step(action)
        counts[actions.index(action)] += 1

        print(f"Step {step}: action = {names[actions.index(action)]}, reward = {float(reward):.0f}")
        print(draw_frame(predicted))

        if terminated or truncated:
            start_episode(env, stack, config)
        else:
            stack.push(preprocess_from_config(raw_screen(env), config))

    print("Fraction of steps each action was chosen:")
    print(format_action_values(names, counts / max(args.steps, 1)))
    env.close()


if __name__ == "__main__":
    main()
