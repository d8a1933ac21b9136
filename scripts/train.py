#!/usr/bin/env python3
"""Training entry point for the deepframe next-frame predictor."""

from __future__ import annotations

import argparse
import logging

from deepframe.agents import create_approximator
from deepframe.agents.dqn import DQN
from deepframe.envs.atari import legal_actions, make_atari_env_from_config
from deepframe.utils.config import load_config
from deepframe.utils.seeding import get_device, seed_everything


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Train a next-frame predictor from Atari screens",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  python scripts/train.py
  python scripts/train.py --env configs/envs/breakout.yaml
  python scripts/train.py --set training.total_steps=500000 --set replay.capacity=100000
  python scripts/train.py --resume checkpoints/solver_step_100000.pt
""",
    )
    parser.add_argument(
        "--config",
        default="configs/default.yaml",
        help="Path to base config (default: configs/default.yaml)",
    )
    parser.add_argument("--env", default=None, help="Path to env config override")
    parser.add_argument("--weights", default=None, help="Initialise from trained weights")
    parser.add_argument("--resume", default=None, help="Resume from a saved solver state")
    parser.add_argument("--verbose", action="store_true", help="Log per-layer parameters")
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        dest="overrides",
        metavar="KEY=VALUE",
        help="Override config values (e.g. --set training.total_steps=500000)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    config = load_config(
        default_path=args.config,
        env_path=args.env,
        overrides=args.overrides,
    )

    rng = seed_everything(config["seed"])
    device = get_device(config.get("device", "auto"))
    print(f"Device: {device}")
    print(f"Approximator: {config['approximator']['type']}")
    print(f"Environment: {config['env']['id']}")

    tmp_env = make_atari_env_from_config(config)
    actions = legal_actions(tmp_env, config)
    tmp_env.close()

    approximator = create_approximator(
        config["approximator"]["type"], config=config, device=device
    )
    dqn = DQN(approximator, actions, config, rng)
    dqn.initialize()
    if args.weights:
        dqn.load_trained_model(args.weights)
    if args.resume:
        dqn.restore_solver(args.resume)

    from deepframe.training.trainer import train

    train(dqn, config)


if __name__ == "__main__":
    main()
