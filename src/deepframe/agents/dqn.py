"""Replay-driven trainer for a next-frame prediction model."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import numpy as np

from deepframe.agents.base import FunctionApproximator
from deepframe.agents.policy import RandomActionSelector
from deepframe.memory.minibatch import assemble_minibatch, assemble_single
from deepframe.memory.replay_memory import ReplayMemory
from deepframe.memory.transition import Transition

logger = logging.getLogger(__name__)


class DQN:
    """Owns the replay memory and drives the approximator.

    Each :meth:`update` samples a minibatch uniformly (with replacement)
    from replay memory and trains the approximator to map a frame stack to
    the frame that followed it; terminal transitions train towards an
    all-zero frame.
    """

    def __init__(
        self,
        approximator: FunctionApproximator,
        legal_actions: Sequence[int],
        config: dict,
        rng: np.random.Generator,
        memory: ReplayMemory | None = None,
    ) -> None:
        self.approximator = approximator
        self.legal_actions = list(legal_actions)
        self.stack_depth = config["env"].get("frame_stack", 4)
        self.frame_size = config.get("preprocess", {}).get("frame_size", 84)
        self.batch_size = config["agent"]["batch_size"]
        self.rng = rng

        self.memory = memory if memory is not None else ReplayMemory(config["replay"]["capacity"])
        self.selector = RandomActionSelector(self.legal_actions, rng)

    # ── setup ─────────────────────────────────────────────────────────────

    def initialize(self) -> None:
        """Initialize the approximator and verify it accepts our minibatches."""
        self.approximator.initialize()
        expected_input = (self.batch_size, self.stack_depth, self.frame_size, self.frame_size)
        expected_target = (self.batch_size, self.frame_size, self.frame_size)
        if tuple(self.approximator.input_shape) != expected_input:
            raise ValueError(
                f"Approximator input shape {tuple(self.approximator.input_shape)} "
                f"!= minibatch input shape {expected_input}"
            )
        if tuple(self.approximator.target_shape) != expected_target:
            raise ValueError(
                f"Approximator target shape {tuple(self.approximator.target_shape)} "
                f"!= minibatch target shape {expected_target}"
            )

    # ── acting ────────────────────────────────────────────────────────────

    def select_action(self, frames: Sequence[np.ndarray], epsilon: float) -> int:
        return self.selector.select(frames, epsilon, self.stack_depth)

    def predict_next_frame(self, frames: Sequence[np.ndarray]) -> np.ndarray:
        """Predicted ``(S, S)`` frame following *frames*."""
        if len(frames) != self.stack_depth:
            raise ValueError(f"Expected {self.stack_depth} frames, got {len(frames)}")
        inputs = assemble_single(frames, self.batch_size, self.frame_size)
        return self.approximator.predict(inputs)[0]

    # ── learning ──────────────────────────────────────────────────────────

    def add_transition(self, transition: Transition) -> None:
        if len(transition.state) != self.stack_depth:
            raise ValueError(
                f"Transition state has {len(transition.state)} frames, "
                f"expected {self.stack_depth}"
            )
        if transition.action not in self.legal_actions:
            raise ValueError(f"Action {transition.action} is not in the legal action set")
        self.memory.push(transition)

    def update(self) -> dict[str, float]:
        """Run one training step on a freshly sampled minibatch."""
        if len(self.memory) == 0:
            raise ValueError("Cannot update from an empty replay memory")

        indices = self.memory.sample(self.batch_size, self.rng)
        transitions = [self.memory[i] for i in indices]
        inputs, targets = assemble_minibatch(transitions, self.stack_depth, self.frame_size)
        metrics = self.approximator.train_step(inputs, targets)

        if logger.isEnabledFor(logging.DEBUG):
            for name, value in self.approximator.first_parameters().items():
                logger.debug("%s: %s", name, value)
        return metrics

    # ── persistence ───────────────────────────────────────────────────────

    def load_trained_model(self, path: str | Path) -> None:
        self.approximator.load_weights(path)

    def restore_solver(self, path: str | Path) -> None:
        self.approximator.restore_state(path)

    def snapshot(self, weights_path: str | Path, state_path: str | Path) -> None:
        """Write model weights and full solver state."""
        self.approximator.save_weights(weights_path)
        self.approximator.save_state(state_path)
