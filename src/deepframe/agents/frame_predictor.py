"""Torch next-frame predictor implementing :class:`FunctionApproximator`."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import torch
import torch.nn.functional as F

from deepframe.agents import register
from deepframe.agents.base import FunctionApproximator
from deepframe.networks.frame_cnn import FramePredictionCNN


@register("frame_predictor")
class FramePredictor(FunctionApproximator):
    """Trains :class:`FramePredictionCNN` to reproduce the frame that follows a stack.

    Inputs and targets are intensities in [0, 255]; targets are scaled to
    [0, 1] for an MSE loss and predictions are scaled back on the way out.
    """

    def __init__(self, config: dict, device: torch.device = torch.device("cpu")) -> None:
        agent_cfg = config["agent"]
        self.device = device
        self.stack_depth = config["env"].get("frame_stack", 4)
        self.frame_size = config.get("preprocess", {}).get("frame_size", 84)
        self._batch_size = agent_cfg["batch_size"]
        self.lr = agent_cfg["lr"]
        self.grad_clip = agent_cfg.get("grad_clip", 10.0)
        self.hidden = agent_cfg.get("hidden", 512)

        self.net: FramePredictionCNN | None = None
        self.optimizer: torch.optim.Optimizer | None = None
        self.steps = 0

    # ── shapes ────────────────────────────────────────────────────────────

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def input_shape(self) -> tuple[int, ...]:
        return (self._batch_size, self.stack_depth, self.frame_size, self.frame_size)

    @property
    def target_shape(self) -> tuple[int, ...]:
        return (self._batch_size, self.frame_size, self.frame_size)

    # ── setup ─────────────────────────────────────────────────────────────

    def initialize(self) -> None:
        self.net = FramePredictionCNN(self.stack_depth, self.frame_size, self.hidden).to(
            self.device
        )
        self.optimizer = torch.optim.Adam(self.net.parameters(), lr=self.lr)
        self.steps = 0

        with torch.no_grad():
            probe = self.net(torch.zeros(self.input_shape, device=self.device))
        if tuple(probe.shape) != self.target_shape:
            raise ValueError(
                f"Network output shape {tuple(probe.shape)} does not match "
                f"target shape {self.target_shape}"
            )

    def _require_net(self) -> FramePredictionCNN:
        if self.net is None:
            raise RuntimeError("Approximator used before initialize()")
        return self.net

    def _check_shape(self, name: str, array: np.ndarray, expected: tuple[int, ...]) -> None:
        if tuple(array.shape) != expected:
            raise ValueError(f"{name} shape {tuple(array.shape)} != expected {expected}")

    # ── inference / learning ──────────────────────────────────────────────

    @torch.no_grad()
    def predict(self, inputs: np.ndarray) -> np.ndarray:
        net = self._require_net()
        self._check_shape("Input", inputs, self.input_shape)
        net.eval()
        x = torch.as_tensor(inputs, dtype=torch.float32, device=self.device)
        return (net(x) * 255.0).cpu().numpy()

    def train_step(self, inputs: np.ndarray, targets: np.ndarray) -> dict[str, float]:
        net = self._require_net()
        self._check_shape("Input", inputs, self.input_shape)
        self._check_shape("Target", targets, self.target_shape)
        net.train()

        x = torch.as_tensor(inputs, dtype=torch.float32, device=self.device)
        y = torch.as_tensor(targets, dtype=torch.float32, device=self.device) / 255.0

        prediction = net(x)
        loss = F.mse_loss(prediction, y)

        self.optimizer.zero_grad()
        loss.backward()
        torch.nn.utils.clip_grad_norm_(net.parameters(), self.grad_clip)
        self.optimizer.step()
        self.steps += 1

        return {
            "train/loss": loss.item(),
            "train/prediction_mean": prediction.detach().mean().item() * 255.0,
        }

    def first_parameters(self) -> dict[str, float]:
        net = self._require_net()
        return {
            name: float(layer.weight.detach()[1].flatten()[0])
            for name, layer in net.named_layers().items()
        }

    # ── persistence ───────────────────────────────────────────────────────

    def load_weights(self, path: str | Path) -> None:
        net = self._require_net()
        net.load_state_dict(torch.load(path, map_location=self.device, weights_only=True))

    def save_weights(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        torch.save(self._require_net().state_dict(), path)

    def state_dict(self) -> dict[str, Any]:
        return {
            "net": self._require_net().state_dict(),
            "optimizer": self.optimizer.state_dict(),
            "steps": self.steps,
        }

    def load_state_dict(self, state: dict[str, Any]) -> None:
        self._require_net().load_state_dict(state["net"])
        self.optimizer.load_state_dict(state["optimizer"])
        self.steps = int(state["steps"])

    def save_state(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        torch.save(self.state_dict(), path)

    def restore_state(self, path: str | Path) -> None:
        self.load_state_dict(torch.load(path, map_location=self.device, weights_only=True))
