"""Convolutional encoder/decoder that predicts the next frame."""

from __future__ import annotations

import torch
import torch.nn as nn


def _conv_out(size: int, kernel: int, stride: int) -> int:
    return (size - kernel) // stride + 1


class FramePredictionCNN(nn.Module):
    """Encode a stack of frames and decode a single predicted frame.

    Expects input of shape ``(B, C, S, S)`` with intensities in [0, 255]
    (uint8 or float) and normalises to ``[0, 1]`` in the forward pass.
    Output has shape ``(B, S, S)`` in the same [0, 1] scale.

    Architecture:
        conv1(8x8, stride 4, 32) → ReLU →
        conv2(4x4, stride 2, 64) → ReLU →
        flatten → ip1(512) → ReLU → ip2(64 * h2 * h2) → ReLU →
        deconv1(4x4, stride 2, 32) → ReLU →
        deconv2(8x8, stride 4, 1)
    """

    def __init__(self, in_channels: int = 4, frame_size: int = 84, hidden: int = 512) -> None:
        super().__init__()
        h1 = _conv_out(frame_size, 8, 4)
        h2 = _conv_out(h1, 4, 2)
        if h2 < 1:
            raise ValueError(f"Frame size {frame_size} is too small for the encoder")
        self.frame_size = frame_size
        self._code_shape = (64, h2, h2)

        self.conv1 = nn.Conv2d(in_channels, 32, kernel_size=8, stride=4)
        self.conv2 = nn.Conv2d(32, 64, kernel_size=4, stride=2)
        self.ip1 = nn.Linear(64 * h2 * h2, hidden)
        self.ip2 = nn.Linear(hidden, 64 * h2 * h2)
        # output_padding restores the sizes lost to floor division in the encoder
        self.deconv1 = nn.ConvTranspose2d(
            64, 32, kernel_size=4, stride=2, output_padding=h1 - ((h2 - 1) * 2 + 4)
        )
        self.deconv2 = nn.ConvTranspose2d(
            32, 1, kernel_size=8, stride=4, output_padding=frame_size - ((h1 - 1) * 4 + 8)
        )

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        if x.dtype == torch.uint8:
            x = x.float()
        x = x / 255.0
        x = torch.relu(self.conv1(x))
        x = torch.relu(self.conv2(x))
        x = x.reshape(x.size(0), -1)
        x = torch.relu(self.ip1(x))
        x = torch.relu(self.ip2(x))
        x = x.reshape(x.size(0), *self._code_shape)
        x = torch.relu(self.deconv1(x))
        x = self.deconv2(x)
        return x.squeeze(1)

    def named_layers(self) -> dict[str, nn.Module]:
        """Parameterised layers in forward order."""
        return {
            "conv1": self.conv1,
            "conv2": self.conv2,
            "ip1": self.ip1,
            "ip2": self.ip2,
            "deconv1": self.deconv1,
            "deconv2": self.deconv2,
        }
