"""Tests for the training loop and evaluator, driven by a scripted emulator."""

from __future__ import annotations

from pathlib import Path

import gymnasium as gym
import numpy as np
import pytest

from deepframe.agents.base import FunctionApproximator
from deepframe.agents.dqn import DQN
from deepframe.memory.frame_stack import FrameStack
from deepframe.training import trainer
from deepframe.training.evaluator import evaluate, start_episode
from deepframe.training.trainer import clip_reward, get_epsilon, train

_CFG = {"agent": {"epsilon_start": 1.0, "epsilon_end": 0.1, "epsilon_decay_steps": 100}}

EPISODE_LENGTH = 5
# Gray-row palette codes 2, 4, ..., 14 decode to these intensities
_GRAY = {2: 0x4A, 4: 0x6F, 6: 0x8E, 8: 0xAA, 10: 0xC0, 12: 0xD6, 14: 0xEC}
PREDICTED_VALUE = 0x4A


class ScriptedAtariEnv(gym.Env):
    """Emulator stand-in with constant-colour screens and fixed-length episodes.

    The screen at step *t* of an episode is filled with palette code
    ``2 * (t % 7 + 1)``.  Step 2 pays +5 and step 3 pays -3.  Episodes
    alternate between ending by termination and by truncation.
    """

    def __init__(self) -> None:
        self.action_space = gym.spaces.Discrete(3)
        self.observation_space = gym.spaces.Box(0, 255, (210, 160), np.uint8)
        self.ale = self
        self.t = 0
        self.episodes = 0
        self.closed = False

    def getScreen(self) -> np.ndarray:  # noqa: N802 - mirrors the ALE interface
        return np.full((210, 160), 2 * (self.t % 7 + 1), dtype=np.uint8)

    def reset(self, *, seed: int | None = None, options: dict | None = None):
        super().reset(seed=seed)
        self.t = 0
        return self.getScreen(), {}

    def step(self, action: int):
        assert self.action_space.contains(action)
        self.t += 1
        reward = {2: 5.0, 3: -3.0}.get(self.t, 0.0)
        done = self.t == EPISODE_LENGTH
        terminated = done and self.episodes % 2 == 0
        truncated = done and self.episodes % 2 == 1
        if done:
            self.episodes += 1
        return self.getScreen(), reward, terminated, truncated, {}

    def close(self) -> None:
        self.closed = True


class ConstantApproximator(FunctionApproximator):
    """Predicts a uniform frame and counts training steps."""

    def __init__(self, batch_size: int, depth: int, size: int) -> None:
        self._shape = (batch_size, depth, size, size)
        self.steps = 0

    @property
    def batch_size(self) -> int:
        return self._shape[0]

    @property
    def input_shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def target_shape(self) -> tuple[int, ...]:
        return (self._shape[0], *self._shape[2:])

    def initialize(self) -> None:
        pass

    def predict(self, inputs: np.ndarray) -> np.ndarray:
        return np.full(self.target_shape, PREDICTED_VALUE, dtype=np.float32)

    def train_step(self, inputs: np.ndarray, targets: np.ndarray) -> dict[str, float]:
        assert inputs.shape == self.input_shape
        assert targets.shape == self.target_shape
        self.steps += 1
        return {"train/loss": 0.0}

    def load_weights(self, path) -> None:
        pass

    def save_weights(self, path) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        Path(path).write_text("weights")

    def save_state(self, path) -> None:
        Path(path).write_text("state")

    def restore_state(self, path) -> None:
        pass


class RecordingLogger:
    def __init__(self, experiment_name: str, tracking_uri: str = "mlruns") -> None:
        self.metrics: list[tuple[dict[str, float], int | None]] = []
        self.frames: list[str] = []
        self.artifacts: list[Path] = []
        self.ended = False

    def log_params(self, params: dict, prefix: str = "") -> None:
        pass

    def log_metrics(self, metrics: dict[str, float], step: int | None = None) -> None:
        self.metrics.append((dict(metrics), step))

    def log_frame(self, frame: np.ndarray, name: str, step: int) -> None:
        self.frames.append(f"{name}_{step}")

    def log_artifact(self, path) -> None:
        self.artifacts.append(Path(path))

    def end(self) -> None:
        self.ended = True


@pytest.fixture
def loop_config(tmp_path: Path) -> dict:
    return {
        "seed": 0,
        "env": {"id": "Scripted", "frame_stack": 2, "legal_actions": [0, 1, 2]},
        "preprocess": {"frame_size": 36, "crop_fraction": 0.92, "left_crop": 8},
        "agent": {
            "batch_size": 2,
            "epsilon_start": 1.0,
            "epsilon_end": 0.1,
            "epsilon_decay_steps": 10,
        },
        "replay": {"capacity": 100, "min_size": 5},
        "training": {
            "total_steps": 12,
            "train_freq": 1,
            "log_freq": 1,
            "eval_freq": 12,
            "eval_episodes": 1,
            "eval_epsilon": 0.05,
            "checkpoint_freq": 100,
        },
        "paths": {"checkpoint_dir": str(tmp_path / "ckpt")},
        "mlflow": {"experiment_name": "test", "tracking_uri": "unused"},
    }


def _dqn(config: dict) -> DQN:
    approximator = ConstantApproximator(
        config["agent"]["batch_size"],
        config["env"]["frame_stack"],
        config["preprocess"]["frame_size"],
    )
    dqn = DQN(approximator, [0, 1, 2], config, np.random.default_rng(0))
    dqn.initialize()
    return dqn


# ── helpers ───────────────────────────────────────────────────────────────


def test_epsilon_schedule() -> None:
    assert get_epsilon(0, _CFG) == pytest.approx(1.0)
    assert get_epsilon(50, _CFG) == pytest.approx(0.55)
    assert get_epsilon(100, _CFG) == pytest.approx(0.1)
    assert get_epsilon(10_000, _CFG) == pytest.approx(0.1)


@pytest.mark.parametrize(
    "raw, clipped", [(0, 0.0), (1, 1.0), (-1, -1.0), (4, 1.0), (-20, -1.0), (0.5, 0.5)]
)
def test_clip_reward(raw: float, clipped: float) -> None:
    assert clip_reward(raw) == clipped


def test_start_episode_warms_stack_with_first_frame(loop_config: dict) -> None:
    env = ScriptedAtariEnv()
    env.t = 3
    stack = FrameStack(depth=2)
    start_episode(env, stack, loop_config)

    frames = stack.frames()
    assert frames[0] is frames[1]
    assert (frames[0] == _GRAY[2]).all()


# ── training loop ─────────────────────────────────────────────────────────


@pytest.fixture
def trained(loop_config: dict, monkeypatch: pytest.MonkeyPatch):
    envs: list[ScriptedAtariEnv] = []
    loggers: list[RecordingLogger] = []

    def make_env(config: dict, render_mode: str | None = None) -> ScriptedAtariEnv:
        envs.append(ScriptedAtariEnv())
        return envs[-1]

    def make_logger(**kwargs) -> RecordingLogger:
        loggers.append(RecordingLogger(**kwargs))
        return loggers[-1]

    monkeypatch.setattr(trainer, "make_atari_env_from_config", make_env)
    monkeypatch.setattr(trainer, "ExperimentLogger", make_logger)

    dqn = _dqn(loop_config)
    train(dqn, loop_config)
    return dqn, envs, loggers[0]


def test_train_stores_one_transition_per_step(trained) -> None:
    dqn, _, _ = trained
    assert len(dqn.memory) == 12


def test_terminated_step_has_no_next_frame(trained) -> None:
    dqn, _, _ = trained
    transitions = list(dqn.memory)
    # Episode 1 terminates on step 5
    assert transitions[4].next_frame is None
    assert all(t.next_frame is not None for i, t in enumerate(transitions) if i != 4)


def test_truncated_step_keeps_next_frame(trained) -> None:
    dqn, _, _ = trained
    # Episode 2 is truncated on step 10, when the screen shows code 12
    truncated = dqn.memory[9]
    assert truncated.next_frame is not None
    assert (truncated.next_frame == _GRAY[12]).all()


def test_rewards_are_clipped(trained) -> None:
    dqn, _, _ = trained
    rewards = [t.reward for t in dqn.memory]
    assert all(-1.0 <= r <= 1.0 for r in rewards)
    assert rewards[1] == 1.0 and rewards[2] == -1.0
    assert rewards[6] == 1.0 and rewards[7] == -1.0


def test_stack_rewarmed_after_episode_end(trained) -> None:
    dqn, _, _ = trained
    first_of_episode = dqn.memory[5].state
    assert first_of_episode[0] is first_of_episode[1]
    assert (first_of_episode[0] == _GRAY[2]).all()


def test_next_frame_becomes_newest_state_frame(trained) -> None:
    dqn, _, _ = trained
    for i in (0, 1, 2, 3, 5, 6):
        assert dqn.memory[i + 1].state[-1] is dqn.memory[i].next_frame


def test_updates_wait_for_min_size(trained) -> None:
    dqn, _, logger = trained
    # min_size 5 is reached on step 5, then one update per step up to 12
    assert dqn.approximator.steps == 8
    train_steps = [step for metrics, step in logger.metrics if "train/loss" in metrics]
    assert train_steps == list(range(5, 13))


def test_train_logs_and_cleans_up(trained, loop_config: dict) -> None:
    _, envs, logger = trained
    episode_rewards = [m["episode/reward"] for m, _ in logger.metrics if "episode/reward" in m]
    assert episode_rewards == [2.0, 2.0]
    assert logger.frames == ["predicted_12"]
    assert any("eval/prediction_mse" in m for m, _ in logger.metrics)
    assert logger.ended
    assert all(env.closed for env in envs)
    assert (Path(loop_config["paths"]["checkpoint_dir"]) / "model_final.pt").exists()


# ── evaluator ─────────────────────────────────────────────────────────────


def test_evaluate_reports_prediction_error(loop_config: dict) -> None:
    dqn = _dqn(loop_config)
    metrics = evaluate(dqn, ScriptedAtariEnv(), loop_config, n_episodes=1)

    assert metrics["length_mean"] == EPISODE_LENGTH
    assert metrics["reward_mean"] == 2.0
    assert metrics["reward_std"] == 0.0
    # Steps 1-4 show codes 4, 6, 8, 10; the terminal step 5 is not scored
    expected = np.mean([(_GRAY[c] - PREDICTED_VALUE) ** 2 for c in (4, 6, 8, 10)])
    assert metrics["prediction_mse"] == pytest.approx(expected)


def test_evaluate_scores_truncated_final_step(loop_config: dict) -> None:
    dqn = _dqn(loop_config)
    env = ScriptedAtariEnv()
    env.episodes = 1  # next episode is truncated
    metrics = evaluate(dqn, env, loop_config, n_episodes=1)

    expected = np.mean([(_GRAY[c] - PREDICTED_VALUE) ** 2 for c in (4, 6, 8, 10, 12)])
    assert metrics["prediction_mse"] == pytest.approx(expected)
