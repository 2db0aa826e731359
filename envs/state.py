"""Plain state records shared by the episode components.

``AgentState`` and ``TargetState`` are mutable and reused across episodes.
``EpisodeContext`` is immutable: every tick produces a new context with
``dataclasses.replace``, so a reset swaps in a complete context at once.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

import numpy as np


class TerminationCause(enum.Enum):
    NONE = "none"
    GOAL = "goal"
    OBSTACLE = "obstacle"
    TIMEOUT = "timeout"


@dataclass
class AgentState:
    """Planar kinematic state of the agent.

    ``velocity`` is None when the physics source has no velocity to report.
    ``height`` is the out-of-plane coordinate and is never resampled.
    """

    position: np.ndarray = field(default_factory=lambda: np.zeros(2))
    velocity: np.ndarray | None = field(default_factory=lambda: np.zeros(2))
    height: float = 0.5

    @property
    def speed(self) -> float:
        if self.velocity is None:
            return 0.0
        return float(np.hypot(self.velocity[0], self.velocity[1]))


@dataclass
class TargetState:
    position: np.ndarray = field(default_factory=lambda: np.zeros(2))


@dataclass(frozen=True)
class EpisodeContext:
    step_index: int = 0
    max_steps: int = 0
    cumulative_reward: float = 0.0
    prev_distance_to_target: float = 0.0
    termination_cause: TerminationCause = TerminationCause.NONE

    @property
    def active(self) -> bool:
        return self.termination_cause is TerminationCause.NONE


@dataclass(frozen=True)
class RewardTerms:
    """Per-tick reward breakdown. ``total`` is the sum of the four terms."""

    step_penalty: float = 0.0
    progress_reward: float = 0.0
    idle_penalty: float = 0.0
    terminal_bonus: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.step_penalty
            + self.progress_reward
            + self.idle_penalty
            + self.terminal_bonus
        )

    def as_dict(self) -> dict:
        return {
            "step_penalty": self.step_penalty,
            "progress_reward": self.progress_reward,
            "idle_penalty": self.idle_penalty,
            "terminal_bonus": self.terminal_bonus,
        }


@dataclass(frozen=True)
class EpisodeSummary:
    """What the reporting sink receives when an episode ends."""

    cumulative_reward: float
    termination_cause: TerminationCause
    episode_length: int


def planar_distance(a, b) -> float:
    """Euclidean distance in the world plane."""
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))
