"""Baseline policies for comparison against trained PPO agents.

All expose the SB3 ``predict(obs, deterministic) -> (action, state)`` API so
they plug into the evaluation runner in place of a model.
"""

import numpy as np


class RandomPolicy:
    """Uniform random action in [-1, 1]^2."""

    def __init__(self, seed: int | None = None):
        self.rng = np.random.default_rng(seed)

    def predict(self, obs, deterministic=False):
        return self.rng.uniform(-1.0, 1.0, size=2).astype(np.float32), None


class StillPolicy:
    """Never moves. Collects step and idle penalties until timeout."""

    def predict(self, obs, deterministic=False):
        return np.zeros(2, dtype=np.float32), None


class ConstantDirectionPolicy:
    """Drives in a fixed planar direction until something is hit.

    Args:
        direction: Raw action ``(a0, a1)`` repeated every tick.
    """

    def __init__(self, direction=(1.0, 0.0)):
        self.direction = np.asarray(direction, dtype=np.float32)

    def predict(self, obs, deterministic=False):
        return self.direction.copy(), None


BASELINES = {
    "random": RandomPolicy,
    "still": StillPolicy,
    "constant": ConstantDirectionPolicy,
}
