"""Action mapping: raw policy output -> unit-length planar motion command.

Each component is clamped to [-1, 1] first and the pair is then normalized,
so an out-of-range action can never produce more than unit magnitude. The
physics side multiplies the command by its move speed.
"""

from __future__ import annotations

import enum

import numpy as np


class ControlMode(enum.Enum):
    """Who produces the raw action for an agent."""

    POLICY_DRIVEN = "policy"
    MANUALLY_DRIVEN = "manual"


def map_action(raw_action) -> np.ndarray:
    """Clamp ``(a0, a1)`` to [-1, 1] and normalize to unit length.

    Non-finite components are treated as 0. The zero vector stays zero.

    Returns:
        float64 array ``[mx, mz]`` with magnitude 0 or 1.
    """
    a = np.asarray(raw_action, dtype=np.float64).reshape(-1)[:2]
    a = np.where(np.isfinite(a), a, 0.0)
    a = np.clip(a, -1.0, 1.0)
    norm = np.hypot(a[0], a[1])
    if norm < 1e-12:
        return np.zeros(2)
    return a / norm
