"""Observation encoder for the navigation agent.

The observation is the agent's own planar velocity and nothing else:

    obs = [vx, vz]

No target or obstacle features are included. The agent has to learn to
navigate from self-motion plus the distance-shaped reward, and adding
target-relative features would make it a different learning problem.
"""

import numpy as np

OBS_DIM = 2


class ObservationEncoder:
    """Builds the fixed-size observation vector from an ``AgentState``."""

    obs_dim = OBS_DIM

    def encode(self, agent_state) -> np.ndarray:
        """Return ``[vx, vz]`` as float32. Zeros when velocity is unavailable."""
        velocity = getattr(agent_state, "velocity", None)
        if velocity is None:
            return np.zeros(OBS_DIM, dtype=np.float32)
        return np.array([velocity[0], velocity[1]], dtype=np.float32)
