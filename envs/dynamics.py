"""Planar point-mass physics used as the default physics collaborator.

The body follows the motion command directly:

    v = command * move_speed
    p_next = p + v * dt

Height is frozen, there is no rotation. After each integration step the body
disc is tested against the target disc and the obstacle map, and the tags
of everything it touches are queued as collision events ("target",
"obstacle", "wall"). Arena boundary clipping keeps the body inside the
bounds even when the perimeter walls are missing from the map.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np

from envs.arena import TARGET_TAG, ObstacleMap


class PhysicsBackend(Protocol):
    """What the episode core needs from a physics engine."""

    def set_motion_command(self, command: np.ndarray) -> None: ...

    def step(self) -> None: ...

    def get_kinematic_state(self) -> tuple[np.ndarray, np.ndarray | None]: ...

    def drain_collisions(self) -> list[str]: ...

    def place_agent(self, position: np.ndarray) -> None: ...

    def place_target(self, position: np.ndarray) -> None: ...


def integrate(
    position: np.ndarray,
    velocity: np.ndarray,
    dt: float,
    bounds,
    radius: float,
) -> tuple[np.ndarray, bool]:
    """Euler step with boundary clipping.

    Returns:
        (new_position, clipped): clipped is True if the body hit the bounds.
    """
    new_pos = position + velocity * dt
    lo = np.array([bounds.min_x + radius, bounds.min_z + radius])
    hi = np.array([bounds.max_x - radius, bounds.max_z - radius])
    clipped_pos = np.clip(new_pos, lo, hi)
    return clipped_pos, bool(np.any(clipped_pos != new_pos))


class PointMassBody:
    """Velocity-controlled disc moving in the arena plane.

    Args:
        obstacle_map: Static obstacles and arena bounds.
        move_speed: Speed for a unit motion command.
        dt: Integration timestep in seconds.
        agent_radius: Radius of the agent disc.
        target_radius: Radius of the target disc.
    """

    def __init__(
        self,
        obstacle_map: ObstacleMap,
        move_speed: float = 20.0,
        dt: float = 0.02,
        agent_radius: float = 0.5,
        target_radius: float = 0.5,
    ):
        self.obstacle_map = obstacle_map
        self.move_speed = move_speed
        self.dt = dt
        self.agent_radius = agent_radius
        self.target_radius = target_radius

        self.position = obstacle_map.bounds.center
        self.velocity = np.zeros(2)
        self.target_position = obstacle_map.bounds.center
        self.command = np.zeros(2)
        self.wall_contact = False
        self._pending: list[str] = []

    def set_motion_command(self, command: np.ndarray) -> None:
        self.command = np.asarray(command, dtype=np.float64)[:2].copy()

    def step(self) -> None:
        self.velocity = self.command * self.move_speed
        self.position, self.wall_contact = integrate(
            self.position, self.velocity, self.dt,
            self.obstacle_map.bounds, self.agent_radius,
        )

        d_target = np.hypot(*(self.position - self.target_position))
        if d_target <= self.agent_radius + self.target_radius:
            self._pending.append(TARGET_TAG)
        self._pending.extend(
            self.obstacle_map.contacts(self.position, self.agent_radius)
        )

    def get_kinematic_state(self) -> tuple[np.ndarray, np.ndarray]:
        return self.position.copy(), self.velocity.copy()

    def drain_collisions(self) -> list[str]:
        tags, self._pending = self._pending, []
        return tags

    def place_agent(self, position: np.ndarray) -> None:
        """Teleport the agent and zero its motion."""
        self.position = np.asarray(position, dtype=np.float64)[:2].copy()
        self.velocity = np.zeros(2)
        self.command = np.zeros(2)
        self.wall_contact = False
        self._pending = []

    def place_target(self, position: np.ndarray) -> None:
        self.target_position = np.asarray(position, dtype=np.float64)[:2].copy()
